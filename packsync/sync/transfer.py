# Packsync Transfer Agent
# Streaming HTTP downloads with retries and atomic placement

import logging
import time
from collections.abc import Callable
from pathlib import Path
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from packsync import __version__
from packsync.exceptions import TransferError
from packsync.utils.paths import atomic_replace, create_temp_file, sanitize_url

logger = logging.getLogger(__name__)

# (bytes_done, percent, bytes_total); bytes_total is 0 when unknown
ProgressCallback = Callable[[int, float, int], None]


class Downloader:
    """
    Fetches one file at a time from a URL into a destination path.

    Bytes are streamed into a hidden temporary file in the destination
    directory and renamed onto the destination only after the transfer
    completed, so a failed transfer never leaves a file under the final name.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        *,
        timeout: int = 60,
        max_retries: int = 3,
        chunk_size: int = 65536,
        retry_delay: float = 0.5,
        user_agent: Optional[str] = None,
    ):
        """
        Initialize downloader.

        Args:
            session: Optional requests session (creates one if not provided).
            timeout: Request timeout in seconds.
            max_retries: Attempts per file before giving up.
            chunk_size: Streaming chunk size in bytes.
            retry_delay: Base delay for exponential backoff between attempts.
            user_agent: User-Agent header for a session created here.
        """
        self._owns_session = session is None
        self.session = session or self._create_session()
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.chunk_size = chunk_size
        self.retry_delay = retry_delay

        if self._owns_session:
            self.session.headers.update({"User-Agent": user_agent or f"packsync/{__version__}", "Accept": "*/*"})

    @staticmethod
    def _create_session() -> requests.Session:
        session = requests.Session()
        adapter = HTTPAdapter(max_retries=Retry(total=0))  # Retries are handled in fetch()
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        return session

    def close(self) -> None:
        """Close the session if we own it."""
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "Downloader":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def fetch(self, url: str, destination: Path, on_progress: Optional[ProgressCallback] = None) -> None:
        """
        Download a URL to a destination path.

        Args:
            url: Source URL.
            destination: Final file path.
            on_progress: Called with (bytes_done, percent, bytes_total) as chunks arrive.

        Raises:
            TransferError: If all attempts failed.
        """
        safe_url = sanitize_url(url)
        last_error: Optional[BaseException] = None

        for attempt in range(1, self.max_retries + 1):
            try:
                self._fetch_once(url, destination, on_progress)
                logger.debug(f"Downloaded {destination.name} from {safe_url}")
                return
            except requests.RequestException as e:
                last_error = e
                if attempt < self.max_retries:
                    wait_time = self.retry_delay * (2 ** (attempt - 1))
                    logger.warning(
                        f"Download of {destination.name} failed (attempt {attempt}/{self.max_retries}): "
                        f"{type(e).__name__}. Retrying in {wait_time:.1f}s..."
                    )
                    time.sleep(wait_time)
            except OSError as e:
                # Local write failures are not retried
                raise TransferError(safe_url, e) from e

        logger.error(f"Failed to download {safe_url} after {self.max_retries} attempts")
        raise TransferError(safe_url, last_error) from last_error

    def _fetch_once(self, url: str, destination: Path, on_progress: Optional[ProgressCallback]) -> None:
        temp_path = create_temp_file(destination.parent, destination.name)
        try:
            with self.session.get(url, timeout=self.timeout, stream=True) as response:
                response.raise_for_status()
                total = int(response.headers.get("Content-Length") or 0)
                done = 0

                with open(temp_path, "wb") as f:
                    for chunk in response.iter_content(chunk_size=self.chunk_size):
                        if not chunk:
                            continue
                        f.write(chunk)
                        done += len(chunk)
                        if on_progress is not None:
                            percent = min(100.0, done * 100.0 / total) if total else 0.0
                            on_progress(done, percent, total)

            atomic_replace(temp_path, destination)
        except BaseException:
            temp_path.unlink(missing_ok=True)
            raise

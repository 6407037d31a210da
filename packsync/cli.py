"""Click-based CLI for packsync - content directory sync before launch."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from packsync import __version__
from packsync.config import (
    Environment,
    PacksyncConfig,
    ensure_config_exists,
    generate_default_config,
    get_config_path,
    load_or_default_config,
    update_category_enabled,
    validate_config_file,
)
from packsync.exceptions import CategorySyncError, ConfigurationError, ManifestError
from packsync.logger import setup_logging
from packsync.manifest import Manifest, load_manifest
from packsync.output.console import Console, RichProgressSink
from packsync.sync.engine import SyncEngine

console = Console()

config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to config file (default: ~/.config/packsync/config.yaml or $PACKSYNC_CONFIG)",
)


def _load_config(
    config_path: Optional[Path],
    *,
    instance: Optional[Path] = None,
    environment: Optional[str] = None,
) -> PacksyncConfig:
    """Load configuration and apply command-line overrides, exiting on errors."""
    try:
        config = load_or_default_config(config_path)
    except ConfigurationError as e:
        console.print_error(str(e))
        raise SystemExit(1)

    updates = {}
    if instance is not None:
        updates["path"] = str(instance.expanduser())
    if environment is not None:
        updates["environment"] = Environment(environment)
    if updates:
        config = config.model_copy(update={"instance": config.instance.model_copy(update=updates)})
    if not config.output.colored:
        console.rich.no_color = True
    return config


def _load_manifest(config: PacksyncConfig, source: Optional[str]) -> Manifest:
    """Load the manifest from the override or the configured source, exiting on errors."""
    manifest_source = source or config.manifest.source
    if not manifest_source:
        console.print_error("No manifest source configured. Use --manifest or set manifest.source in the config.")
        raise SystemExit(1)

    try:
        return load_manifest(manifest_source, timeout=config.manifest.timeout)
    except ManifestError as e:
        console.print_error(str(e))
        raise SystemExit(1)


@click.group()
@click.version_option(version=__version__, prog_name="packsync")
def cli() -> None:
    """packsync - keep content directories in sync with a remote manifest.

    \b
    Run before launching the application: mods, resource packs and shader
    packs are downloaded, verified and cleaned up to match the manifest.

    \b
    Workflows:
      packsync config init     Create the default configuration
      packsync status          Preview what a sync would change
      packsync sync            Synchronize all enabled categories
    """
    pass


@cli.command()
@click.option("--category", "-c", help="Sync only this category")
@click.option("--manifest", "-m", "manifest_source", help="Manifest URL or file (overrides config)")
@click.option(
    "--instance",
    "-i",
    type=click.Path(file_okay=False, path_type=Path),
    help="Instance directory (overrides config)",
)
@click.option(
    "--environment",
    "-e",
    type=click.Choice([Environment.CLIENT.value, Environment.SERVER.value]),
    help="Run context (overrides config)",
)
@click.option("--verbose", "-v", is_flag=True, help="Show detailed output")
@config_option
def sync(
    category: Optional[str],
    manifest_source: Optional[str],
    instance: Optional[Path],
    environment: Optional[str],
    verbose: bool,
    config_path: Optional[Path],
) -> None:
    """Synchronize content directories with the manifest.

    Deletes files no longer in the manifest, re-downloads files that fail
    their integrity check and downloads missing files.
    """
    config = _load_config(config_path, instance=instance, environment=environment)
    verbose = verbose or config.output.verbose
    console.verbose = verbose
    setup_logging(console.rich, verbose=verbose, log_file=config.output.log_file)

    manifest = _load_manifest(config, manifest_source)

    try:
        with RichProgressSink(console.rich) as sink, SyncEngine(config, manifest, progress=sink) as engine:
            result = engine.sync(category_name=category)
    except KeyError as e:
        console.print_error(str(e).strip("'\""))
        raise SystemExit(1)
    except CategorySyncError as e:
        console.print_sync_error(e)
        raise SystemExit(1)

    console.print_sync_result(result)


@cli.command()
@click.option("--category", "-c", help="Show only this category")
@click.option("--manifest", "-m", "manifest_source", help="Manifest URL or file (overrides config)")
@click.option(
    "--instance",
    "-i",
    type=click.Path(file_okay=False, path_type=Path),
    help="Instance directory (overrides config)",
)
@click.option(
    "--environment",
    "-e",
    type=click.Choice([Environment.CLIENT.value, Environment.SERVER.value]),
    help="Run context (overrides config)",
)
@click.option("--verbose", "-v", is_flag=True, help="Also list files that are up to date")
@config_option
def status(
    category: Optional[str],
    manifest_source: Optional[str],
    instance: Optional[Path],
    environment: Optional[str],
    verbose: bool,
    config_path: Optional[Path],
) -> None:
    """Show what a sync would change, without changing anything."""
    config = _load_config(config_path, instance=instance, environment=environment)
    console.verbose = verbose or config.output.verbose
    if console.verbose:
        setup_logging(console.rich, verbose=True, log_file=config.output.log_file)

    manifest = _load_manifest(config, manifest_source)

    try:
        with SyncEngine(config, manifest) as engine:
            plans = engine.plan(category_name=category)
    except KeyError as e:
        console.print_error(str(e).strip("'\""))
        raise SystemExit(1)
    except CategorySyncError as e:
        console.print_sync_error(e)
        raise SystemExit(1)

    console.print_plans(plans)
    if not any(plan.has_changes for plan in plans.values()):
        console.print()
        console.print_success("Everything is in sync!")


# ============================================================================
# Configuration Commands
# ============================================================================


@cli.group()
def config() -> None:
    """Manage the packsync configuration file."""
    pass


@config.command("init")
@click.option("--force", "-f", is_flag=True, help="Overwrite an existing configuration")
@config_option
def config_init(force: bool, config_path: Optional[Path]) -> None:
    """Create the default configuration file."""
    path = config_path or get_config_path()
    if path.exists() and force:
        path.write_text(generate_default_config(), encoding="utf-8")
        console.print_success(f"Configuration reset: {path}")
        return

    path, created = ensure_config_exists(path)
    if created:
        console.print_success(f"Configuration created: {path}")
    else:
        console.print_warning(f"Configuration already exists: {path} (use --force to overwrite)")


@config.command("show")
@config_option
def config_show(config_path: Optional[Path]) -> None:
    """Show the configuration file contents."""
    path = config_path or get_config_path()
    if not path.exists():
        console.print_error(f"Configuration file not found: {path}\nRun 'packsync config init' to create one.")
        raise SystemExit(1)
    console.print(path.read_text(encoding="utf-8"), markup=False, highlight=False)


@config.command("validate")
@config_option
def config_validate(config_path: Optional[Path]) -> None:
    """Validate the configuration file."""
    path = config_path or get_config_path()
    valid, errors = validate_config_file(path)
    if valid:
        console.print_success(f"Configuration is valid: {path}")
        return

    console.print_error(f"Configuration is invalid: {path}")
    for error in errors:
        console.print(f"  • {error}", markup=False)
    raise SystemExit(1)


@config.command("path")
def config_path_cmd() -> None:
    """Print the configuration file path."""
    click.echo(str(get_config_path()))


# ============================================================================
# Category Commands
# ============================================================================


@cli.group()
def categories() -> None:
    """List, enable and disable content categories."""
    pass


@categories.command("list")
@click.option("--all", "-a", "show_all", is_flag=True, help="Include disabled categories")
@config_option
def categories_list(show_all: bool, config_path: Optional[Path]) -> None:
    """List configured categories."""
    config = _load_config(config_path)
    info = {
        name: {
            "enabled": cat.enabled,
            "directory": str(config.get_category_path(name)),
            "extension": cat.extension,
            "description": cat.description,
        }
        for name, cat in config.sync_categories.items()
    }
    console.print_categories_list(info, show_all=show_all)


def _set_category_enabled(name: str, enabled: bool, config_path: Optional[Path]) -> None:
    try:
        update_category_enabled(name, enabled, config_path)
    except FileNotFoundError as e:
        console.print_error(str(e))
        raise SystemExit(1)
    except (KeyError, ConfigurationError) as e:
        console.print_error(str(e).strip("'\""))
        raise SystemExit(1)
    console.print_success(f"Category '{name}' {'enabled' if enabled else 'disabled'}")


@categories.command("enable")
@click.argument("name")
@config_option
def categories_enable(name: str, config_path: Optional[Path]) -> None:
    """Enable category NAME."""
    _set_category_enabled(name, True, config_path)


@categories.command("disable")
@click.argument("name")
@config_option
def categories_disable(name: str, config_path: Optional[Path]) -> None:
    """Disable category NAME."""
    _set_category_enabled(name, False, config_path)
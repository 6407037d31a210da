"""packsync - content directory synchronization before launch.

Keeps mods, resource packs, shader packs and similar content directories
of an application instance in sync with a declarative remote manifest.
"""

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "ContentItem",
    "IntegrityInfo",
    "Manifest",
    "SyncPolicy",
    "load_manifest",
    "CategoryHandler",
    "SyncEngine",
    "SyncResult",
    "PacksyncError",
]


def __getattr__(name: str):
    """Lazy import to avoid loading dependencies during setup."""
    if name in ("ContentItem", "IntegrityInfo", "Manifest", "SyncPolicy", "load_manifest"):
        from packsync import manifest

        return getattr(manifest, name)
    if name in ("CategoryHandler", "SyncEngine", "SyncResult"):
        from packsync import sync

        return getattr(sync, name)
    if name == "PacksyncError":
        from packsync.exceptions import PacksyncError

        return PacksyncError
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

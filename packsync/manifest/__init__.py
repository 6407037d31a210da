# Packsync Manifest Module
# Remote manifest models and loading

from packsync.manifest.loader import load_manifest, parse_manifest
from packsync.manifest.schema import CategoryManifest, ContentItem, IntegrityInfo, Manifest, SyncPolicy

__all__ = [
    "ContentItem",
    "IntegrityInfo",
    "SyncPolicy",
    "CategoryManifest",
    "Manifest",
    "load_manifest",
    "parse_manifest",
]

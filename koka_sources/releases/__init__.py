"""Release listing, hashing and mapping construction."""

from .manager import ReleaseManager, UpdateReport
from .download_manager import DownloadManager
from .models import AssetLocation, Platform, ReleaseEntry, VersionMapping, validate_mapping
from .versioning import SemVer, normalize_version, sort_versions

__all__ = [
    "AssetLocation",
    "DownloadManager",
    "Platform",
    "ReleaseEntry",
    "ReleaseManager",
    "SemVer",
    "UpdateReport",
    "VersionMapping",
    "normalize_version",
    "sort_versions",
    "validate_mapping",
]

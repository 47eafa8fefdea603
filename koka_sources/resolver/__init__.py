"""Version resolution for the packaging step."""

from .resolver import ResolvedPackages, available_for, host_platform, latest, resolve_packages

__all__ = ["ResolvedPackages", "available_for", "host_platform", "latest", "resolve_packages"]

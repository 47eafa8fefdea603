"""Error types raised while building and resolving release metadata."""

from typing import Optional


class KokaSourcesError(RuntimeError):
    """Base class for all errors raised by this package."""


class NetworkError(KokaSourcesError):
    """The release index could not be reached."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Could not reach {url}: {reason}")


class ParseError(KokaSourcesError):
    """The release index answered with something we cannot read."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Malformed response from {url}: {reason}")


class HashComputeError(KokaSourcesError):
    """Downloading an asset to hash it failed or was truncated."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to compute SHA256 for {url}: {reason}")


class InvalidMapping(KokaSourcesError):
    """A version mapping failed structural validation."""


class NoReleaseForPlatform(KokaSourcesError):
    def __init__(self, platform: str):
        self.platform = platform
        super().__init__(f"No release available for platform {platform}")


class UnknownPlatform(KokaSourcesError, ValueError):
    def __init__(self, value: str, detail: Optional[str] = None):
        self.value = value
        message = f"Unsupported platform: {value}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)

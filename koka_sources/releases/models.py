"""Data models for Koka releases and the persisted sources mapping."""

from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, RootModel, ValidationError, model_validator
from typing import Dict, Iterator, List, Tuple

from ..errors import InvalidMapping, UnknownPlatform
from .versioning import try_parse


class Platform(str, Enum):
    """Supported (OS, architecture) pairs.

    The value is the Nix system name used as key in ``sources.json``;
    ``release_name`` is the suffix the release host uses in asset names.
    """

    X86_64_LINUX = ("x86_64-linux", "linux-x64", "linux", "x64")
    AARCH64_LINUX = ("aarch64-linux", "linux-arm64", "linux", "arm64")
    X86_64_DARWIN = ("x86_64-darwin", "macos-x64", "macos", "x64")
    AARCH64_DARWIN = ("aarch64-darwin", "macos-arm64", "macos", "arm64")
    X86_64_WINDOWS = ("x86_64-windows", "windows-x64", "windows", "x64")

    def __new__(cls, system: str, release_name: str, os_name: str, arch: str):
        obj = str.__new__(cls, system)
        obj._value_ = system
        obj.release_name = release_name
        obj.os_name = os_name
        obj.arch = arch
        return obj

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value) -> "Platform":
        """Accept a member, a Nix system name or a release-host name."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        for member in cls:
            if text in (member.value, member.release_name):
                return member
        raise UnknownPlatform(str(value))


class ReleaseEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    sha256: str = Field(pattern=r"^[0-9a-f]{64}$")
    version: str


class AssetLocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    tag: str
    version: str
    platform: Platform
    url: str


class GitHubRelease(BaseModel):
    """One element of the GitHub releases listing."""
    tag_name: str
    draft: bool = False


class VersionMapping(RootModel[Dict[str, Dict[Platform, ReleaseEntry]]]):
    """version -> platform -> release entry, in insertion order."""

    root: Dict[str, Dict[Platform, ReleaseEntry]] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_invariants(self) -> "VersionMapping":
        for version, platforms in self.root.items():
            if try_parse(version) is None:
                raise ValueError(f"version key {version!r} is not a semantic version")
            if not platforms:
                raise ValueError(f"version {version} has no platform entries")
            for platform, entry in platforms.items():
                if entry.version != version:
                    raise ValueError(
                        f"entry {version}/{platform.value} carries version {entry.version}"
                    )
        return self

    def __iter__(self) -> Iterator[str]:
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def __contains__(self, version: object) -> bool:
        return version in self.root

    def __getitem__(self, version: str) -> Dict[Platform, ReleaseEntry]:
        return self.root[version]

    def versions(self) -> List[str]:
        return list(self.root)

    def items(self) -> List[Tuple[str, Dict[Platform, ReleaseEntry]]]:
        return list(self.root.items())

    def to_json_data(self) -> Dict[str, Dict[str, Dict[str, str]]]:
        return {
            version: {platform.value: entry.model_dump() for platform, entry in platforms.items()}
            for version, platforms in self.root.items()
        }


def validate_mapping(data) -> VersionMapping:
    """Validate raw or in-memory mapping data, raising InvalidMapping on failure."""
    try:
        return VersionMapping.model_validate(data)
    except ValidationError as e:
        raise InvalidMapping(f"invalid sources mapping: {e}") from e

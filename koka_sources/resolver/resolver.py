"""Version lookups over a persisted sources mapping."""

import platform as host
from dataclasses import dataclass
from typing import Dict, Optional, Union

from ..errors import NoReleaseForPlatform, UnknownPlatform
from ..releases.models import Platform, ReleaseEntry, VersionMapping
from ..releases.versioning import version_key

PlatformLike = Union[Platform, str]


@dataclass(frozen=True)
class ResolvedPackages:
    """What the packaging step consumes for one platform."""
    platform: Platform
    versions: Dict[str, ReleaseEntry]
    default: ReleaseEntry


def available_for(mapping: VersionMapping, platform: PlatformLike) -> Dict[str, ReleaseEntry]:
    """Versions that ship an asset for ``platform``, in mapping order."""
    target = Platform.parse(platform)
    return {
        version: platforms[target]
        for version, platforms in mapping.items()
        if target in platforms
    }


def latest(mapping: VersionMapping, platform: PlatformLike) -> ReleaseEntry:
    """The entry with the greatest semantic version available for ``platform``."""
    available = available_for(mapping, platform)
    if not available:
        raise NoReleaseForPlatform(Platform.parse(platform).value)
    return available[max(available, key=version_key)]


def resolve_packages(mapping: VersionMapping, platform: PlatformLike) -> ResolvedPackages:
    target = Platform.parse(platform)
    return ResolvedPackages(
        platform=target,
        versions=available_for(mapping, target),
        default=latest(mapping, target),
    )


def _normalize_os(system: str) -> str:
    s = system.lower()
    if s.startswith("win") or s.startswith("cygwin") or s.startswith("msys"):
        return "windows"
    if s.startswith("darwin") or s.startswith("mac"):
        return "macos"
    return s


def _normalize_arch(machine: str) -> str:
    m = machine.lower()
    if m in ("x86_64", "amd64", "x64"):
        return "x64"
    if m in ("aarch64", "arm64"):
        return "arm64"
    return m


def host_platform(system: Optional[str] = None, machine: Optional[str] = None) -> Platform:
    """Map ``platform.system()``/``platform.machine()`` spellings to a Platform."""
    system = system if system is not None else host.system()
    machine = machine if machine is not None else host.machine()
    os_name = _normalize_os(system)
    arch = _normalize_arch(machine)
    for member in Platform:
        if member.os_name == os_name and member.arch == arch:
            return member
    raise UnknownPlatform(f"{system}/{machine}", "no Koka release is built for this host")

"""Semantic version parsing and ordering for release tags."""

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple, Union

_SEMVER_RE = re.compile(
    r"^v?(?P<major>\d+)(?:\.(?P<minor>\d+))?(?:\.(?P<patch>\d+))?"
    r"(?:-(?P<pre>[0-9A-Za-z.-]+))?(?:\+(?P<build>[0-9A-Za-z.-]+))?$"
)


@dataclass(frozen=True)
class SemVer:
    major: int
    minor: int = 0
    patch: int = 0
    prerelease: Tuple[str, ...] = ()
    build: Optional[str] = field(default=None, compare=False)

    @classmethod
    def parse(cls, value: str) -> "SemVer":
        """Parse ``v2.4.1``, ``2.4.1-rc.1``, ``2.4`` and friends."""
        m = _SEMVER_RE.match(value.strip())
        if not m:
            raise ValueError(f"Not a semantic version: {value!r}")
        pre = m.group("pre")
        return cls(
            major=int(m.group("major")),
            minor=int(m.group("minor") or 0),
            patch=int(m.group("patch") or 0),
            prerelease=tuple(pre.split(".")) if pre else (),
            build=m.group("build"),
        )

    def sort_key(self) -> tuple:
        # A release sorts after all of its pre-releases.
        if not self.prerelease:
            return (self.major, self.minor, self.patch, 1, ())
        ids = tuple(
            (0, int(part), "") if part.isdigit() else (1, 0, part)
            for part in self.prerelease
        )
        return (self.major, self.minor, self.patch, 0, ids)

    def __lt__(self, other: "SemVer") -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __le__(self, other: "SemVer") -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self.sort_key() <= other.sort_key()

    def __gt__(self, other: "SemVer") -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self.sort_key() > other.sort_key()

    def __ge__(self, other: "SemVer") -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self.sort_key() >= other.sort_key()

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(self.prerelease)
        if self.build:
            text += "+" + self.build
        return text


def normalize_version(tag: str) -> str:
    """Strip the leading ``v`` of a release tag."""
    tag = tag.strip()
    return tag[1:] if tag.startswith("v") else tag


def try_parse(value: str) -> Optional[SemVer]:
    try:
        return SemVer.parse(value)
    except ValueError:
        return None


def version_key(value: Union[str, SemVer]) -> tuple:
    if isinstance(value, str):
        value = SemVer.parse(value)
    return value.sort_key()


def sort_versions(values: Iterable[str]) -> List[str]:
    """Sort version strings or tags ascending by semantic version."""
    return sorted(values, key=version_key)

"""Release listing and sources mapping builder."""

import asyncio
import logging
import aiohttp
from dataclasses import dataclass, field
from pydantic import TypeAdapter, ValidationError
from typing import Dict, List, Optional, Tuple

from ..config import UpdaterConfig
from ..errors import HashComputeError, NetworkError, ParseError
from ..utils import AsyncHTTPClient
from .download_manager import DownloadManager
from .models import AssetLocation, GitHubRelease, Platform, ReleaseEntry, VersionMapping, validate_mapping
from .versioning import normalize_version, try_parse, version_key

logger = logging.getLogger(__name__)

_RELEASES_ADAPTER = TypeAdapter(List[GitHubRelease])

# HEAD answers meaning the asset exists; GitHub redirects to its object store.
_PRESENT_STATUSES = {200, 301, 302, 303, 307, 308}


@dataclass
class UpdateReport:
    """What a rebuild did, for the summary line."""
    processed: List[str] = field(default_factory=list)
    added: List[str] = field(default_factory=list)
    dropped: List[str] = field(default_factory=list)
    skipped_platforms: List[Tuple[str, Platform, str]] = field(default_factory=list)

    def summary(self) -> str:
        text = f"{len(self.added)} of {len(self.processed)} versions added"
        if self.dropped:
            text += f", {len(self.dropped)} dropped ({', '.join(self.dropped)})"
        if self.skipped_platforms:
            text += f", {len(self.skipped_platforms)} platform assets skipped"
        return text


class ReleaseManager:
    PER_PAGE = 100

    def __init__(self, http: AsyncHTTPClient, config: Optional[UpdaterConfig] = None):
        self.http = http
        self.config = config or UpdaterConfig()
        self.downloads = DownloadManager(http, concurrent_downloads=self.config.concurrency)
        self.probe_semaphore = asyncio.Semaphore(self.config.concurrency)

    async def list_release_tags(self) -> List[str]:
        """Fetch all release tags, sorted ascending by semantic version."""
        url = self.config.api_url
        logger.info("Fetching releases from GitHub API...")
        releases: List[GitHubRelease] = []
        page = 1
        while True:
            try:
                data = await self.http.get(
                    url,
                    headers=self.config.api_headers(),
                    params={"per_page": self.PER_PAGE, "page": page},
                )
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                raise NetworkError(url, str(e) or type(e).__name__) from e
            except ValueError as e:
                # JSON decode failures surface as ValueError
                raise ParseError(url, str(e)) from e

            try:
                batch = _RELEASES_ADAPTER.validate_python(data)
            except ValidationError as e:
                raise ParseError(url, f"unexpected release listing: {e.error_count()} errors") from e

            releases.extend(batch)
            if len(batch) < self.PER_PAGE:
                break
            page += 1

        # One tag per normalized version, the first one listed wins.
        tags: Dict[str, str] = {}
        for release in releases:
            if release.draft:
                continue
            if try_parse(release.tag_name) is None:
                logger.warning("Ignoring release tag %s: not a semantic version", release.tag_name)
                continue
            version = normalize_version(release.tag_name)
            if version in tags:
                logger.warning("Ignoring release tag %s: version %s already provided by %s",
                               release.tag_name, version, tags[version])
                continue
            tags[version] = release.tag_name
        return sorted(tags.values(), key=version_key)

    def asset_location(self, tag: str, platform: Platform) -> AssetLocation:
        """Expected download location of ``platform``'s archive for ``tag``."""
        url = f"{self.config.download_base}/{tag}/koka-{tag}-{platform.release_name}.tar.gz"
        return AssetLocation(tag=tag, version=normalize_version(tag), platform=platform, url=url)

    async def resolve_asset_for_platform(self, tag: str, platform: Platform) -> Optional[AssetLocation]:
        """Probe the expected asset URL; None when the asset does not exist."""
        location = self.asset_location(tag, platform)
        async with self.probe_semaphore:
            try:
                status = await self.http.head(location.url)
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                logger.warning("Skipping platform %s (%s): probe failed: %s",
                               platform.value, platform.release_name, str(e) or type(e).__name__)
                return None
        if status not in _PRESENT_STATUSES:
            logger.info("Skipping platform %s (%s): asset not found",
                        platform.value, platform.release_name)
            return None
        return location

    async def compute_content_hash(self, url: str) -> str:
        return await self.downloads.compute_sha256(url)

    async def _build_platform(self, tag: str, platform: Platform,
                              report: UpdateReport) -> Optional[ReleaseEntry]:
        location = await self.resolve_asset_for_platform(tag, platform)
        if location is None:
            report.skipped_platforms.append((tag, platform, "asset not found"))
            return None
        logger.info("Processing platform: %s (%s)", platform.value, platform.release_name)
        try:
            sha256 = await self.compute_content_hash(location.url)
        except HashComputeError as e:
            logger.error("Failed to get SHA256 for %s, skipping: %s", platform.value, e.reason)
            report.skipped_platforms.append((tag, platform, e.reason))
            return None
        return ReleaseEntry(url=location.url, sha256=sha256, version=location.version)

    async def build_version_entry(self, tag: str,
                                  report: Optional[UpdateReport] = None) -> Optional[Dict[Platform, ReleaseEntry]]:
        """Build one version's platform sub-mapping; None when no platform has an asset."""
        report = report if report is not None else UpdateReport()
        logger.info("Processing version: %s", tag)
        platforms = list(Platform)
        results = await asyncio.gather(
            *(self._build_platform(tag, platform, report) for platform in platforms),
            return_exceptions=True,
        )

        entry: Dict[Platform, ReleaseEntry] = {}
        for platform, result in zip(platforms, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, Exception):
                logger.error("Unexpected failure for %s on %s: %r", tag, platform.value, result)
                report.skipped_platforms.append((tag, platform, repr(result)))
            elif isinstance(result, BaseException):
                raise result
            elif result is not None:
                entry[platform] = result

        if not entry:
            logger.warning("Skipping %s: no assets found for any platform", tag)
            return None
        return entry

    async def rebuild_mapping(self, max_versions: int,
                              report: Optional[UpdateReport] = None) -> VersionMapping:
        """Rebuild the mapping from the ``max_versions`` most recent release tags."""
        report = report if report is not None else UpdateReport()
        tags = await self.list_release_tags()
        selected = tags[-max_versions:] if max_versions > 0 else []
        report.processed.extend(normalize_version(tag) for tag in selected)

        entries = await asyncio.gather(*(self.build_version_entry(tag, report) for tag in selected))

        mapping: Dict[str, Dict[Platform, ReleaseEntry]] = {}
        # Newest first for readability; the resolver orders on its own.
        for tag, entry in reversed(list(zip(selected, entries))):
            version = normalize_version(tag)
            if entry is None:
                report.dropped.append(version)
                continue
            mapping[version] = entry
            report.added.append(version)
            logger.info("Added version: %s", tag)
        return validate_mapping(mapping)

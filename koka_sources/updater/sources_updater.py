"""Refreshes sources.json from the Koka GitHub releases."""

import logging
from typing import Optional

from ..config import UpdaterConfig
from ..releases import ReleaseManager, UpdateReport
from ..utils import AsyncHTTPClient
from .store import SourcesStore

logger = logging.getLogger(__name__)


class SourcesUpdater:
    def __init__(self, config: Optional[UpdaterConfig] = None, http: Optional[AsyncHTTPClient] = None):
        self.config = config or UpdaterConfig()
        self.http = http
        self.store = SourcesStore(self.config.sources_path)

    def _client(self) -> AsyncHTTPClient:
        return self.http or AsyncHTTPClient(
            headers=self.config.http_headers(),
            timeout=self.config.timeout,
            retries=self.config.retries,
        )

    async def update(self, max_versions: Optional[int] = None) -> UpdateReport:
        """Rebuild the mapping and persist it; the old file survives any failure."""
        max_versions = max_versions or self.config.num_versions
        report = UpdateReport()
        logger.info("Updating %s with up to %d versions...", self.store.path, max_versions)

        async with self._client() as http:
            manager = ReleaseManager(http, self.config)
            async with self.store.transaction() as staged:
                mapping = await manager.rebuild_mapping(max_versions, report)
                staged.stage(mapping)

        logger.info("Successfully updated %s: %s", self.store.path, report.summary())
        return report

"""Persistence of the sources mapping with staged, atomic commits."""

import json
import logging
import os
import shutil
import tempfile
import aiofiles
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

from ..errors import InvalidMapping
from ..releases.models import VersionMapping, validate_mapping

logger = logging.getLogger(__name__)


def dump_mapping(mapping: VersionMapping) -> str:
    return json.dumps(mapping.to_json_data(), indent=2) + "\n"


def parse_mapping(text: str) -> VersionMapping:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidMapping(f"sources file is not valid JSON: {e}") from e
    return validate_mapping(data)


class StagedSources:
    """Holds the mapping a transaction will commit."""

    def __init__(self):
        self.mapping: Optional[VersionMapping] = None

    def stage(self, mapping: VersionMapping):
        self.mapping = mapping


class SourcesStore:
    def __init__(self, path: Path):
        self.path = Path(path)

    @property
    def backup_path(self) -> Path:
        return self.path.with_name(self.path.name + ".backup")

    def exists(self) -> bool:
        return self.path.is_file()

    async def load(self) -> VersionMapping:
        """Read and validate the persisted mapping."""
        async with aiofiles.open(self.path, 'r', encoding='utf-8') as f:
            return parse_mapping(await f.read())

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[StagedSources]:
        """Stage a new mapping and commit it atomically on success.

        If the body raises, or the staged mapping does not validate, the
        persisted file is left exactly as it was.
        """
        staged = StagedSources()
        yield staged
        if staged.mapping is None:
            raise InvalidMapping("nothing was staged")
        await self._commit(staged.mapping)

    async def _commit(self, mapping: VersionMapping):
        if not len(mapping):
            raise InvalidMapping("no releases found")
        content = dump_mapping(mapping)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        os.close(fd)
        tmp = Path(tmp_name)
        try:
            async with aiofiles.open(tmp, 'w', encoding='utf-8') as f:
                await f.write(content)
            # Validate what actually hit the disk.
            async with aiofiles.open(tmp, 'r', encoding='utf-8') as f:
                parse_mapping(await f.read())

            if self.exists():
                shutil.copy2(self.path, self.backup_path)
                shutil.copymode(self.path, tmp)
                logger.info("Backed up existing %s to %s", self.path.name, self.backup_path.name)
            else:
                # mkstemp creates 0600 files
                tmp.chmod(0o644)
            os.replace(tmp, self.path)
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise
        logger.info("Wrote %d versions to %s", len(mapping), self.path)

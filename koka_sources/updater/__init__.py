"""Sources file updater."""

from .sources_updater import SourcesUpdater
from .store import SourcesStore, dump_mapping, parse_mapping

__all__ = ["SourcesStore", "SourcesUpdater", "dump_mapping", "parse_mapping"]

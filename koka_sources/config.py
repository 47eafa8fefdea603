"""Updater configuration."""

import os
from pathlib import Path
from pydantic import BaseModel, Field
from typing import Dict, Mapping, Optional

from . import __version__

ENV_PREFIX = "KOKA_SOURCES_"


class UpdaterConfig(BaseModel):
    repo: str = Field(default="koka-lang/koka", pattern=r"^[\w.-]+/[\w.-]+$")
    sources_path: Path = Path("sources.json")
    num_versions: int = Field(default=10, gt=0)
    concurrency: int = Field(default=4, gt=0)
    timeout: float = Field(default=60.0, gt=0)
    retries: int = Field(default=0, ge=0)
    github_token: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "UpdaterConfig":
        """Build a config from ``KOKA_SOURCES_*`` variables, then explicit overrides.

        ``GITHUB_TOKEN`` is honoured as well, for API rate limits.
        """
        environ = os.environ if environ is None else environ
        values: Dict[str, object] = {}
        for name in cls.model_fields:
            raw = environ.get(ENV_PREFIX + name.upper())
            if raw:
                values[name] = raw
        if "github_token" not in values and environ.get("GITHUB_TOKEN"):
            values["github_token"] = environ["GITHUB_TOKEN"]
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    @property
    def api_url(self) -> str:
        return f"https://api.github.com/repos/{self.repo}/releases"

    @property
    def download_base(self) -> str:
        return f"https://github.com/{self.repo}/releases/download"

    def http_headers(self) -> Dict[str, str]:
        return {"User-Agent": f"koka-sources/{__version__}"}

    def api_headers(self) -> Dict[str, str]:
        """Headers for the releases API only; the token never goes to asset hosts."""
        headers = {"Accept": "application/vnd.github+json"}
        if self.github_token:
            headers["Authorization"] = f"Bearer {self.github_token}"
        return headers

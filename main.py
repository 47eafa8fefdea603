#!/usr/bin/env python3
"""Koka sources updater entry point"""

import sys

try:
    import aiohttp  # noqa
    import aiofiles  # noqa
    import pydantic  # noqa
except ImportError as e:
    print(f"Critical import failed: {e}")
    print("Please run: pip install -e .")
    sys.exit(1)

from koka_sources.cli import main

if __name__ == "__main__":
    sys.exit(main())

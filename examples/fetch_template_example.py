#!/usr/bin/env python
"""Example of fetching a template repository and reporting its release."""
from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

from fetcher.clone import acquire_and_degit
from fetcher.degit import CleanupError
from fetcher.errors import FetchError
from releases.github_client import ApiError
from releases.resolver import latest_remote_version

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


async def main() -> None:
    """Fetch a template and compare its version with the GitHub releases."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("url", nargs="?", default="https://github.com/r0gue-io/base-parachain")
    parser.add_argument("--target", type=Path, default=Path("./my-parachain"))
    parser.add_argument("--tag", default=None, help="Tag or commit to check out")
    args = parser.parse_args()

    try:
        version = acquire_and_degit(args.url, args.target, args.tag)
    except CleanupError as e:
        print(f"Warning: template fetched but {e}")
        version = args.tag
    except FetchError as e:
        print(f"Error: {e}")
        return

    print(f"Template written to {args.target} (version: {version or 'unreleased'})")

    try:
        remote = await latest_remote_version(args.url)
    except ApiError as e:
        print(f"Could not query GitHub releases: {e}")
        return
    if remote and remote != version:
        print(f"Newer release available on GitHub: {remote}")


if __name__ == "__main__":
    asyncio.run(main())

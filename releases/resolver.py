"""Pick the release of a template repository to report or check out."""
from __future__ import annotations

import logging
import re
from typing import Dict, Iterable, List, Optional, Sequence

import anyio

from models.release import Release
from models.remote_repository import RemoteRepository
from releases.github_client import GitHubApiClient, releases_url

logger = logging.getLogger(__name__)

VERSION_TAG_PATTERN = re.compile(r"v\d+\.\d+\.\d+")


def latest_version_tag(tag_names: Sequence[str]) -> Optional[str]:
    """Return the most recent version-like tag.

    Tags are trusted to be listed oldest first, so the scan starts at the end.
    No semantic-version comparison takes place.

    Args:
        tag_names: Tag names in listing order

    Returns:
        The last tag containing ``vX.Y.Z``, or None when no tag does
    """
    for tag in reversed(tag_names):
        if VERSION_TAG_PATTERN.search(tag):
            return tag
    return None


async def fetch_remote_releases(
    api_url: str, client: Optional[GitHubApiClient] = None
) -> List[Release]:
    """Retrieve every release listed at ``api_url``.

    Choosing among prereleases is left to the caller.
    """
    client = client or GitHubApiClient()
    return await client.get_latest_releases(api_url)


async def latest_remote_version(
    repo: str | RemoteRepository, client: Optional[GitHubApiClient] = None
) -> Optional[str]:
    """Latest version tag according to the GitHub releases endpoint.

    The same tag-name rule as ``latest_version_tag`` applies; prerelease
    flags are not consulted.
    """
    releases = await fetch_remote_releases(releases_url(repo), client)
    # GitHub lists newest first
    return latest_version_tag([release.tag_name for release in reversed(releases)])


async def fetch_releases_for(
    repos: Iterable[str | RemoteRepository], client: Optional[GitHubApiClient] = None
) -> Dict[str, List[Release]]:
    """Fetch the release lists of several repositories concurrently.

    Args:
        repos: Repositories to look up
        client: Shared API client, a default one if None

    Returns:
        Mapping of repository URL to its releases
    """
    client = client or GitHubApiClient()
    targets = [RemoteRepository.parse(repo) for repo in repos]
    results: Dict[str, List[Release]] = {}

    async def _fetch(repo: RemoteRepository) -> None:
        results[repo.url] = await fetch_remote_releases(releases_url(repo), client)

    logger.info(f"Fetching releases for {len(targets)} repositories")

    async with anyio.create_task_group() as tg:
        for repo in targets:
            tg.start_soon(_fetch, repo, name=f"releases-{repo.url}")

    return results

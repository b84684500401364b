"""Anonymous GitHub REST client for release and tag lookups."""
from __future__ import annotations

import logging
from typing import Any, List, Optional

import httpx
from pydantic import TypeAdapter, ValidationError

from fetcher.config import settings
from models.release import Release
from models.remote_repository import RemoteRepository

logger = logging.getLogger(__name__)

_RELEASES = TypeAdapter(List[Release])


class ApiError(Exception):
    """Base exception for GitHub REST failures."""

    def __init__(self, url: str, error_msg: str):
        self.url = url
        self.error_msg = error_msg
        super().__init__(f"GitHub request to {url} failed: {error_msg}")


class RequestFailedError(ApiError):
    """The request could not be sent or returned a non-2xx status."""


class DecodeError(ApiError):
    """The response body is not the JSON document that was expected."""


class MissingFieldError(ApiError):
    """A field required from the response body is absent."""


def releases_url(repo: str | RemoteRepository) -> str:
    """Build the releases endpoint for a repository.

    Raises:
        UrlError: If the repository URL lacks the organization or name
    """
    repo = RemoteRepository.parse(repo)
    return f"{settings.github_api_url}/repos/{repo.organization}/{repo.name}/releases"


def tag_ref_url(repo: str | RemoteRepository, tag: str) -> str:
    """Build the git ref endpoint describing ``tag``.

    Raises:
        UrlError: If the repository URL lacks the organization or name
    """
    repo = RemoteRepository.parse(repo)
    return (
        f"{settings.github_api_url}/repos/{repo.organization}/{repo.name}"
        f"/git/ref/tags/{tag}"
    )


def release_asset_url(repo: str | RemoteRepository, tag: str, artifact: str) -> str:
    """Download URL of an artifact attached to the release of ``tag``."""
    repo = RemoteRepository.parse(repo)
    return f"{repo.url}/releases/download/{tag}/{artifact}"


class GitHubApiClient:
    """Read-only GitHub API client; no token is ever sent."""

    def __init__(
        self,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize the client.

        Args:
            user_agent: User-Agent header, ``settings.user_agent`` if None
            transport: Optional httpx transport, used by tests to stub GitHub
        """
        self.user_agent = user_agent or settings.user_agent
        self.transport = transport

    async def get_latest_releases(self, url: str) -> List[Release]:
        """Fetch and parse the release list at ``url``.

        Args:
            url: Releases endpoint, see ``releases_url``

        Returns:
            Releases in the order GitHub lists them (newest first)

        Raises:
            RequestFailedError: On transport errors or non-2xx responses
            DecodeError: If the body is not a JSON array of releases
        """
        payload = await self._get_json(url)
        try:
            releases = _RELEASES.validate_python(payload)
        except ValidationError as e:
            logger.error(f"Unexpected releases payload from {url}")
            raise DecodeError(url, str(e)) from e

        logger.info(f"Fetched {len(releases)} releases", extra={"url": url})
        return releases

    async def get_commit_sha_from_release(self, url: str) -> str:
        """Resolve a tag ref endpoint to the commit hash it points at.

        Raises:
            RequestFailedError: On transport errors or non-2xx responses
            DecodeError: If the body is not JSON
            MissingFieldError: If ``object.sha`` is absent
        """
        payload = await self._get_json(url)
        target = payload.get("object") if isinstance(payload, dict) else None
        sha = target.get("sha") if isinstance(target, dict) else None
        if not isinstance(sha, str):
            raise MissingFieldError(url, "the github release tag sha was not found")
        return sha

    async def _get_json(self, url: str) -> Any:
        async with httpx.AsyncClient(
            headers={"User-Agent": self.user_agent},
            transport=self.transport,
            follow_redirects=True,
        ) as client:
            try:
                response = await client.get(url)
                response.raise_for_status()
            except httpx.HTTPError as e:
                logger.error(f"GitHub request failed: {e}", extra={"url": url})
                raise RequestFailedError(url, str(e)) from e

        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(url, f"invalid JSON body: {e}") from e

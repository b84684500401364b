"""Remote repository model and URL translation helpers."""
from __future__ import annotations

from typing import List, Optional
from urllib.parse import urlparse

from pydantic.dataclasses import dataclass

GITHUB_HOST = "github.com"


class InputError(Exception):
    """Exception raised when caller input cannot be used."""


class UrlError(InputError):
    """Exception raised when a repository URL lacks its organization or name."""

    def __init__(self, url: str, error_msg: str):
        self.url = url
        self.error_msg = error_msg
        super().__init__(f"Invalid repository url {url}: {error_msg}")


def _path_segments(url: str) -> List[str]:
    return urlparse(url).path.strip("/").split("/")


def _strip_git_suffix(path: str) -> str:
    return path[: -len(".git")] if path.endswith(".git") else path


def to_ssh(url: str | RemoteRepository) -> str:
    """Convert an HTTPS repository URL into its SSH remote form.

    Args:
        url: HTTPS URL such as ``https://github.com/org/name``

    Returns:
        The SSH remote, e.g. ``git@github.com:org/name.git``. The host falls
        back to github.com when the URL has none.
    """
    parsed = urlparse(str(url))
    host = parsed.hostname or GITHUB_HOST
    path = _strip_git_suffix(parsed.path.lstrip("/"))
    return f"git@{host}:{path}.git"


@dataclass(frozen=True)
class RemoteRepository:
    """A remote git repository identified by its canonical URL.

    Attributes:
        url: HTTPS URL of the repository, e.g. https://github.com/org/name
    """

    url: str

    def __post_init__(self) -> None:
        segments = _path_segments(self.url)
        if not segments[0]:
            raise UrlError(
                self.url, "the organization (or user) is missing from the github url"
            )
        if len(segments) < 2 or not _strip_git_suffix(segments[1]):
            raise UrlError(self.url, "the repository name is missing from the github url")

    @classmethod
    def parse(cls, url: str | RemoteRepository) -> RemoteRepository:
        """Build a repository from a URL, passing existing instances through.

        Raises:
            UrlError: If the URL lacks the organization or name segment
        """
        if isinstance(url, RemoteRepository):
            return url
        return cls(url=url.rstrip("/"))

    @property
    def organization(self) -> str:
        return _path_segments(self.url)[0]

    @property
    def name(self) -> str:
        return _strip_git_suffix(_path_segments(self.url)[1])

    @property
    def host(self) -> Optional[str]:
        return urlparse(self.url).hostname

    @property
    def ssh_url(self) -> str:
        return to_ssh(self.url)

    def __str__(self) -> str:
        return self.url

"""Repository cloning with HTTPS first and an SSH fallback."""
from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Callable, Optional

import pygit2

from fetcher.config import settings
from fetcher.credentials import (
    CredentialCallbacks,
    CredentialError,
    CredentialSupplier,
    GitCredentialResolver,
)
from fetcher.degit import DegitStripper
from fetcher.errors import CloneError
from models.checkout_target import checkout_target_from
from models.clone_request import FULL_HISTORY, CloneRequest
from models.remote_repository import RemoteRepository, to_ssh

logger = logging.getLogger(__name__)


class RepoFetcher:
    """Clones template repositories into local directories.

    Every clone is tried over HTTPS first. When that fails for any reason the
    URL is rewritten to its SSH form and cloned again using the host's
    credentials. Only the failure of that second attempt is reported.
    """

    def __init__(
        self,
        credentials: Callable[[], CredentialSupplier] = GitCredentialResolver,
        stripper: Optional[DegitStripper] = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            credentials: Factory returning a fresh credential supplier per clone
            stripper: Degit implementation, a default ``DegitStripper`` if None
        """
        self.credentials = credentials
        self.stripper = stripper or DegitStripper()

    def acquire(
        self,
        source: str | RemoteRepository,
        target_path: str | Path,
        branch: Optional[str] = None,
    ) -> None:
        """Shallow-clone ``source`` into ``target_path``.

        Nothing happens when ``target_path`` already exists.

        Args:
            source: Repository URL
            target_path: Directory to clone into
            branch: Branch to clone, the remote default if None

        Raises:
            UrlError: If the URL lacks the organization or name
            CloneError: If both the HTTPS and the SSH clone fail
        """
        target_path = Path(target_path)
        if target_path.exists():
            logger.info(f"{target_path} already exists, skipping clone")
            return

        request = CloneRequest(
            source=RemoteRepository.parse(source),
            target_path=target_path,
            branch=branch,
            depth=settings.shallow_depth,
        )
        self._clone(request)

    def acquire_and_degit(
        self,
        source: str | RemoteRepository,
        target_path: str | Path,
        tag: Optional[str] = None,
    ) -> Optional[str]:
        """Clone ``source`` with full history and strip it to a plain tree.

        Args:
            source: Repository URL
            target_path: Directory to clone into
            tag: Tag or commit to check out, the default branch tip if None

        Returns:
            ``tag`` when given, otherwise the latest version tag of the
            repository. None when ``target_path`` already existed or no
            version tag was found.

        Raises:
            UrlError: If the URL lacks the organization or name
            CloneError: If both the HTTPS and the SSH clone fail
            RevisionNotFoundError: If ``tag`` does not exist
            CleanupError: If the ``.git`` directory cannot be removed
        """
        target_path = Path(target_path)
        if target_path.exists():
            logger.info(f"{target_path} already exists, skipping clone")
            return None

        request = CloneRequest(
            source=RemoteRepository.parse(source),
            target_path=target_path,
            depth=FULL_HISTORY,
        )
        repo = self._clone(request)
        return self.stripper.degit(repo, checkout_target_from(tag))

    def _clone(self, request: CloneRequest) -> pygit2.Repository:
        url = request.source.url
        logger.info(f"Cloning {url} to {request.target_path}")
        try:
            return pygit2.clone_repository(
                url,
                str(request.target_path),
                checkout_branch=request.branch,
                depth=request.depth,
            )
        except pygit2.GitError as e:
            logger.warning(
                f"HTTPS clone of {url} failed, retrying over SSH",
                extra={"error": str(e)},
            )

        self._discard_partial_clone(request.target_path)
        return self._ssh_clone(request)

    def _ssh_clone(self, request: CloneRequest) -> pygit2.Repository:
        ssh_url = to_ssh(request.source)
        callbacks = CredentialCallbacks(self.credentials())
        try:
            repo = pygit2.clone_repository(
                ssh_url,
                str(request.target_path),
                checkout_branch=request.branch,
                callbacks=callbacks,
                depth=request.depth,
            )
        except (pygit2.GitError, CredentialError) as e:
            logger.error(f"SSH clone of {ssh_url} failed: {e}")
            raise CloneError(ssh_url, str(e)) from e

        logger.info(f"Cloned {ssh_url} over SSH")
        return repo

    def _discard_partial_clone(self, target_path: Path) -> None:
        if target_path.exists():
            logger.debug(f"Removing partial clone at {target_path}")
            shutil.rmtree(target_path)


def acquire(
    source: str | RemoteRepository, target_path: str | Path, branch: Optional[str] = None
) -> None:
    """Shallow-clone ``source`` with a default ``RepoFetcher``."""
    RepoFetcher().acquire(source, target_path, branch)


def acquire_and_degit(
    url: str | RemoteRepository, target_path: str | Path, tag: Optional[str] = None
) -> Optional[str]:
    """Fetch a template into ``target_path`` and return its version.

    See ``RepoFetcher.acquire_and_degit``.
    """
    return RepoFetcher().acquire_and_degit(url, target_path, tag)

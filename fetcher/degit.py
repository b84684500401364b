"""Turn a freshly cloned repository into a plain working tree."""
from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import List, Optional

import pygit2
from pygit2.enums import CheckoutStrategy

from fetcher.errors import FetchError
from models.checkout_target import CheckoutTarget, Commit, DefaultBranchTip, Tag
from releases.resolver import latest_version_tag

logger = logging.getLogger(__name__)

TAGS_PREFIX = "refs/tags/"


class DegitError(FetchError):
    """Exception raised when a cloned repository cannot be degitted."""


class RevisionNotFoundError(DegitError):
    """The requested tag or commit does not exist in the clone.

    The version-control metadata is left in place for diagnosis.
    """

    def __init__(self, revision: str, error_msg: str):
        self.revision = revision
        self.error_msg = error_msg
        super().__init__(f"Revision {revision} not found: {error_msg}")


class CleanupError(DegitError):
    """Removing the metadata directory failed after a successful checkout.

    The working tree itself is complete and usable.
    """

    def __init__(self, git_dir: Path, error_msg: str):
        self.git_dir = git_dir
        self.error_msg = error_msg
        super().__init__(f"Failed to remove {git_dir}: {error_msg}")


def tag_names(repo: pygit2.Repository) -> List[str]:
    """List the repository's tag names in reference listing order."""
    return [
        name[len(TAGS_PREFIX):] for name in repo.references if name.startswith(TAGS_PREFIX)
    ]


class DegitStripper:
    """Checks out the requested revision and removes the ``.git`` directory."""

    def degit(self, repo: pygit2.Repository, target: CheckoutTarget) -> Optional[str]:
        """Check out ``target`` and strip the repository's history.

        Args:
            repo: Repository opened on a fresh clone
            target: Revision to leave in the working tree

        Returns:
            The tag or commit that was checked out, or for the default branch
            tip the latest version tag in the clone (None if there is none)

        Raises:
            RevisionNotFoundError: If a tag or commit cannot be resolved
            CleanupError: If the metadata directory cannot be removed
        """
        if isinstance(target, Tag):
            version: Optional[str] = self._checkout_tag(repo, target.name)
        elif isinstance(target, Commit):
            version = self._checkout_commit(repo, target.id)
        elif isinstance(target, DefaultBranchTip):
            version = latest_version_tag(tag_names(repo))
            logger.info(f"Latest version tag on default branch: {version}")
        else:
            raise TypeError(f"Unknown checkout target: {target!r}")

        self._remove_metadata(repo)
        return version

    def _checkout_tag(self, repo: pygit2.Repository, name: str) -> str:
        obj, reference = self._resolve(repo, name)
        repo.checkout_tree(obj, strategy=CheckoutStrategy.FORCE)
        if reference is not None:
            repo.set_head(reference.name)
        else:
            # Tag names that turn out to be abbreviated commit ids
            repo.set_head(obj.peel(pygit2.Commit).id)
        logger.info(f"Checked out {name}")
        return name

    def _checkout_commit(self, repo: pygit2.Repository, commit_id: str) -> str:
        obj, _ = self._resolve(repo, commit_id)
        commit = obj.peel(pygit2.Commit)
        repo.checkout_tree(commit, strategy=CheckoutStrategy.FORCE)
        repo.set_head(commit.id)
        logger.info(f"Checked out commit {commit.id} (detached)")
        return commit_id

    def _resolve(self, repo: pygit2.Repository, revision: str):
        try:
            return repo.revparse_ext(revision)
        except (KeyError, ValueError, pygit2.GitError) as e:
            logger.error(f"Revision {revision} not found", extra={"repo": repo.workdir})
            raise RevisionNotFoundError(revision, str(e)) from e

    def _remove_metadata(self, repo: pygit2.Repository) -> None:
        git_dir = Path(repo.path)
        repo.free()
        try:
            shutil.rmtree(git_dir)
        except OSError as e:
            logger.error(f"Failed to remove {git_dir}", extra={"error": str(e)})
            raise CleanupError(git_dir, str(e)) from e
        logger.debug(f"Removed {git_dir}")

"""Fixtures providing a local template repository to clone from."""
from __future__ import annotations

from pathlib import Path
from typing import Callable, List, NamedTuple, Optional

import pygit2
import pytest

SIGNATURE = pygit2.Signature("Test User", "test@example.com")


class OriginRepo(NamedTuple):
    """A local repository standing in for the remote template."""

    path: Path
    first_commit: str


def _commit(
    repo: pygit2.Repository, content: str, message: str, parents: List[pygit2.Oid]
) -> pygit2.Oid:
    Path(repo.workdir, "VERSION").write_text(content)
    index = repo.index
    index.add("VERSION")
    index.write()
    tree_id = index.write_tree()
    return repo.create_commit("HEAD", SIGNATURE, SIGNATURE, message, tree_id, parents)


@pytest.fixture
def origin(tmp_path: Path) -> OriginRepo:
    """Create a template repository with a few tags.

    History: 1.0.0 (tag v1.0.0) -> 1.1.0 (tags v1.1.0, nightly) -> 1.2.0-dev.
    """
    path = tmp_path / "origin"
    path.mkdir()
    repo = pygit2.init_repository(str(path))

    first = _commit(repo, "1.0.0\n", "Release 1.0.0", [])
    repo.references.create("refs/tags/v1.0.0", first)
    second = _commit(repo, "1.1.0\n", "Release 1.1.0", [first])
    repo.references.create("refs/tags/v1.1.0", second)
    repo.references.create("refs/tags/nightly", second)
    _commit(repo, "1.2.0-dev\n", "Start 1.2.0", [second])

    return OriginRepo(path=path, first_commit=str(first))


CloneFn = Callable[..., pygit2.Repository]


@pytest.fixture
def clone_calls() -> List[str]:
    """URLs passed to the patched clone function, in call order."""
    return []


@pytest.fixture
def routed_clone(origin: OriginRepo, clone_calls: List[str]) -> Callable[[bool], CloneFn]:
    """Build a clone function that serves every URL from the local origin.

    Calling the factory with ``https_fails=True`` makes HTTPS URLs fail the
    way an unreachable remote does, so only the SSH form succeeds.
    """
    real_clone = pygit2.clone_repository

    def factory(https_fails: bool = False) -> CloneFn:
        def clone(
            url: str,
            path: str,
            checkout_branch: Optional[str] = None,
            callbacks: Optional[pygit2.RemoteCallbacks] = None,
            depth: int = 0,
        ) -> pygit2.Repository:
            clone_calls.append(url)
            if https_fails and url.startswith("https://"):
                raise pygit2.GitError("failed to resolve address for github.com")
            # The local transport does not support shallow fetches
            return real_clone(str(origin.path), path, checkout_branch=checkout_branch)

        return clone

    return factory

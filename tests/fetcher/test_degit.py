"""Tests for stripping a clone down to a plain working tree."""
from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pygit2
import pytest

from fetcher.degit import (
    CleanupError,
    DegitError,
    DegitStripper,
    RevisionNotFoundError,
    tag_names,
)
from models.checkout_target import Commit, DefaultBranchTip, Tag


@pytest.fixture
def clone(origin, tmp_path: Path) -> pygit2.Repository:
    """Clone the origin fixture with full history."""
    return pygit2.clone_repository(str(origin.path), str(tmp_path / "clone"))


def test_tag_names(clone: pygit2.Repository) -> None:
    """Test that tags are listed without their refs/tags/ prefix."""
    assert sorted(tag_names(clone)) == ["nightly", "v1.0.0", "v1.1.0"]


def test_degit_tag(clone: pygit2.Repository) -> None:
    """Test checking out a tag before stripping history."""
    workdir = Path(clone.workdir)

    version = DegitStripper().degit(clone, Tag(name="v1.0.0"))

    assert version == "v1.0.0"
    assert (workdir / "VERSION").read_text() == "1.0.0\n"
    assert not (workdir / ".git").exists()


def test_degit_tag_resolving_to_commit(clone: pygit2.Repository, origin) -> None:
    """Test that a tag name which is really a commit id detaches the head."""
    workdir = Path(clone.workdir)
    short_id = origin.first_commit[:10]

    version = DegitStripper().degit(clone, Tag(name=short_id))

    assert version == short_id
    assert (workdir / "VERSION").read_text() == "1.0.0\n"
    assert not (workdir / ".git").exists()


def test_degit_commit(clone: pygit2.Repository, origin) -> None:
    """Test checking out a bare commit."""
    workdir = Path(clone.workdir)

    with patch.object(DegitStripper, "_remove_metadata"):
        version = DegitStripper().degit(clone, Commit(id=origin.first_commit))

    assert version == origin.first_commit
    assert clone.head_is_detached
    assert str(clone.head.target) == origin.first_commit
    assert (workdir / "VERSION").read_text() == "1.0.0\n"


def test_degit_default_branch_tip(clone: pygit2.Repository) -> None:
    """Test that the tip is kept and the latest version tag reported."""
    workdir = Path(clone.workdir)

    version = DegitStripper().degit(clone, DefaultBranchTip())

    assert version == "v1.1.0"
    assert (workdir / "VERSION").read_text() == "1.2.0-dev\n"
    assert not (workdir / ".git").exists()


def test_degit_default_branch_without_version_tags(clone: pygit2.Repository) -> None:
    """Test that a repository without version tags yields None."""
    for name in ("refs/tags/v1.0.0", "refs/tags/v1.1.0"):
        clone.references.delete(name)

    assert DegitStripper().degit(clone, DefaultBranchTip()) is None
    assert not Path(clone.workdir, ".git").exists()


@pytest.mark.parametrize("target", [Tag(name="v9.9.9"), Commit(id="deadbeefdeadbeef")])
def test_degit_unknown_revision(clone: pygit2.Repository, target) -> None:
    """Test that unknown revisions fail and keep the metadata."""
    workdir = Path(clone.workdir)

    with pytest.raises(RevisionNotFoundError):
        DegitStripper().degit(clone, target)

    assert (workdir / ".git").is_dir()
    assert (workdir / "VERSION").read_text() == "1.2.0-dev\n"


def test_degit_cleanup_failure(clone: pygit2.Repository) -> None:
    """Test that a failed metadata removal leaves a usable tree."""
    workdir = Path(clone.workdir)

    with patch("fetcher.degit.shutil.rmtree", side_effect=PermissionError("locked")):
        with pytest.raises(CleanupError, match="locked") as exc_info:
            DegitStripper().degit(clone, Tag(name="v1.0.0"))

    assert isinstance(exc_info.value, DegitError)
    assert (workdir / "VERSION").read_text() == "1.0.0\n"
    assert (workdir / ".git").is_dir()

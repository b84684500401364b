"""What to check out after cloning a template repository."""
from __future__ import annotations

import re
from typing import Optional, Union

from pydantic.dataclasses import dataclass

COMMIT_ID_PATTERN = re.compile(r"^[0-9a-f]{7,40}$")


@dataclass(frozen=True)
class Tag:
    """A tag (or any other named reference) to check out."""

    name: str


@dataclass(frozen=True)
class Commit:
    """A bare commit id; checking it out leaves a detached head."""

    id: str


@dataclass(frozen=True)
class DefaultBranchTip:
    """Keep the tip of the default branch the clone landed on."""


CheckoutTarget = Union[Tag, Commit, DefaultBranchTip]


def checkout_target_from(revision: Optional[str]) -> CheckoutTarget:
    """Map a caller supplied revision onto a checkout target.

    Args:
        revision: Tag name, commit id, or None for the default branch

    Returns:
        ``DefaultBranchTip`` for None, ``Commit`` for 7-40 lowercase hex
        characters, ``Tag`` otherwise
    """
    if revision is None:
        return DefaultBranchTip()
    if COMMIT_ID_PATTERN.match(revision):
        return Commit(id=revision)
    return Tag(name=revision)

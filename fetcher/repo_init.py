from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import pygit2
from pygit2.enums import ResetMode

logger = logging.getLogger(__name__)


def init_repository(
    target: str | Path,
    message: str,
    signature: Optional[pygit2.Signature] = None,
) -> str:
    """Start a fresh history on top of a degitted template.

    Args:
        target: Directory holding the plain working tree
        message: Message of the initial commit
        signature: Author and committer, the configured user if None

    Returns:
        Id of the initial commit

    Raises:
        KeyError: If no signature is given and no user is configured
    """
    repo = pygit2.init_repository(str(target))
    signature = signature or repo.default_signature

    index = repo.index
    index.add_all()
    index.write()
    tree_id = index.write_tree()

    commit_id = repo.create_commit("HEAD", signature, signature, message, tree_id, [])
    repo.reset(commit_id, ResetMode.HARD)

    logger.info(f"Initialized repository at {target}", extra={"commit": str(commit_id)})
    return str(commit_id)

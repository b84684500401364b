"""Clone request model."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic.dataclasses import dataclass

from models.remote_repository import RemoteRepository

FULL_HISTORY = 0


@dataclass(frozen=True)
class CloneRequest:
    """A single clone of ``source`` into ``target_path``.

    Attributes:
        source: Repository to clone
        target_path: Directory the working tree is written to
        branch: Branch to restrict the clone to, the remote default if None
        depth: History depth, 1 for shallow clones and 0 for full history
    """

    source: RemoteRepository
    target_path: Path
    branch: Optional[str] = None
    depth: int = Field(default=1, ge=0)

    @property
    def is_shallow(self) -> bool:
        return self.depth != FULL_HISTORY

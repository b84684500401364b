"""GitHub release model."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Release(BaseModel):
    """A release entry as returned by the GitHub releases endpoint.

    Keys other than the ones declared here are ignored.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    tag_name: str = Field(description="Tag the release points at")
    display_name: Optional[str] = Field(
        default=None, alias="name", description="Human readable release title"
    )
    is_prerelease: bool = Field(
        default=False, alias="prerelease", description="Whether GitHub flags it as a prerelease"
    )
    commit: Optional[str] = Field(default=None, description="Commit hash, when known")

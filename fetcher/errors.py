"""Exceptions raised while acquiring a template repository."""
from __future__ import annotations


class FetchError(Exception):
    """Base exception for failures while acquiring a template repository."""


class CloneError(FetchError):
    """Exception raised when both the HTTPS and the SSH clone failed."""

    def __init__(self, repo_url: str, error_msg: str):
        """Initialize with repo URL and error message.

        Args:
            repo_url: The repository URL that failed to clone
            error_msg: The error reported by the SSH transport
        """
        self.repo_url = repo_url
        self.error_msg = error_msg
        super().__init__(f"Failed to clone {repo_url}: {error_msg}")

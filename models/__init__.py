"""Value objects shared by the fetcher and release packages."""
from __future__ import annotations

from models.checkout_target import (
    CheckoutTarget,
    Commit,
    DefaultBranchTip,
    Tag,
    checkout_target_from,
)
from models.clone_request import CloneRequest
from models.release import Release
from models.remote_repository import InputError, RemoteRepository, UrlError, to_ssh

__all__ = [
    "CheckoutTarget",
    "CloneRequest",
    "Commit",
    "DefaultBranchTip",
    "InputError",
    "Release",
    "RemoteRepository",
    "Tag",
    "UrlError",
    "checkout_target_from",
    "to_ssh",
]

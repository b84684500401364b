"""SSH and credential-helper negotiation for git remotes.

pygit2 asks for credentials through ``RemoteCallbacks.credentials`` and asks
again every time the server rejects the previous answer. The resolver here
walks the credentials already configured on the host (SSH agent, default key
files, git credential helpers) and hands out each candidate once.
"""
from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Protocol, Set, Tuple
from urllib.parse import urlparse

import pygit2
from pygit2.enums import CredentialType

from fetcher.config import settings
from models.remote_repository import GITHUB_HOST

logger = logging.getLogger(__name__)

DEFAULT_SSH_USER = "git"

Candidate = Tuple[Tuple[str, str], Callable[[], Optional[object]]]


class CredentialError(Exception):
    """Exception raised when every credential candidate has been rejected."""

    def __init__(self, url: str, error_msg: str):
        self.url = url
        self.error_msg = error_msg
        super().__init__(f"No usable credentials for {url}: {error_msg}")


class CredentialSupplier(Protocol):
    """Anything able to answer libgit2 credential requests."""

    def supply_credential(
        self, url: str, username: Optional[str], allowed_types: CredentialType
    ) -> object:
        """Return the next credential to try.

        Raises:
            CredentialError: When no untried candidate is left
        """
        ...


class GitCredentialResolver:
    """Credential supplier backed by the host's git and SSH configuration.

    One resolver serves one clone: candidates already handed out are never
    offered again, so a rejected key moves the search forward.
    """

    def __init__(
        self,
        config: Optional[pygit2.Config] = None,
        ssh_dir: Optional[Path] = None,
        key_names: Optional[List[str]] = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            config: Git configuration to read ``credential.username`` from,
                the global configuration if None
            ssh_dir: Directory holding the default key files
            key_names: Private key file names to try, in order
        """
        self.config = config
        self.ssh_dir = Path(ssh_dir or settings.ssh_dir)
        self.key_names = key_names or settings.ssh_key_names
        self._attempted: Set[Tuple[str, str]] = set()

    def supply_credential(
        self, url: str, username: Optional[str], allowed_types: CredentialType
    ) -> object:
        user = self._resolve_username(username)
        for key, build in self._candidates(url, user, allowed_types):
            if key in self._attempted:
                continue
            self._attempted.add(key)
            credential = build()
            if credential is None:
                continue
            logger.debug(f"Offering {key[0]} credential for {url}", extra={"user": user})
            return credential

        logger.error(f"Credential candidates exhausted for {url}")
        raise CredentialError(url, "all configured credentials were rejected")

    def _candidates(
        self, url: str, user: str, allowed_types: CredentialType
    ) -> Iterator[Candidate]:
        if allowed_types & CredentialType.SSH_KEY:
            yield ("ssh-agent", user), lambda: pygit2.KeypairFromAgent(user)
            for key_name in self.key_names:
                private_key = self.ssh_dir / key_name
                yield ("ssh-key", str(private_key)), (
                    lambda private_key=private_key: self._keypair(user, private_key)
                )
        if allowed_types & CredentialType.USERPASS_PLAINTEXT:
            yield ("credential-helper", url), lambda: self._credential_helper(url)
        if allowed_types & CredentialType.USERNAME:
            yield ("username", user), lambda: pygit2.Username(user)

    def _keypair(self, user: str, private_key: Path) -> Optional[pygit2.Keypair]:
        public_key = private_key.with_name(private_key.name + ".pub")
        if not private_key.is_file() or not public_key.is_file():
            return None
        return pygit2.Keypair(user, str(public_key), str(private_key), "")

    def _credential_helper(self, url: str) -> Optional[pygit2.UserPass]:
        """Ask the configured git credential helpers for a username/password."""
        parsed = urlparse(url)
        request = (
            f"protocol={parsed.scheme or 'https'}\n"
            f"host={parsed.hostname or GITHUB_HOST}\n\n"
        )
        try:
            result = subprocess.run(
                ["git", "credential", "fill"],
                input=request,
                capture_output=True,
                text=True,
                env={**os.environ, "GIT_TERMINAL_PROMPT": "0"},
            )
        except OSError as e:
            logger.debug(f"git credential helper unavailable: {e}")
            return None

        if result.returncode != 0:
            logger.debug(
                "git credential fill failed",
                extra={"url": url, "error": result.stderr},
            )
            return None

        fields = _parse_credential_output(result.stdout)
        if "username" not in fields or "password" not in fields:
            return None
        return pygit2.UserPass(fields["username"], fields["password"])

    def _resolve_username(self, username: Optional[str]) -> str:
        if username:
            return username
        config = self._load_config()
        if config is not None and "credential.username" in config:
            return config["credential.username"]
        return DEFAULT_SSH_USER

    def _load_config(self) -> Optional[pygit2.Config]:
        if self.config is None:
            try:
                self.config = pygit2.Config.get_global_config()
            except (OSError, pygit2.GitError) as e:
                logger.debug(f"Cannot open git configuration: {e}")
                return None
        return self.config


def _parse_credential_output(output: str) -> Dict[str, str]:
    fields: Dict[str, str] = {}
    for line in output.splitlines():
        key, sep, value = line.partition("=")
        if sep:
            fields[key] = value
    return fields


class CredentialCallbacks(pygit2.RemoteCallbacks):
    """pygit2 remote callbacks delegating credential requests to a supplier."""

    def __init__(self, supplier: CredentialSupplier) -> None:
        super().__init__()
        self.supplier = supplier

    def credentials(
        self, url: str, username_from_url: Optional[str], allowed_types: CredentialType
    ) -> object:
        return self.supplier.supply_credential(url, username_from_url, allowed_types)

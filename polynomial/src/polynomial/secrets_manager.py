"""
Credential lookup for the client configuration.

Each setting (API key, session key, wallet address, ...) is looked up by
name.  ``<NAME>_FILE`` pointing at a readable file wins over ``<NAME>``
itself, so a session key can be mounted into a container as a secret file
rather than exported into the environment::

    secrets = EnvFileSecretsManager()
    session_key = secrets.get_secret("POLYNOMIAL_SESSION_KEY")
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Optional


logger = logging.getLogger(__name__)

FILE_SUFFIX = "_FILE"


class BaseSecretsManager:
    """Source of named secrets.  Subclasses implement :meth:`get_secret`."""

    def get_secret(self, name: str) -> Optional[str]:  # pragma: no cover - override
        raise NotImplementedError


class EnvFileSecretsManager(BaseSecretsManager):
    """Environment variables, optionally indirected through ``*_FILE`` paths.

    Relative paths resolve against ``base_path``.  Lookups are memoised per
    instance, so rotated secrets need a fresh manager.  Empty values read as
    unset.
    """

    def __init__(self, base_path: Optional[Path] = None) -> None:
        self.base_path = base_path
        self._resolved: Dict[str, Optional[str]] = {}

    def _read_file(self, name: str, location: str) -> Optional[str]:
        path = Path(location)
        if self.base_path is not None and not path.is_absolute():
            path = self.base_path / path
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.warning("Failed to read %s%s %s: %s", name, FILE_SUFFIX, path, exc)
            return None
        logger.debug("Loaded %s from %s", name, path)
        return content.strip()

    def get_secret(self, name: str) -> Optional[str]:
        if name not in self._resolved:
            location = os.getenv(name + FILE_SUFFIX)
            raw = self._read_file(name, location) if location else os.getenv(name)
            self._resolved[name] = raw or None
        return self._resolved[name]


def get_default_secrets_manager() -> BaseSecretsManager:
    """Manager rooted at ``SECRETS_BASE_PATH`` when that variable is set."""
    base = os.getenv("SECRETS_BASE_PATH")
    return EnvFileSecretsManager(Path(base) if base else None)

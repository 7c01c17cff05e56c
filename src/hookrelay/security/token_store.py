"""Persistence for the encrypted GitHub token.

The vault only ever hands a store one opaque base64 string, so any backend
that can keep a single value works: a file on disk, or one key of a
key-value store.
"""

from __future__ import annotations

import os
from collections.abc import MutableMapping
from pathlib import Path
from typing import Protocol

from hookrelay.core.logging import get_logger

logger = get_logger(__name__)


class TokenStore(Protocol):
    """Where the sealed credential lives."""

    @property
    def location(self) -> str: ...

    def exists(self) -> bool: ...

    def read(self) -> str | None: ...

    def write(self, encrypted: str) -> None: ...


class FileTokenStore:
    """Stores one opaque base64 token in a file readable by the owner only."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    @property
    def location(self) -> str:
        return str(self._path)

    def exists(self) -> bool:
        return self._path.is_file()

    def read(self) -> str | None:
        if not self.exists():
            return None
        content = self._path.read_text(encoding="utf-8").strip()
        return content or None

    def write(self, encrypted: str) -> None:
        """Atomically replace the stored token (mode 0o600)."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_name(self._path.name + ".tmp")
        fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(encrypted)
        os.replace(tmp, self._path)
        logger.debug("token_file_written", path=str(self._path))


class KeyValueTokenStore:
    """Keeps the token under one key of a mapping-like key-value store.

    ``backend`` is any mutable mapping of string values, such as a ``dict``
    or a ``shelve`` shelf.
    """

    def __init__(
        self,
        backend: MutableMapping[str, str],
        key: str = "hookrelay:github_token",
    ) -> None:
        self._backend = backend
        self._key = key

    @property
    def location(self) -> str:
        return f"kv:{self._key}"

    def exists(self) -> bool:
        return self._key in self._backend

    def read(self) -> str | None:
        value = self._backend.get(self._key)
        if value is None:
            return None
        return value.strip() or None

    def write(self, encrypted: str) -> None:
        self._backend[self._key] = encrypted
        logger.debug("token_key_written", key=self._key)

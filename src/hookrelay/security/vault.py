"""At-rest encryption of the GitHub access token.

Tokens are sealed with AES-256-GCM under a key derived from the operator's
``ENCRYPTION_KEY`` with PBKDF2-HMAC-SHA512.  Each encryption draws a fresh
salt and IV, so the same token never produces the same blob twice.

Serialized layout (base64 of the concatenation)::

    salt (64) ‖ iv (16) ‖ tag (16) ‖ ciphertext (n)

Decryption fails closed: a wrong key, a flipped byte and a truncated blob
all surface as the same ``DecryptionError``.
"""

from __future__ import annotations

import base64
import binascii
import os
import threading
from dataclasses import dataclass

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from hookrelay.core.constants import (
    DERIVED_KEY_LENGTH,
    IV_LENGTH,
    KDF_ITERATIONS,
    MIN_ENCRYPTION_KEY_LENGTH,
    SALT_LENGTH,
    TAG_LENGTH,
)
from hookrelay.core.exceptions import ConfigurationError, DecryptionError
from hookrelay.core.logging import get_logger
from hookrelay.security.token_store import TokenStore

logger = get_logger(__name__)

_HEADER_LENGTH = SALT_LENGTH + IV_LENGTH + TAG_LENGTH


@dataclass(frozen=True)
class EncryptedBlob:
    """A sealed credential and the parameters needed to open it."""

    salt: bytes
    iv: bytes
    tag: bytes
    ciphertext: bytes

    def to_token(self) -> str:
        """Serialize to the single base64 token stored on disk."""
        combined = self.salt + self.iv + self.tag + self.ciphertext
        return base64.b64encode(combined).decode("ascii")

    @classmethod
    def from_token(cls, token: str) -> EncryptedBlob:
        """Split a stored token back into its segments.

        Raises:
            DecryptionError: If the token is not base64 or too short.
        """
        try:
            combined = base64.b64decode(token.strip(), validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecryptionError("Stored credential is not valid base64") from e

        if len(combined) < _HEADER_LENGTH:
            raise DecryptionError("Stored credential is truncated")

        return cls(
            salt=combined[:SALT_LENGTH],
            iv=combined[SALT_LENGTH : SALT_LENGTH + IV_LENGTH],
            tag=combined[SALT_LENGTH + IV_LENGTH : _HEADER_LENGTH],
            ciphertext=combined[_HEADER_LENGTH:],
        )


def _check_key(key: str) -> None:
    if not key or len(key) < MIN_ENCRYPTION_KEY_LENGTH:
        raise ConfigurationError(
            f"Encryption key must be at least {MIN_ENCRYPTION_KEY_LENGTH} characters long"
        )


def derive_key(key: str, salt: bytes) -> bytes:
    """Derive the 256-bit AES key from the operator secret and a salt."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA512(),
        length=DERIVED_KEY_LENGTH,
        salt=salt,
        iterations=KDF_ITERATIONS,
    )
    return kdf.derive(key.encode("utf-8"))


def encrypt(plaintext: str, key: str) -> EncryptedBlob:
    """Seal ``plaintext`` under ``key``.

    Raises:
        ConfigurationError: If the key is shorter than 32 characters.
    """
    _check_key(key)

    salt = os.urandom(SALT_LENGTH)
    iv = os.urandom(IV_LENGTH)
    sealed = AESGCM(derive_key(key, salt)).encrypt(iv, plaintext.encode("utf-8"), None)

    # AESGCM appends the tag to the ciphertext
    return EncryptedBlob(
        salt=salt,
        iv=iv,
        tag=sealed[-TAG_LENGTH:],
        ciphertext=sealed[:-TAG_LENGTH],
    )


def decrypt(blob: EncryptedBlob, key: str) -> str:
    """Open a sealed blob.

    Raises:
        ConfigurationError: If the key is shorter than 32 characters.
        DecryptionError: If the tag does not verify or the plaintext is not UTF-8.
    """
    _check_key(key)

    try:
        aead = AESGCM(derive_key(key, blob.salt))
        plaintext = aead.decrypt(blob.iv, blob.ciphertext + blob.tag, None)
        return plaintext.decode("utf-8")
    except (InvalidTag, ValueError) as e:
        # UnicodeDecodeError is a ValueError
        raise DecryptionError(
            "Failed to decrypt token. The token may be corrupted "
            "or the encryption key may be incorrect."
        ) from e


def encrypt_token(token: str, key: str) -> str:
    return encrypt(token, key).to_token()


def decrypt_token(encrypted: str, key: str) -> str:
    _check_key(key)
    return decrypt(EncryptedBlob.from_token(encrypted), key)


class CredentialVault:
    """Owns the encrypted GitHub token and its decrypted in-memory copy.

    The plaintext is derived at most once per process: concurrent first
    readers block on the lock and reuse the result.  Only ``rotate()`` or
    ``invalidate()`` drop the cached value.
    """

    def __init__(self, key: str, store: TokenStore) -> None:
        _check_key(key)
        self._key = key
        self._store = store
        self._cached: str | None = None
        self._lock = threading.Lock()

    def has_token(self) -> bool:
        return self._cached is not None or self._store.exists()

    def get_token(self) -> str | None:
        """Return the decrypted token, or None if none is stored.

        Raises:
            DecryptionError: If the stored blob cannot be opened.
        """
        cached = self._cached
        if cached is not None:
            return cached

        with self._lock:
            if self._cached is None:
                encrypted = self._store.read()
                if encrypted is None:
                    return None
                self._cached = decrypt_token(encrypted, self._key)
                logger.info("credential_decrypted", source=self._store.location)
            return self._cached

    def require_token(self) -> str:
        """Like ``get_token`` but treats a missing token as misconfiguration."""
        token = self.get_token()
        if token is None:
            raise ConfigurationError("No GitHub token stored at the configured token path.")
        return token

    def store_token(self, token: str) -> None:
        """Encrypt, persist, and cache a new token."""
        encrypted = encrypt_token(token, self._key)
        with self._lock:
            self._store.write(encrypted)
            self._cached = token
        logger.info("credential_stored", destination=self._store.location)

    def rotate(self, token: str) -> None:
        """Replace the stored credential with a freshly issued one."""
        self.invalidate()
        self.store_token(token)
        logger.info("credential_rotated")

    def invalidate(self) -> None:
        with self._lock:
            self._cached = None

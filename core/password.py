"""
Password Credential Module

Derives and verifies salted password hashes with scrypt.

A credential is stored as a single string "<salt>:<hash>", both halves
hex-encoded. The scrypt salt input is the salt's hex text, so credentials
stay interchangeable with other scrypt implementations that salt with the
hex string.

Usage:
    from core.password import PasswordCredential

    credential = PasswordCredential()
    stored = credential.hash("rahasia123")
    credential.verify("rahasia123", stored)  # True
"""

import hashlib
import hmac
import logging
import secrets
from typing import Any, Dict, Optional, Tuple

from core.errors import DataIntegrityError

logger = logging.getLogger(__name__)

SEPARATOR = ":"


class PasswordCredential:
    """
    Salted scrypt password hashing with constant-time verification.

    Args:
        config: Dictionary with optional keys:
            - salt_bytes: Random salt length in bytes (default 16, minimum 16)
            - scrypt_n: CPU/memory cost (default 16384)
            - scrypt_r: Block size (default 8)
            - scrypt_p: Parallelization (default 1)
            - key_length: Derived hash length in bytes (default 64)
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        if config is None:
            config = {}
        self.salt_bytes = max(16, int(config.get("salt_bytes", 16)))
        self.n = int(config.get("scrypt_n", 16384))
        self.r = int(config.get("scrypt_r", 8))
        self.p = int(config.get("scrypt_p", 1))
        self.key_length = int(config.get("key_length", 64))

        # scrypt needs roughly 128 * n * r bytes; leave headroom over OpenSSL's default cap
        self._maxmem = 256 * self.n * self.r + 1024 * 1024

    def _derive(self, password: str, salt: str, length: int) -> bytes:
        return hashlib.scrypt(
            password.encode("utf-8"),
            salt=salt.encode("utf-8"),
            n=self.n,
            r=self.r,
            p=self.p,
            maxmem=self._maxmem,
            dklen=length,
        )

    def hash(self, password: str) -> str:
        """
        Hash a plain-text password with a fresh random salt.

        Args:
            password: The plain-text password.

        Returns:
            Credential string "<salt hex>:<hash hex>".
        """
        salt = secrets.token_hex(self.salt_bytes)
        derived = self._derive(password, salt, self.key_length)
        return f"{salt}{SEPARATOR}{derived.hex()}"

    def verify(self, password: str, stored: str) -> bool:
        """
        Verify a candidate password against a stored credential.

        The derived bytes are compared in constant time. A stored hash whose
        length differs from key_length is a non-match.

        Args:
            password: Candidate plain-text password.
            stored: Credential string produced by hash().

        Returns:
            True if the password matches.

        Raises:
            DataIntegrityError: If the stored credential is malformed.
        """
        salt, known = split_credential(stored)
        derived = self._derive(password, salt, self.key_length)
        return hmac.compare_digest(derived, known)


def split_credential(stored: str) -> Tuple[str, bytes]:
    """
    Split a stored credential into its salt text and hash bytes.

    Raises:
        DataIntegrityError: If the separator is missing or repeated, a half
            is empty, or a half is not valid hex.
    """
    if not isinstance(stored, str) or stored.count(SEPARATOR) != 1:
        logger.error("Stored password credential has an invalid layout")
        raise DataIntegrityError("Stored password credential is malformed")

    salt, hash_hex = stored.split(SEPARATOR)
    if not salt or not hash_hex:
        logger.error("Stored password credential has an empty salt or hash")
        raise DataIntegrityError("Stored password credential is malformed")

    try:
        bytes.fromhex(salt)
        known = bytes.fromhex(hash_hex)
    except ValueError as e:
        logger.error(f"Stored password credential is not hex-encoded: {e}")
        raise DataIntegrityError("Stored password credential is malformed") from e

    return salt, known

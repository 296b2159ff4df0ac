"""
Crypto Service - Session token minting and credential digests.

Tokens are Fernet tokens (authenticated, timestamped), credentials are
stored as salted scrypt digests.
"""

import asyncio
import base64
import logging
import os
from pathlib import Path
from typing import Optional

from cryptography.exceptions import InvalidKey
from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt


logger = logging.getLogger(__name__)

DIGEST_SCHEME = "scrypt"
SALT_BYTES = 16
DIGEST_BYTES = 32
SCRYPT_R = 8
SCRYPT_P = 1


class CryptoService:
    """
    Cryptographic service for the HR system.

    Uses Fernet symmetric encryption from the cryptography library for
    bearer tokens, and scrypt for credential digests. The Fernet key is
    stored locally in a separate file, or kept in memory when no path is
    given.
    """

    def __init__(self, key_path: Optional[Path] = None, scrypt_n: int = 2**14) -> None:
        """
        Initialize the crypto service.

        Args:
            key_path: Path to store/load the token key (None for an ephemeral key).
            scrypt_n: Scrypt cost parameter for new credential digests.
        """
        self.key_path = key_path
        self.scrypt_n = scrypt_n
        self._fernet: Optional[Fernet] = None

    def initialize(self) -> None:
        """Initialize or load the encryption key."""
        if self.key_path is None:
            key = Fernet.generate_key()
        elif self.key_path.exists():
            key = self.key_path.read_bytes()
        else:
            key = Fernet.generate_key()
            self.key_path.parent.mkdir(parents=True, exist_ok=True)
            self.key_path.write_bytes(key)
            # Restrict file permissions (Unix only)
            try:
                self.key_path.chmod(0o600)
            except OSError:
                logger.warning(f"Could not restrict permissions on {self.key_path}")

        self._fernet = Fernet(key)

    @property
    def fernet(self) -> Fernet:
        """Get the Fernet instance."""
        if not self._fernet:
            raise RuntimeError("CryptoService not initialized. Call initialize() first.")
        return self._fernet

    # ==================== Tokens ====================

    def encrypt(self, data: str) -> str:
        """
        Encrypt a string into a URL-safe token.

        Args:
            data: Plain text to encrypt.

        Returns:
            Base64-encoded Fernet token.
        """
        return self.fernet.encrypt(data.encode("utf-8")).decode("utf-8")

    def decrypt(self, token: str, ttl: Optional[int] = None) -> str:
        """
        Decrypt a token.

        Args:
            token: Fernet token.
            ttl: Maximum token age in seconds (None for no limit).

        Returns:
            Decrypted plain text.

        Raises:
            InvalidToken: If the token is forged, corrupted or older than ttl.
        """
        return self.fernet.decrypt(token.encode("utf-8"), ttl=ttl).decode("utf-8")

    def try_decrypt(self, token: str, ttl: Optional[int] = None) -> Optional[str]:
        """Decrypt a token, returning None when it is invalid or expired."""
        try:
            return self.decrypt(token, ttl=ttl)
        except (InvalidToken, UnicodeError):
            return None

    # ==================== Credential Digests ====================

    def _scrypt(self, salt: bytes, n: int) -> Scrypt:
        return Scrypt(salt=salt, length=DIGEST_BYTES, n=n, r=SCRYPT_R, p=SCRYPT_P)

    def hash_credential(self, credential: str) -> str:
        """
        Derive a storable digest from a plain text credential.

        Returns:
            ``scrypt$<n>$<salt>$<digest>`` with base64 salt and digest.
        """
        salt = os.urandom(SALT_BYTES)
        digest = self._scrypt(salt, self.scrypt_n).derive(credential.encode("utf-8"))
        return "$".join(
            [
                DIGEST_SCHEME,
                str(self.scrypt_n),
                base64.urlsafe_b64encode(salt).decode("ascii"),
                base64.urlsafe_b64encode(digest).decode("ascii"),
            ]
        )

    def verify_credential(self, credential: str, stored: str) -> bool:
        """
        Check a plain text credential against a stored digest.

        Comparison is constant time; malformed digests never match.
        """
        try:
            scheme, n, salt, digest = stored.split("$")
            if scheme != DIGEST_SCHEME:
                return False
            kdf = self._scrypt(base64.urlsafe_b64decode(salt), int(n))
            kdf.verify(credential.encode("utf-8"), base64.urlsafe_b64decode(digest))
        except (ValueError, InvalidKey):
            return False
        return True

    async def hash_credential_async(self, credential: str) -> str:
        """Run hash_credential in a worker thread, keeping the event loop free."""
        return await asyncio.to_thread(self.hash_credential, credential)

    async def verify_credential_async(self, credential: str, stored: str) -> bool:
        """Run verify_credential in a worker thread, keeping the event loop free."""
        return await asyncio.to_thread(self.verify_credential, credential, stored)

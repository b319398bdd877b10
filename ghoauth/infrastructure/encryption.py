"""
Token encryption for session storage.

Uses Fernet symmetric encryption from the cryptography library. The GitHub
access token is encrypted before it goes into the session cookie, which is
signed but otherwise readable by the browser.
"""

import logging
import os
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from ghoauth.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Singleton encryption key instance
_fernet: Optional[Fernet] = None


class EncryptionError(Exception):
    """Raised when encryption/decryption fails."""

    pass


def _get_fernet() -> Fernet:
    """
    Get or create the Fernet encryption instance.

    The key is read from TOKEN_ENCRYPTION_KEY, a URL-safe base64-encoded
    32-byte key.

    Raises:
        ConfigurationError: If TOKEN_ENCRYPTION_KEY is not set or invalid
    """
    global _fernet

    if _fernet is not None:
        return _fernet

    key = os.getenv("TOKEN_ENCRYPTION_KEY")
    if not key:
        raise ConfigurationError(
            "TOKEN_ENCRYPTION_KEY environment variable must be set for token encryption"
        )

    try:
        _fernet = Fernet(key.encode())
    except ValueError as e:
        raise ConfigurationError(f"Invalid TOKEN_ENCRYPTION_KEY: {e}") from e

    logger.info("Token encryption initialized")
    return _fernet


def encrypt_token(plaintext: str) -> str:
    """
    Encrypt a token string.

    Args:
        plaintext: The token value to encrypt

    Returns:
        Base64-encoded encrypted token
    """
    fernet = _get_fernet()
    result: str = fernet.encrypt(plaintext.encode()).decode()
    return result


def decrypt_token(ciphertext: str) -> str:
    """
    Decrypt an encrypted token string.

    Args:
        ciphertext: Base64-encoded encrypted token

    Returns:
        Decrypted plaintext token

    Raises:
        EncryptionError: If decryption fails (invalid key or corrupted data)
    """
    fernet = _get_fernet()
    try:
        result: str = fernet.decrypt(ciphertext.encode()).decode()
        return result
    except InvalidToken as e:
        logger.warning("Failed to decrypt token: invalid token or key")
        raise EncryptionError("Decryption failed: invalid token or key mismatch") from e


def generate_encryption_key() -> str:
    """
    Generate a new Fernet encryption key.

    The generated key can be used as TOKEN_ENCRYPTION_KEY.
    """
    result: str = Fernet.generate_key().decode()
    return result


def reset_encryption() -> None:
    """
    Reset the encryption singleton.

    Useful for testing to ensure clean state between tests.
    """
    global _fernet
    _fernet = None

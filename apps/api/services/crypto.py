"""
Cookie encryption/decryption service using Fernet symmetric encryption.
"""

import base64
from functools import lru_cache

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from config import settings


class CookieDecryptionError(ValueError):
    """Raised when a stored cookie cannot be decrypted with the configured key."""


@lru_cache(maxsize=4)
def _fernet_for_key(key: str) -> Fernet:
    # If key is not 32 bytes, derive a key using PBKDF2
    if len(key) != 32:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=b"igboost_cookie_vault_salt",
            iterations=100000,
        )
        derived = base64.urlsafe_b64encode(kdf.derive(key.encode()))
    else:
        derived = base64.urlsafe_b64encode(key.encode())

    return Fernet(derived)


def _get_fernet() -> Fernet:
    """Get Fernet instance from encryption key."""
    return _fernet_for_key(settings.ENCRYPTION_KEY)


def encrypt_cookie(cookie_value: str) -> str:
    """
    Encrypt a session cookie string for storage.

    Args:
        cookie_value: Plain cookie string ("csrftoken=...; sessionid=...")

    Returns:
        Base64-encoded encrypted cookie
    """
    fernet = _get_fernet()
    return fernet.encrypt(cookie_value.encode()).decode()


def decrypt_cookie(encrypted_value: str) -> str:
    """
    Decrypt a stored session cookie string.

    Args:
        encrypted_value: Base64-encoded encrypted cookie

    Returns:
        Plain cookie string
    """
    fernet = _get_fernet()
    try:
        return fernet.decrypt(encrypted_value.encode()).decode()
    except InvalidToken as exc:
        raise CookieDecryptionError("Stored cookie could not be decrypted with the configured key.") from exc


def cookie_preview(cookie_value: str, visible: int = 12) -> str:
    """Short, non-secret preview of a cookie string for listings."""
    text = cookie_value or ""
    if len(text) <= visible:
        return "*" * len(text)
    return f"{text[:visible]}..."

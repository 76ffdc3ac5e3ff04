"""Password hashing and session token helpers for the auth stub."""

import base64
import secrets

from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

_ITERATIONS = 200_000


def _kdf(salt: bytes) -> PBKDF2HMAC:
    # a PBKDF2HMAC instance can only derive or verify once
    return PBKDF2HMAC(algorithm=hashes.SHA256(), length=32, salt=salt, iterations=_ITERATIONS)


def hash_password(password: str) -> str:
    """Return ``salt$hash`` (both base64) using PBKDF2-SHA256."""
    salt = secrets.token_bytes(16)
    digest = _kdf(salt).derive(password.encode())
    return f"{base64.b64encode(salt).decode()}${base64.b64encode(digest).decode()}"


def verify_password(password: str, stored: str) -> bool:
    try:
        salt_b64, digest_b64 = stored.split("$", 1)
        salt = base64.b64decode(salt_b64)
        expected = base64.b64decode(digest_b64)
    except ValueError:
        return False
    try:
        _kdf(salt).verify(password.encode(), expected)
    except InvalidKey:
        return False
    return True


def new_token() -> str:
    return secrets.token_urlsafe(32)

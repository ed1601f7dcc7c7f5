"""Secret generation and salted bcrypt hashing."""

from __future__ import annotations

import hmac
import secrets
import string

import bcrypt

MIN_SECRET_LENGTH = 20
MIN_ROUNDS = 8
# bcrypt ignores everything past 72 bytes
MAX_SECRET_BYTES = 72

_ALPHABET = string.ascii_letters + string.digits


def generate_secret(length: int = MIN_SECRET_LENGTH) -> str:
    """Return a random alphanumeric secret of ``length`` characters."""
    if length < MIN_SECRET_LENGTH:
        raise ValueError(f"Secrets must be at least {MIN_SECRET_LENGTH} characters")
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def _secret_bytes(secret: str) -> bytes:
    raw = secret.encode("utf-8")
    if len(raw) > MAX_SECRET_BYTES:
        raise ValueError(f"Secrets must not exceed {MAX_SECRET_BYTES} bytes")
    return raw


def hash_secret(secret: str, rounds: int = 10) -> str:
    if not secret:
        raise ValueError("Cannot hash an empty secret")
    if rounds < MIN_ROUNDS:
        raise ValueError(f"bcrypt cost must be at least {MIN_ROUNDS}")
    hashed = bcrypt.hashpw(_secret_bytes(secret), bcrypt.gensalt(rounds))
    return hashed.decode("ascii")


def verify_secret(secret: str, password_hash: str) -> bool:
    """Check ``secret`` against a stored hash in constant time.

    The hash is re-derived with the salt embedded in ``password_hash`` and
    compared with ``hmac.compare_digest``. Unusable input returns False.
    """
    try:
        stored = password_hash.encode("ascii")
        candidate = bcrypt.hashpw(_secret_bytes(secret), stored)
    except ValueError:
        return False
    return hmac.compare_digest(candidate, stored)

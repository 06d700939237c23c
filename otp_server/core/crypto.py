"""Password hashing.

bcrypt only looks at the first 72 bytes of a password; longer inputs are cut there
explicitly so every bcrypt release treats them the same way.
"""

from __future__ import annotations

import bcrypt

BCRYPT_MAX_BYTES = 72


def _secret(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_secret(password), bcrypt.gensalt()).decode("ascii")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(_secret(plain_password), hashed_password.encode("ascii"))
    except ValueError:
        # not a bcrypt hash
        return False


__all__ = ["hash_password", "verify_password"]

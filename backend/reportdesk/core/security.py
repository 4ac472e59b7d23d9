"""Password hashing for report close authorization."""

from __future__ import annotations

import hashlib
import hmac
import os
from typing import Optional, Tuple

SALT_BYTES = 16


def hash_password(password: str, iterations: int, salt: Optional[bytes] = None) -> Tuple[str, str]:
    """Return ``(salt_hex, digest_hex)`` for a plaintext password."""
    salt = salt if salt is not None else os.urandom(SALT_BYTES)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return salt.hex(), digest.hex()


def verify_password(password: str, salt_hex: str, digest_hex: str, iterations: int) -> bool:
    _, candidate = hash_password(password, iterations, bytes.fromhex(salt_hex))
    return hmac.compare_digest(candidate, digest_hex)

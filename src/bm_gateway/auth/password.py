"""Password hashing with the ``bcrypt`` library (>=4.0).

bcrypt only looks at the first 72 bytes of input and recent releases raise
on longer values, so RegisterRequest caps passwords at 72 UTF-8 bytes.
"""

import bcrypt

BCRYPT_MAX_BYTES = 72


def hash_password(plain: str) -> str:
    """Hash a plain-text password. Returns the utf-8 encoded bcrypt hash."""
    hashed_bytes: bytes = bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt())
    return hashed_bytes.decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Check a plain-text password against a stored bcrypt hash."""
    encoded = plain.encode("utf-8")
    if len(encoded) > BCRYPT_MAX_BYTES:
        return False
    return bcrypt.checkpw(encoded, hashed.encode("utf-8"))

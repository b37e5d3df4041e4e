"""Password hashing with bcrypt.

Hashes are salted and one-way; the cost factor comes from BCRYPT_ROUNDS.
bcrypt only looks at the first 72 bytes of input, so longer passwords are
rejected at registration instead of being silently truncated.
"""

from functools import lru_cache

import bcrypt

DEFAULT_ROUNDS = 10
MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Hash a password with a fresh salt.

    Raises:
        ValueError: If the password exceeds MAX_PASSWORD_BYTES when UTF-8 encoded.
    """
    password_bytes = password.encode("utf-8")
    if len(password_bytes) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password exceeds {MAX_PASSWORD_BYTES} bytes")
    return bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=rounds)).decode("ascii")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored hash.

    Never raises: over-long passwords and malformed hashes simply do not match.
    """
    password_bytes = password.encode("utf-8")
    if len(password_bytes) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(password_bytes, password_hash.encode("ascii"))
    except (ValueError, UnicodeEncodeError):
        return False


@lru_cache
def _dummy_hash(rounds: int) -> str:
    return hash_password("chatjournal-timing-equalizer", rounds=rounds)


def burn_verification_time(password: str, rounds: int = DEFAULT_ROUNDS) -> None:
    """Spend roughly one bcrypt comparison for a login with an unknown email."""
    verify_password(password, _dummy_hash(rounds))

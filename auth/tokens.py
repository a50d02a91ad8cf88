"""
auth/tokens.py -- Password hashing, salt and session-token generation.

Security design decisions:
  Passwords: SHA3-512 over salt bytes followed by password bytes, stored as
       base64. Each user has a random salt generated at signup and replaced on
       every password change, so identical passwords never share a hash and
       precomputed tables are useless across users.

       verify_password() compares with plain string equality. This is not
       constant-time; it is a known simplification of the service.

  Salts and session tokens: both come from generate_token(), which draws
       every character uniformly from [A-Za-z0-9]. Session tokens are long
       (SESSION_TOKEN_LENGTH, default 256 chars) because they never expire and
       are the only thing standing between a bearer and an account. No
       uniqueness check is made; the collision probability is negligible.

Layer rule: no imports from api/. Import from core/ is allowed.
"""

from __future__ import annotations

import base64
import hashlib
import secrets
import string

from core.config import get_settings

TOKEN_ALPHABET = string.ascii_letters + string.digits

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


def hash_password(salt: str, password: str) -> str:
    """Return base64(SHA3-512(salt + password)).

    Deterministic: the same salt and password always give the same hash.
    Every string is valid input, including the empty string.
    """
    digest = hashlib.sha3_512()
    digest.update(salt.encode("utf-8"))
    digest.update(password.encode("utf-8"))
    return base64.b64encode(digest.digest()).decode("ascii")


def verify_password(salt: str, password: str, expected_hash: str) -> bool:
    """Return True if password hashed with salt equals expected_hash."""
    return hash_password(salt, password) == expected_hash


# ---------------------------------------------------------------------------
# Random strings
# ---------------------------------------------------------------------------


def generate_token(length: int) -> str:
    """Return exactly length characters drawn uniformly from [A-Za-z0-9]."""
    if length < 0:
        raise ValueError("length must be non-negative")
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))


def generate_salt() -> str:
    """Return a fresh per-user salt of SALT_LENGTH characters."""
    return generate_token(get_settings().salt_length)


def generate_session_token() -> str:
    """Return a fresh session token of SESSION_TOKEN_LENGTH characters."""
    return generate_token(get_settings().session_token_length)

"""
auth/tokens.py -- Password hashing and one-time code generation.

Passwords: bcrypt used directly (no passlib wrapper) with a fixed cost factor
     of 10 rounds. Each hash carries its own salt, so two registrations with
     the same password produce different hashes.

OTP codes: six decimal digits drawn uniformly from [100000, 999999] using the
     secrets module, so the leading digit is never zero and the string is
     always exactly six ASCII digits.

Layer rule: no imports from api/.
"""

from __future__ import annotations

import secrets

import bcrypt

BCRYPT_ROUNDS = 10

OTP_MIN = 100000
OTP_MAX = 999999


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    bcrypt only looks at the first 72 bytes of its input; longer passwords
    are truncated before hashing.
    """
    return bcrypt.hashpw(plain.encode("utf-8")[:72], bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8")[:72], hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash in storage
        return False


def generate_otp() -> str:
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))

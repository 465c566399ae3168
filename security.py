"""Password hashing and verification."""

from __future__ import annotations

import secrets

from argon2 import PasswordHasher, exceptions as argon_exc

_ph = PasswordHasher()
_PREFIX = "argon2$"


def hash_password(password: str) -> str:
    """Create an Argon2 hash with a prefix for detection."""
    return f"{_PREFIX}{_ph.hash(password)}"


def is_legacy_hash(stored: str | None) -> bool:
    """Unprefixed values are plaintext passwords carried over from old data files."""
    return bool(stored) and not str(stored).startswith(_PREFIX)


def verify_password(password: str, stored_hash: str | None) -> bool:
    stored = stored_hash or ""
    if not stored:
        return False
    if stored.startswith(_PREFIX):
        try:
            return _ph.verify(stored[len(_PREFIX) :], password)
        except (argon_exc.VerifyMismatchError, argon_exc.VerificationError, argon_exc.InvalidHashError):
            return False
    return secrets.compare_digest(stored.encode("utf-8"), password.encode("utf-8"))

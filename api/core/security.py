"""Security helpers (hashing and verification)."""

from __future__ import annotations

from argon2 import PasswordHasher as _Argon2Hasher, exceptions as argon_exc


class PasswordHasher:
    """Salted one-way password digests backed by Argon2id."""

    def __init__(self, hasher: _Argon2Hasher | None = None) -> None:
        self._ph = hasher or _Argon2Hasher()

    def hash(self, password: str) -> str:
        return self._ph.hash(password)

    def verify(self, stored_hash: str | None, password: str) -> bool:
        """Return True only when ``password`` produced ``stored_hash``."""
        if not stored_hash:
            return False
        try:
            return self._ph.verify(stored_hash, password)
        except (argon_exc.VerifyMismatchError, argon_exc.VerificationError, argon_exc.InvalidHashError):
            return False

    def needs_rehash(self, stored_hash: str) -> bool:
        """True when the digest was made with weaker parameters than the current ones."""
        try:
            return self._ph.check_needs_rehash(stored_hash)
        except argon_exc.InvalidHashError:
            return True


default_hasher = PasswordHasher()

"""
Credential hashing (argon2id) and the password policy applied at registration.

Only the encoded hash is stored. Verification returns False for any mismatch
or unreadable hash instead of raising.
"""

from __future__ import annotations

from collections.abc import Callable

import argon2

from aceapt.config import get_settings

_hasher = argon2.PasswordHasher(
    time_cost=2,
    memory_cost=64 * 1024,  # KiB
    parallelism=1,
    hash_len=32,
    salt_len=16,
    type=argon2.Type.ID,
)

# (rule, message) pairs checked after the length bounds
_CHARACTER_RULES: tuple[tuple[Callable[[str], bool], str], ...] = (
    (lambda p: any(c.isalpha() for c in p), "Password must contain at least one letter"),
    (lambda p: any(c.isdigit() for c in p), "Password must contain at least one digit"),
)


class PasswordStrengthError(ValueError):
    """The password fails the registration policy. The message says which rule."""


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return _hasher.verify(password_hash, password)
    except (argon2.exceptions.VerifyMismatchError, argon2.exceptions.InvalidHashError):
        return False


def check_needs_rehash(password_hash: str) -> bool:
    """True when ``password_hash`` was made with parameters other than the current ones."""
    return _hasher.check_needs_rehash(password_hash)


def validate_password_strength(password: str) -> None:
    """
    Enforce the registration policy: non-blank, within the configured length
    bounds, and containing at least one letter and one digit.

    Raises:
        PasswordStrengthError: naming the first rule that failed.
    """
    settings = get_settings()
    if not password or password.isspace():
        msg = "Password cannot be empty"
        raise PasswordStrengthError(msg)

    if not settings.password_min_length <= len(password) <= settings.password_max_length:
        if len(password) < settings.password_min_length:
            msg = f"Password must be at least {settings.password_min_length} characters"
        else:
            msg = f"Password must not exceed {settings.password_max_length} characters"
        raise PasswordStrengthError(msg)

    for rule, message in _CHARACTER_RULES:
        if not rule(password):
            raise PasswordStrengthError(message)

"""Password hashing and sign-up field validation."""

import re

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

MIN_PASSWORD_LENGTH = 8

EMAIL_RE = re.compile(r"^[A-Z0-9a-z._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")

ph = PasswordHasher()


def hash_password(password: str) -> str:
    """Salted Argon2id hash in the self-describing ``$argon2id$...`` format."""
    return ph.hash(password)


def verify_password(password: str, stored: str) -> bool:
    """Check ``password`` against a hash produced by ``hash_password``.

    A mismatch and a stored value that is not an Argon2 hash both give False.
    """
    try:
        return ph.verify(stored, password)
    except (VerificationError, InvalidHashError):
        return False


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email))


def is_valid_password(password: str) -> bool:
    return len(password) >= MIN_PASSWORD_LENGTH

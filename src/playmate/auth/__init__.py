"""Local account credentials and validation."""

from playmate.auth.errors import (
    AccountValidationError,
    AuthError,
    DuplicateAccountError,
    InvalidEmailError,
    VerificationError,
    WeakPasswordError,
)
from playmate.auth.passwords import (
    MIN_PASSWORD_LENGTH,
    hash_password,
    is_valid_email,
    is_valid_password,
    verify_password,
)

__all__ = [
    "AccountValidationError",
    "AuthError",
    "DuplicateAccountError",
    "InvalidEmailError",
    "MIN_PASSWORD_LENGTH",
    "VerificationError",
    "WeakPasswordError",
    "hash_password",
    "is_valid_email",
    "is_valid_password",
    "verify_password",
]

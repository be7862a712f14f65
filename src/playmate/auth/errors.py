"""Account errors surfaced directly to the caller, without sample-data fallback."""


class AuthError(Exception):
    """Base class for sign-up and login errors."""

    pass


class AccountValidationError(AuthError):
    """A sign-up field failed validation."""

    pass


class InvalidEmailError(AccountValidationError):
    def __init__(self, message: str = "Please enter a valid email address"):
        super().__init__(message)


class WeakPasswordError(AccountValidationError):
    def __init__(self, message: str = "Password must be at least 8 characters"):
        super().__init__(message)


class DuplicateAccountError(AccountValidationError):
    """Username or email is already in the roster."""

    pass


class VerificationError(AuthError):
    """The Steam identity given at sign-up could not be verified."""

    pass

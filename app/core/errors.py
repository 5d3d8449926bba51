"""Error taxonomy for the account lifecycle. Each class carries its HTTP status."""


class AccountError(Exception):
    """Base for errors reported to the caller as {"message", "success": false}."""

    status_code = 400

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class ValidationError(AccountError):
    """Missing or malformed input."""


class ConflictError(AccountError):
    """An account with this email already exists."""


class AuthError(AccountError):
    """Bad credentials. The message never says which field was wrong."""


class RoleMismatchError(AccountError):
    """Credentials are valid but the account has a different role."""


class NotFoundError(AccountError):
    """The authenticated account no longer exists."""


class UploadError(AccountError):
    """The remote media host could not store the file."""

    status_code = 500


class InternalError(AccountError):
    """Anything unexpected; the caller only sees a generic message."""

    status_code = 500


class InvalidFileError(Exception):
    """Raised by the upload encoder when the file record is absent or incomplete."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(Exception):
    """Raised when a required setting (signing secret, media host) is missing."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class MediaUploadError(Exception):
    """Raised when the media host rejects an upload or cannot be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)

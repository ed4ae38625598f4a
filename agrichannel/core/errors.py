"""
Typed failures raised by the services and translated to HTTP responses by
the exception handlers registered in ``agrichannel.main``.
"""


class AppError(Exception):
    status_code = 500
    default_message = "Server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request"


class InvalidFileError(ValidationError):
    default_message = "Invalid file type"


class AuthError(AppError):
    status_code = 401
    default_message = "Invalid password."


class UnauthenticatedError(AuthError):
    default_message = "Unauthorized"


class ForbiddenError(AppError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class ConflictError(AppError):
    status_code = 409
    default_message = "Conflict"


class StorageError(AppError):
    status_code = 500
    default_message = "Database error"


class StorageBusyError(StorageError):
    default_message = "Database is busy, try again"

# backend/errors.py


class AppError(Exception):
    """Base class for errors reported to API callers"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(AppError):
    """Malformed or semantically invalid request data"""

    status_code = 400


class NotFound(AppError):
    """Well-formed request that refers to nothing"""

    status_code = 404


class Unauthorized(AppError):
    status_code = 401

# storefront/domain/errors.py


class StorefrontError(Exception):
    """Base error; status_code is the HTTP status the API answers with."""

    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__


class ValidationError(StorefrontError):
    """Bad phone format, password mismatch, empty order, total mismatch..."""

    status_code = 400


class Unauthorized(StorefrontError):
    status_code = 401


class NotFound(StorefrontError):
    status_code = 404


class InternalError(StorefrontError):
    status_code = 500

"""Error types raised by the dispatch and webhook paths"""
from typing import Optional


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Bad or incomplete input: fail fast, never retried"""
    status_code = 400


class AttributionError(AppError):
    """A webhook event could not be tied to a user account"""
    status_code = 400


class SignatureError(AppError):
    status_code = 401


class ProviderError(AppError):
    """The calling platform rejected a request or could not be reached"""
    status_code = 502

    def __init__(self, message: str, http_status: Optional[int] = None):
        super().__init__(message)
        self.http_status = http_status

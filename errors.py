from __future__ import annotations


class ServiceError(Exception):
    """Base error for every operation; carries the message shown to the client."""

    status_code = 400
    code = "SERVICE_ERROR"

    def __init__(self, message: str, code: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code


class ValidationFailed(ServiceError):
    status_code = 400
    code = "VALIDATION_ERROR"


class NotFound(ServiceError):
    status_code = 404
    code = "NOT_FOUND"


class Unauthorized(ServiceError):
    status_code = 401
    code = "UNAUTHORIZED"


class PaymentFailed(ServiceError):
    status_code = 402
    code = "PAYMENT_FAILED"

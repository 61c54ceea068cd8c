"""
Domain errors raised by services and route handlers.
Each maps to an HTTP status; app.main registers the handler that renders them.
"""
from typing import Optional


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"error": self.message}


class ValidationError(AppError):
    status_code = 400


class ConflictError(AppError):
    status_code = 400


class AuthError(AppError):
    status_code = 401


class InvalidTokenError(AuthError):
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class PlanRestrictedError(AppError):
    """Feature reserved to a higher plan."""
    status_code = 403

    def to_dict(self) -> dict:
        return {"error": self.message, "upgrade": True}


class QuotaExceededError(AppError):
    status_code = 403

    def __init__(self, usage: dict):
        super().__init__("Limit reached")
        self.usage = usage

    def to_dict(self) -> dict:
        return {
            "error": self.message,
            "message": f"You have used your {self.usage['limit']} free generations",
            "upgrade": True,
            "usage": self.usage,
        }


class UpstreamTransientError(AppError):
    status_code = 503

    def __init__(self, message: str, retry_after: int = 20):
        super().__init__(message)
        self.retry_after = retry_after

    def to_dict(self) -> dict:
        return {"error": self.message, "retryAfter": self.retry_after}


class UpstreamError(AppError):
    status_code = 500


class StorageError(AppError):
    status_code = 500


class WebhookVerificationError(AppError):
    status_code = 400

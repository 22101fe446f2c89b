"""
Error kinds surfaced by the backend API.

Each kind maps to one ``AppError`` subclass. The API layer turns any raised
``AppError`` into ``{"exceptions": [{"kind": ..., "message": ...}]}``.
"""

from typing import Optional


class AppError(Exception):
    """Base class for domain errors reported to the admin page"""

    kind = "error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class BadArgumentError(AppError):
    kind = "bad-argument"
    status_code = 400


class ValidationError(AppError):
    """Domain validation failed; ``fields`` lists the offending field names"""

    kind = "validation-error"
    status_code = 422

    def __init__(self, message: str, fields: Optional[list[str]] = None):
        super().__init__(message)
        self.fields = list(fields or [])

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["fields"] = self.fields
        return data


class NotFoundError(AppError):
    kind = "not-found"
    status_code = 404


class UnknownFieldError(AppError):
    kind = "unknown-field"
    status_code = 400


class PersistenceError(AppError):
    kind = "persistence-failure"
    status_code = 500


class RendererError(AppError):
    kind = "renderer-failure"
    status_code = 500


class MailerError(AppError):
    """Raised by the mailer; callers treat it as non-fatal"""

    kind = "mailer-failure"
    status_code = 502


class CsrfError(AppError):
    """The posted CSRF token is missing or does not match the cookie"""

    kind = "csrf-failure"
    status_code = 403

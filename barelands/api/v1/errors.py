"""
Typed errors raised by services and handlers.

Each error carries a machine-readable ``kind`` and the HTTP status it maps to;
``barelands.api.main`` renders them as ``{"success": false, "kind", "message", "details"}``.
"""

from typing import Any


class BarelandsError(Exception):
    kind = "internal_error"
    status_code = 500

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": False,
            "kind": self.kind,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(BarelandsError):
    kind = "not_found"
    status_code = 404


class InvalidRequestError(BarelandsError):
    kind = "validation_error"
    status_code = 400

    @classmethod
    def from_errors(cls, errors: list[dict], message: str = "Invalid request data"):
        """Build from pydantic/FastAPI ``errors()`` output, keeping the JSON-safe keys only."""
        details = [
            {
                "loc": [str(part) for part in error.get("loc", ())],
                "msg": error.get("msg", ""),
                "type": error.get("type", ""),
            }
            for error in errors
        ]
        return cls(message, details=details)


class UnauthenticatedError(BarelandsError):
    kind = "unauthenticated"
    status_code = 401


class StorageFailureError(BarelandsError):
    kind = "storage_failure"
    status_code = 500


class MailDeliveryError(BarelandsError):
    kind = "mail_failure"
    status_code = 500

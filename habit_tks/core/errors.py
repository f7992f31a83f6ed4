"""Service-level error taxonomy.

Services raise these; controllers never catch them individually. The
application factory installs a handler that turns any of them into a
``{"ok": false, "error": <code>}`` response with the matching status.
Subclassing ``ValueError`` keeps ``str(exc)`` equal to the error code.
"""

from __future__ import annotations

from typing import Any, Optional


class HabitTksError(ValueError):
    code = "error"
    status_code = 400

    def __init__(self, message: Optional[str] = None, *, details: Any = None) -> None:
        super().__init__(self.code)
        self.message = message or self.code
        self.details = details

    def to_dict(self) -> dict:
        body = {"ok": False, "error": self.code, "message": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class NotFoundError(HabitTksError):
    code = "not_found"
    status_code = 404


class AccessDeniedError(HabitTksError):
    code = "access_denied"
    status_code = 403


class InvalidOperationError(HabitTksError):
    code = "invalid_operation"
    status_code = 409


class RequestValidationError(HabitTksError):
    code = "validation_error"
    status_code = 400


__all__ = [
    "HabitTksError",
    "NotFoundError",
    "AccessDeniedError",
    "InvalidOperationError",
    "RequestValidationError",
]

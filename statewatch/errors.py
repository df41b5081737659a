"""
Error taxonomy shared by the data layer, the repository and the API.
"""
from __future__ import annotations

from typing import Any, Optional


class StatewatchError(Exception):
    """Base error. ``status_code`` is the HTTP status the API answers with."""

    status_code = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message

    def payload(self) -> dict[str, Any]:
        return {"error": self.message}


class ValidationError(StatewatchError):
    """Missing or malformed input."""

    status_code = 400

    def __init__(
        self,
        message: str = "Invalid input",
        required: Optional[list[str]] = None,
        details: Optional[list[dict]] = None,
    ) -> None:
        super().__init__(message)
        self.required = required
        self.details = details

    def payload(self) -> dict[str, Any]:
        body = super().payload()
        if self.required is not None:
            body["required"] = self.required
        if self.details:
            body["details"] = self.details
        return body


class Unauthorized(StatewatchError):
    """No identity on a request that needs one."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized: Please sign in") -> None:
        super().__init__(message)


class Forbidden(StatewatchError):
    """Identity present but the role is insufficient."""

    status_code = 403


class NotFound(StatewatchError):
    status_code = 404


class UpstreamFailure(StatewatchError):
    """Store or network failure. The real message is kept for diagnostics."""

    status_code = 500

    def payload(self) -> dict[str, Any]:
        return {"error": "Internal server error", "message": self.message}


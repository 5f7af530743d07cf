"""
Clipshare error taxonomy.

Every component raises the most specific kind at the point of detection.
Store failures are translated into one of these before they leave the store
layer, so callers above it never see driver exceptions.
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class ClipshareError(Exception):
    """Base class for every error the core reports to its callers."""

    kind: str = "Error"
    status_code: int = 500
    retryable: bool = False

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """User-visible payload. Context stays server-side."""
        return {
            "success": False,
            "kind": self.kind,
            "message": self.message,
            "retryable": self.retryable,
        }


class InvalidInput(ClipshareError):
    """Missing or malformed fields, malformed ids."""

    kind = "InvalidInput"
    status_code = 400


class NotFound(ClipshareError):
    """A referenced entity does not exist."""

    kind = "NotFound"
    status_code = 404


class Forbidden(ClipshareError):
    """The caller does not own the entity it tries to mutate."""

    kind = "Forbidden"
    status_code = 403


class InvalidOperation(ClipshareError):
    """Self-follow, duplicate playlist membership, empty update."""

    kind = "InvalidOperation"
    status_code = 400


class Unavailable(ClipshareError):
    """Store timeout or transient failure. The whole operation may be retried."""

    kind = "Unavailable"
    status_code = 503
    retryable = True

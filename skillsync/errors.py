"""Error taxonomy surfaced by the resume API.

Every error carries the HTTP status it maps to and a message that is safe to
show to the end user.
"""

from __future__ import annotations

from typing import Any, Dict


class ApiError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, status_code: int | None = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_envelope(self) -> Dict[str, Any]:
        return {"success": False, "error": self.message}


class FileValidationError(ApiError):
    """Upload rejected by the gate (type, extension, size, count, field)."""

    status_code = 400
    default_message = "File upload error."


class ExtractionError(ApiError):
    """No usable text could be pulled out of the staged document."""

    status_code = 400
    default_message = "Could not extract text from file"


class RequestValidationError(ApiError):
    status_code = 400
    default_message = "Validation failed"


class NotFoundError(ApiError):
    status_code = 404
    default_message = "Resume not found"


class StorageError(ApiError):
    status_code = 500
    default_message = "File upload to storage failed"


class PersistenceError(ApiError):
    status_code = 500
    default_message = "Failed to save resume data"

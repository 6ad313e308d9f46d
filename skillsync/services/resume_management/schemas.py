from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from skillsync.errors import RequestValidationError


class ResumeMetadata(BaseModel):
    """User-editable resume fields (upload form and PUT body)."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)


def parse_metadata(payload: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    """Validate ``payload`` and return only the fields that were provided."""
    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        raise RequestValidationError()
    try:
        metadata = ResumeMetadata.model_validate(dict(payload))
    except ValidationError as exc:
        raise RequestValidationError() from exc
    return metadata.model_dump(exclude_none=True)

from __future__ import annotations

from typing import Any


def get_resume_text(resume_row: Any) -> str:
    # Reanalysis works from the text captured at upload; the stored file is never re-read.
    return (getattr(resume_row, "extracted_text", None) or "").strip()

"""
SkillSync configuration

Environment-backed settings for the resume ingestion pipeline. Each section is
an immutable value built once and handed to the component that consumes it,
so tests can construct their own instances without touching the environment.
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Optional


PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TXT_MIME = "text/plain"


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name)
    if raw in (None, ""):
        return default
    return float(raw)


@dataclass(frozen=True)
class UploadConfig:
    """Static limits enforced by the upload gate."""

    field_name: str = "resume"
    allowed_mime_types: FrozenSet[str] = frozenset({PDF_MIME, DOCX_MIME, TXT_MIME})
    allowed_extensions: tuple = (".pdf", ".docx", ".txt")
    max_file_size: int = 5 * 1024 * 1024
    max_files: int = 1
    upload_dir: Path = field(
        default_factory=lambda: Path(tempfile.gettempdir()) / "skillsync_uploads"
    )

    @property
    def max_file_size_mb(self) -> int:
        return self.max_file_size // (1024 * 1024)

    @classmethod
    def from_env(cls) -> "UploadConfig":
        max_mb = int(os.getenv("RESUME_MAX_SIZE_MB", "5"))
        upload_dir = os.getenv("UPLOAD_TMP_DIR")
        kwargs = {"max_file_size": max_mb * 1024 * 1024}
        if upload_dir:
            kwargs["upload_dir"] = Path(upload_dir)
        return cls(**kwargs)


@dataclass(frozen=True)
class ExtractionConfig:
    """LLM settings for skill extraction (OpenAI-compatible endpoint)."""

    api_key: Optional[str] = None
    base_url: Optional[str] = "https://openrouter.ai/api/v1"
    model: str = "meta-llama/llama-3.1-8b-instruct"
    temperature: float = 0.3
    max_tokens: int = 2000
    timeout: Optional[float] = 60.0

    @classmethod
    def from_env(cls) -> "ExtractionConfig":
        return cls(
            api_key=os.getenv("OPENROUTER_API_KEY") or os.getenv("OPENAI_API_KEY"),
            base_url=os.getenv(
                "SKILL_EXTRACTOR_BASE_URL", "https://openrouter.ai/api/v1"
            )
            or None,
            model=os.getenv("SKILL_EXTRACTOR_MODEL", "meta-llama/llama-3.1-8b-instruct"),
            temperature=float(os.getenv("SKILL_EXTRACTOR_TEMPERATURE", "0.3")),
            max_tokens=int(os.getenv("SKILL_EXTRACTOR_MAX_TOKENS", "2000")),
            timeout=_env_float("SKILL_EXTRACTOR_TIMEOUT", 60.0),
        )


@dataclass(frozen=True)
class StorageConfig:
    """Object storage settings (S3 or any S3-compatible store)."""

    bucket: str = "skillsync-resumes"
    region: str = "ap-southeast-2"
    endpoint_url: Optional[str] = None
    public_base_url: Optional[str] = None
    namespace: str = "resumes"
    connect_timeout: float = 10.0
    read_timeout: float = 60.0

    @classmethod
    def from_env(cls) -> "StorageConfig":
        return cls(
            bucket=os.getenv("S3_BUCKET_NAME", "skillsync-resumes"),
            region=os.getenv("AWS_REGION", "ap-southeast-2"),
            endpoint_url=os.getenv("STORAGE_ENDPOINT_URL") or None,
            public_base_url=os.getenv("STORAGE_PUBLIC_BASE_URL") or None,
            namespace=os.getenv("STORAGE_NAMESPACE", "resumes"),
            connect_timeout=float(os.getenv("STORAGE_CONNECT_TIMEOUT", "10")),
            read_timeout=float(os.getenv("STORAGE_READ_TIMEOUT", "60")),
        )

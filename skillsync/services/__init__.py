"""
Services package for SkillSync.

- resume_management: upload gate, text extraction, LLM skill extraction,
  object storage and the ingestion pipeline
"""

from .resume_management import (
    ResumePipeline,
    ResumeStorageService,
    SkillExtractionClient,
)

__all__ = [
    "ResumePipeline",
    "ResumeStorageService",
    "SkillExtractionClient",
]

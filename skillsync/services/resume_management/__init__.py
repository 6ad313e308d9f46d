"""
Resume management services package.

This package contains services for handling resume-specific operations:
- Upload validation and temp staging
- Text extraction per file format
- LLM skill extraction
- Object storage and the end-to-end pipeline
"""

from .resume_storage_service import ResumeStorageService
from .resume_pipeline import ResumePipeline
from .skill_extractor import (
    ExtractedSkill,
    SkillExtractionClient,
    SkillExtractionResult,
)
from .text_extraction import extract_text, register_extractor
from .upload_gate import UploadedDocument, stage_upload, staged_upload

__all__ = [
    # Storage services
    "ResumeStorageService",
    # Pipeline services
    "ResumePipeline",
    # Skill extraction
    "ExtractedSkill",
    "SkillExtractionClient",
    "SkillExtractionResult",
    # File handling utilities
    "extract_text",
    "register_extractor",
    "UploadedDocument",
    "stage_upload",
    "staged_upload",
]

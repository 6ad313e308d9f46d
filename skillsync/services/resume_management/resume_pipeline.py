"""
Resume processing pipeline.

This file handles the complete resume lifecycle:
1. Stage and validate the upload (upload_gate)
2. Extract plain text (text_extraction)
3. Extract skills with the LLM (skill_extractor, fail-open)
4. Upload the original file to object storage (ResumeStorageService)
5. Insert the catalog row
The staged file is removed by ``staged_upload`` whichever step fails.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from werkzeug.datastructures import MultiDict

from skillsync.config import UploadConfig
from skillsync.errors import NotFoundError, PersistenceError
from skillsync.models import Resume, db

from .helpers import get_resume_text
from .resume_storage_service import ResumeStorageService
from .schemas import parse_metadata
from .skill_extractor import ExtractedSkill, SkillExtractionClient
from .text_extraction import extract_text
from .upload_gate import UploadedDocument, staged_upload

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _skills_payload(skills: List[ExtractedSkill]) -> List[Dict[str, Any]]:
    return [skill.model_dump() for skill in skills]


class ResumePipeline:
    """
    Orchestrates upload, extraction, storage and catalog writes for resumes.

    Steps run sequentially and are not transactional: an object uploaded
    before a failed catalog insert is left in storage.
    """

    def __init__(
        self,
        storage: Optional[ResumeStorageService] = None,
        extractor: Optional[SkillExtractionClient] = None,
        upload_config: Optional[UploadConfig] = None,
    ):
        self.storage = storage or ResumeStorageService()
        self.extractor = extractor or SkillExtractionClient()
        self.upload_config = upload_config or UploadConfig.from_env()

    def ingest_upload(
        self, files: MultiDict, form: Mapping[str, Any], user_id: str
    ) -> Tuple[Resume, List[ExtractedSkill]]:
        """
        Process an uploaded resume through the complete pipeline.

        Args:
            files: Request files (``request.files``)
            form: Request form fields; ``title`` and ``description`` are optional
            user_id: Owner of the new record

        Returns:
            The inserted resume and the skills extracted for it
        """
        # Blank form fields mean "use the default", not "set empty".
        metadata = parse_metadata(
            {k: v for k, v in (form or {}).items() if isinstance(v, str) and v.strip()}
        )

        with staged_upload(files, self.upload_config) as document:
            logger.info(
                f"Staged resume '{document.original_name}' ({document.size} bytes) for user_id={user_id}"
            )
            text = extract_text(document.path, document.extension)
            return self.persist_upload(
                document,
                text,
                user_id,
                title=metadata.get("title"),
                description=metadata.get("description"),
            )

    def persist_upload(
        self,
        document: UploadedDocument,
        extracted_text: str,
        user_id: str,
        *,
        title: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Tuple[Resume, List[ExtractedSkill]]:
        skills = self.extractor.extract_skills(extracted_text)

        file_content = document.path.read_bytes()
        storage_key = self.storage.build_object_key(user_id, document.original_name)
        self.storage.upload_bytes(storage_key, file_content, document.mimetype)
        file_url = self.storage.get_public_url(storage_key)

        now = _utcnow()
        resume = Resume(
            user_id=user_id,
            file_name=document.original_name,
            file_url=file_url,
            storage_path=storage_key,
            title=title or document.original_name,
            description=description or "",
            extracted_text=extracted_text,
            extracted_skills=_skills_payload(skills),
            file_size=document.size,
            content_type=document.mimetype,
            uploaded_at=now,
        )
        try:
            db.session.add(resume)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.error(f"Failed to insert resume for user_id={user_id}: {exc}")
            logger.warning(f"Storage object left without catalog row: {storage_key}")
            raise PersistenceError() from exc

        logger.info(
            f"Saved resume_id={resume.id} with {len(skills)} skills (key={storage_key})"
        )
        return resume, skills

    def reanalyze(
        self, resume_id: int, user_id: str
    ) -> Tuple[Resume, List[ExtractedSkill]]:
        resume = self.get_resume(resume_id, user_id)
        skills = self.extractor.extract_skills(get_resume_text(resume))

        resume.extracted_skills = _skills_payload(skills)
        resume.updated_at = _utcnow()
        try:
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.error(f"Failed to update skills for resume_id={resume_id}: {exc}")
            raise PersistenceError("Failed to update skills") from exc

        logger.info(f"Re-analyzed resume_id={resume_id}: {len(skills)} skills")
        return resume, skills

    def list_resumes(self, user_id: str) -> List[Resume]:
        return (
            Resume.query.filter_by(user_id=user_id)
            .order_by(Resume.uploaded_at.desc(), Resume.id.desc())
            .all()
        )

    def get_resume(self, resume_id: int, user_id: str) -> Resume:
        # Foreign and missing ids are reported identically.
        resume = Resume.get_owned(resume_id, user_id)
        if resume is None:
            raise NotFoundError()
        return resume

    def update_metadata(
        self, resume_id: int, user_id: str, payload: Optional[Mapping[str, Any]]
    ) -> Resume:
        changes = parse_metadata(payload)
        resume = self.get_resume(resume_id, user_id)

        for field_name, value in changes.items():
            setattr(resume, field_name, value)
        resume.updated_at = _utcnow()
        try:
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.error(f"Failed to update resume_id={resume_id}: {exc}")
            raise PersistenceError("Failed to update resume") from exc
        return resume

    def delete_resume(self, resume_id: int, user_id: str) -> None:
        resume = self.get_resume(resume_id, user_id)

        storage_key = resume.storage_path
        if storage_key:
            try:
                removed = self.storage.delete_object(storage_key)
            except Exception:
                logger.exception(f"Storage deletion error for {storage_key}")
                removed = False
            if not removed:
                logger.warning(
                    f"Continuing with catalog deletion of resume_id={resume_id}; "
                    f"storage object {storage_key} may remain"
                )

        try:
            db.session.delete(resume)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.error(f"Failed to delete resume_id={resume_id}: {exc}")
            raise PersistenceError("Failed to delete resume") from exc
        logger.info(f"Deleted resume_id={resume_id} for user_id={user_id}")

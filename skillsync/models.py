# models.py

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from skillsync.extensions import db


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class UserProfile(db.Model):
    __tablename__ = "user_profiles"
    id = db.Column(db.String, primary_key=True)  # token sub
    email = db.Column(db.String, index=True)
    name = db.Column(db.String)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    def __repr__(self):
        return f"<UserProfile {self.id}>"


class Resume(db.Model):
    __tablename__ = "resumes"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.String, db.ForeignKey("user_profiles.id"), nullable=False, index=True
    )
    file_name = db.Column(db.String, nullable=False)  # original filename from user
    file_url = db.Column(db.String)
    storage_path = db.Column(db.String)  # object storage key
    title = db.Column(db.String(100))
    description = db.Column(db.String(500), default="")
    extracted_text = db.Column(db.Text, nullable=False, default="")
    extracted_skills = db.Column(db.JSON, nullable=False, default=list)
    file_size = db.Column(db.BigInteger)
    content_type = db.Column(db.String)
    uploaded_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=True)

    user = db.relationship("UserProfile", backref=db.backref("resumes", lazy="dynamic"))

    @staticmethod
    def get_owned(resume_id: int, user_id: str) -> Optional["Resume"]:
        """Fetch a resume only if it belongs to ``user_id``."""
        return Resume.query.filter_by(id=resume_id, user_id=user_id).first()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "file_name": self.file_name,
            "file_url": self.file_url,
            "storage_path": self.storage_path,
            "title": self.title,
            "description": self.description or "",
            "extracted_text": self.extracted_text,
            "extracted_skills": list(self.extracted_skills or []),
            "file_size": self.file_size,
            "content_type": self.content_type,
            "uploaded_at": _isoformat(self.uploaded_at),
            "updated_at": _isoformat(self.updated_at),
        }

    def __repr__(self):
        return f"<Resume {self.id} - {self.file_name}>"

"""Shared fixtures: in-memory app, fake object store and a deterministic LLM."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List

import pytest
from botocore.exceptions import ClientError
from langchain_core.language_models import FakeListChatModel

from skillsync.app import create_app
from skillsync.config import ExtractionConfig, StorageConfig, UploadConfig
from skillsync.extensions import db
from skillsync.services.resume_management import (
    ResumePipeline,
    ResumeStorageService,
    SkillExtractionClient,
)

GO_SKILL_RESPONSE = (
    '[{"name":"Go","category":"Languages","level":"intermediate","confidence":0.9}]'
)


class FakeS3Client:
    """Minimal in-memory stand-in for the boto3 S3 client calls we make."""

    def __init__(self) -> None:
        self.objects: Dict[str, bytes] = {}
        self.put_calls: List[dict] = []
        self.fail_put = False
        self.fail_delete = False

    def put_object(self, **kwargs):
        self.put_calls.append(kwargs)
        if self.fail_put:
            raise ClientError(
                {"Error": {"Code": "ServiceUnavailable", "Message": "down"}},
                "PutObject",
            )
        key = kwargs["Key"]
        if kwargs.get("IfNoneMatch") == "*" and key in self.objects:
            raise ClientError(
                {"Error": {"Code": "PreconditionFailed", "Message": "exists"}},
                "PutObject",
            )
        self.objects[key] = kwargs["Body"]
        return {"ETag": '"fake"'}

    def delete_object(self, **kwargs):
        if self.fail_delete:
            raise ClientError(
                {"Error": {"Code": "AccessDenied", "Message": "denied"}},
                "DeleteObject",
            )
        self.objects.pop(kwargs["Key"], None)
        return {}


def staged_files(upload_dir: Path) -> List[Path]:
    if not upload_dir.exists():
        return []
    return [p for p in upload_dir.iterdir() if p.is_file()]


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture
def upload_config(upload_dir: Path) -> UploadConfig:
    return UploadConfig(upload_dir=upload_dir)


@pytest.fixture
def s3_client() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture
def storage(s3_client: FakeS3Client) -> ResumeStorageService:
    return ResumeStorageService(
        StorageConfig(bucket="test-bucket", region="us-east-1"), s3_client=s3_client
    )


@pytest.fixture
def fake_llm() -> FakeListChatModel:
    return FakeListChatModel(responses=[GO_SKILL_RESPONSE])


@pytest.fixture
def pipeline(storage, fake_llm, upload_config) -> ResumePipeline:
    return ResumePipeline(
        storage=storage,
        extractor=SkillExtractionClient(llm=fake_llm, config=ExtractionConfig()),
        upload_config=upload_config,
    )


@pytest.fixture
def app(pipeline, monkeypatch, tmp_path):
    monkeypatch.setenv("SKILLSYNC_LOG", str(tmp_path / "skillsync.log"))
    # The bearer token doubles as the user id in tests.
    monkeypatch.setattr(
        "skillsync.jwt_auth._decode_token",
        lambda token: {"sub": token, "email": f"{token}@example.com"},
    )
    app = create_app(
        {"TESTING": True, "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:"},
        pipeline=pipeline,
    )
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers():
    def _headers(user_id: str = "user-1") -> dict:
        return {"Authorization": f"Bearer {user_id}"}

    return _headers


@pytest.fixture
def list_staged(upload_dir: Path):
    """Return a callable listing whatever is left in the temp upload dir."""
    return lambda: staged_files(upload_dir)

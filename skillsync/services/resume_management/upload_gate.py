"""
Upload gate for resume files.

Validates the multipart payload against an ``UploadConfig`` and stages the
accepted file in local temp storage. ``staged_upload`` wraps staging in a
context manager that always removes the staged file when the request is done.
"""

from __future__ import annotations

import logging
import os
import random
import time
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Tuple

from werkzeug.datastructures import FileStorage, MultiDict

from skillsync.config import UploadConfig
from skillsync.errors import FileValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadedDocument:
    """A validated upload sitting in local temp storage."""

    path: Path
    original_name: str
    mimetype: str
    size: int
    field_name: str

    @property
    def extension(self) -> str:
        return _detect_extension(self.original_name)


def _detect_extension(filename: str) -> str:
    _, ext = os.path.splitext(filename.lower())
    return ext


def _collect_files(files: MultiDict, config: UploadConfig) -> List[Tuple[str, FileStorage]]:
    collected = []
    for field_name, storage in files.items(multi=True):
        if field_name != config.field_name:
            raise FileValidationError("Unexpected file field.")
        collected.append((field_name, storage))
    if len(collected) > config.max_files:
        raise FileValidationError(
            f"Too many files. Only {config.max_files} file allowed."
        )
    return collected


def _read_once(storage: FileStorage, limit: int) -> bytes:
    """Read at most ``limit`` bytes; a result of that length means oversized."""
    stream = storage.stream
    if hasattr(stream, "seek"):
        stream.seek(0)
    return stream.read(limit) or b""


def _staged_name(field_name: str, original_name: str) -> str:
    # Keep the extension's original case; it is only used for display.
    ext = os.path.splitext(original_name)[1]
    unique_suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9 - 1)}"
    return f"{field_name}-{unique_suffix}{ext}"


def validate_upload(files: MultiDict, config: UploadConfig) -> Tuple[str, FileStorage, bytes]:
    """Run every gate check; returns ``(field_name, storage, data)``.

    Nothing is written to disk here so a rejection has no side effects.
    """
    collected = _collect_files(files, config)
    if not collected or not collected[0][1].filename:
        raise FileValidationError("No file uploaded.")

    field_name, storage = collected[0]
    allowed = ", ".join(config.allowed_extensions)

    if storage.mimetype not in config.allowed_mime_types:
        raise FileValidationError(f"Invalid file type. Allowed types: {allowed}")

    if _detect_extension(storage.filename) not in config.allowed_extensions:
        raise FileValidationError(
            f"Invalid file extension. Allowed extensions: {allowed}"
        )

    data = _read_once(storage, config.max_file_size + 1)
    if len(data) > config.max_file_size:
        raise FileValidationError(
            f"File too large. Maximum size is {config.max_file_size_mb}MB."
        )
    return field_name, storage, data


def stage_upload(
    files: MultiDict, config: UploadConfig, upload_dir: Path | None = None
) -> UploadedDocument:
    """Validate the request files and write the accepted one to temp storage."""
    field_name, storage, data = validate_upload(files, config)

    target_dir = Path(upload_dir or config.upload_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / _staged_name(field_name, storage.filename)
    try:
        path.write_bytes(data)
    except OSError:
        cleanup_staged_file(path)
        raise

    logger.debug("Staged upload %s (%d bytes) at %s", storage.filename, len(data), path)
    return UploadedDocument(
        path=path,
        original_name=storage.filename,
        mimetype=storage.mimetype,
        size=len(data),
        field_name=field_name,
    )


def cleanup_staged_file(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning(f"Failed to remove staged file {path}: {exc}")


@contextmanager
def staged_upload(
    files: MultiDict, config: UploadConfig, upload_dir: Path | None = None
) -> Iterator[UploadedDocument]:
    """Stage an upload for the duration of a ``with`` block.

    The staged file is removed on every exit path, including exceptions.
    """
    document = stage_upload(files, config, upload_dir)
    try:
        yield document
    finally:
        cleanup_staged_file(document.path)

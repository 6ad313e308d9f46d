from __future__ import annotations

import io
import re

import pytest
from werkzeug.datastructures import FileStorage, MultiDict

from skillsync.errors import FileValidationError
from skillsync.services.resume_management.upload_gate import (
    stage_upload,
    staged_upload,
)


def _file(
    data: bytes = b"Skills: Go, Rust",
    filename: str = "cv.txt",
    mimetype: str = "text/plain",
) -> FileStorage:
    return FileStorage(stream=io.BytesIO(data), filename=filename, content_type=mimetype)


def _files(*pairs) -> MultiDict:
    return MultiDict(list(pairs))


class TestStageUpload:
    def test_accepts_txt_and_stages_under_unique_name(self, upload_config, list_staged):
        document = stage_upload(_files(("resume", _file())), upload_config)

        assert document.path.exists()
        assert document.path.read_bytes() == b"Skills: Go, Rust"
        assert re.fullmatch(r"resume-\d+-\d+\.txt", document.path.name)
        assert document.original_name == "cv.txt"
        assert document.mimetype == "text/plain"
        assert document.size == len(b"Skills: Go, Rust")
        assert document.field_name == "resume"
        assert list_staged() == [document.path]

    def test_extension_check_is_case_insensitive(self, upload_config):
        document = stage_upload(
            _files(("resume", _file(b"%PDF-1.4", "CV.PDF", "application/pdf"))),
            upload_config,
        )

        assert document.extension == ".pdf"
        assert document.path.name.endswith(".PDF")

    def test_two_uploads_never_share_a_staged_path(self, upload_config):
        first = stage_upload(_files(("resume", _file())), upload_config)
        second = stage_upload(_files(("resume", _file())), upload_config)

        assert first.path != second.path

    def test_rejects_disallowed_mime_type(self, upload_config, list_staged):
        with pytest.raises(FileValidationError) as exc_info:
            stage_upload(_files(("resume", _file(mimetype="image/png"))), upload_config)

        assert exc_info.value.status_code == 400
        assert exc_info.value.message.startswith("Invalid file type.")
        assert list_staged() == []

    def test_rejects_disallowed_extension(self, upload_config, list_staged):
        with pytest.raises(FileValidationError) as exc_info:
            stage_upload(_files(("resume", _file(filename="cv.exe"))), upload_config)

        assert exc_info.value.message == (
            "Invalid file extension. Allowed extensions: .pdf, .docx, .txt"
        )
        assert list_staged() == []

    def test_rejects_oversized_pdf(self, upload_config, list_staged):
        six_mb = b"%PDF-1.4\n" + b"0" * (6 * 1024 * 1024)

        with pytest.raises(FileValidationError) as exc_info:
            stage_upload(
                _files(("resume", _file(six_mb, "cv.pdf", "application/pdf"))),
                upload_config,
            )

        assert exc_info.value.message == "File too large. Maximum size is 5MB."
        assert list_staged() == []

    def test_size_check_reads_no_more_than_one_byte_past_limit(self, upload_config, list_staged):
        class _RecordingStream(io.BytesIO):
            def __init__(self, data):
                super().__init__(data)
                self.requested = []

            def read(self, size=-1):
                self.requested.append(size)
                return super().read(size)

        stream = _RecordingStream(b"a" * (upload_config.max_file_size * 3))
        upload = FileStorage(stream=stream, filename="cv.txt", content_type="text/plain")

        with pytest.raises(FileValidationError, match="File too large"):
            stage_upload(_files(("resume", upload)), upload_config)

        assert stream.requested == [upload_config.max_file_size + 1]
        assert list_staged() == []

    def test_accepts_file_exactly_at_limit(self, upload_config):
        data = b"a" * upload_config.max_file_size

        document = stage_upload(_files(("resume", _file(data))), upload_config)

        assert document.size == upload_config.max_file_size

    def test_rejects_more_than_one_file(self, upload_config, list_staged):
        with pytest.raises(FileValidationError) as exc_info:
            stage_upload(
                _files(("resume", _file()), ("resume", _file(filename="other.txt"))),
                upload_config,
            )

        assert exc_info.value.message == "Too many files. Only 1 file allowed."
        assert list_staged() == []

    def test_rejects_unexpected_field(self, upload_config, list_staged):
        with pytest.raises(FileValidationError) as exc_info:
            stage_upload(_files(("cv", _file())), upload_config)

        assert exc_info.value.message == "Unexpected file field."
        assert list_staged() == []

    @pytest.mark.parametrize(
        "files",
        [MultiDict(), MultiDict([("resume", FileStorage(stream=io.BytesIO(b""), filename=""))])],
    )
    def test_rejects_missing_file(self, upload_config, files):
        with pytest.raises(FileValidationError, match="No file uploaded."):
            stage_upload(files, upload_config)


class TestStagedUpload:
    def test_removes_staged_file_after_block(self, upload_config, list_staged):
        with staged_upload(_files(("resume", _file())), upload_config) as document:
            assert document.path.exists()

        assert not document.path.exists()
        assert list_staged() == []

    def test_removes_staged_file_when_block_raises(self, upload_config, list_staged):
        with pytest.raises(RuntimeError):
            with staged_upload(_files(("resume", _file())), upload_config) as document:
                raise RuntimeError("storage exploded")

        assert not document.path.exists()
        assert list_staged() == []

    def test_tolerates_file_already_removed(self, upload_config):
        with staged_upload(_files(("resume", _file())), upload_config) as document:
            document.path.unlink()

        assert not document.path.exists()

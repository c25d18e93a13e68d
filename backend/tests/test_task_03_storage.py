"""Tests for Task-03: PublicStorage and the upload rule set."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from app.schemas.file import FileProjection, UploadRules, to_iso8601
from app.services.storage import PublicStorage


@pytest.fixture
def storage(tmp_path: Path) -> PublicStorage:
    return PublicStorage(root=tmp_path, base_url="http://localhost:8000/")


# ---------------------------------------------------------------------------
# T-1: 저장 경로 / URL
# ---------------------------------------------------------------------------

def test_save_uses_unique_names_under_files(storage: PublicStorage):
    first = storage.save(b"one", "Scan.PDF")
    second = storage.save(b"two", "Scan.PDF")

    assert first != second
    assert first.startswith("files/") and first.endswith(".pdf")
    assert storage.read(first) == b"one"
    assert storage.url(first) == f"http://localhost:8000/storage/{first}"


def test_delete_reports_missing_blob(storage: PublicStorage):
    path = storage.save(b"bytes", "photo.png")

    assert storage.delete(path) is True
    assert storage.exists(path) is False
    assert storage.delete(path) is False


def test_path_outside_root_rejected(storage: PublicStorage):
    with pytest.raises(ValueError):
        storage.read("../secrets.txt")


# ---------------------------------------------------------------------------
# T-2: 검증 규칙
# ---------------------------------------------------------------------------

def test_rules_accept_valid_upload():
    rules = UploadRules()
    assert rules.validate("id.jpg", "image/jpeg", 1024, "identity") == {}
    assert rules.validate("scan", "application/pdf", 10, "certificates") == {}


def test_rules_collect_errors_per_field():
    rules = UploadRules(max_size_kb=1)
    errors = rules.validate("notes.txt", "text/plain", 2048, "other")

    assert len(errors["file"]) == 2
    assert errors["file"][1] == "The file may not be greater than 1 kilobytes."
    assert errors["category"] == ["The selected category is invalid."]


# ---------------------------------------------------------------------------
# T-3: projection
# ---------------------------------------------------------------------------

def test_iso8601_naive_treated_as_utc():
    assert to_iso8601(datetime(2024, 5, 1, 12, 30, 15, 123456)) == "2024-05-01T12:30:15.123Z"
    aware = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
    assert to_iso8601(aware) == "2024-05-01T12:30:00.000Z"


def test_projection_without_category():
    projection = FileProjection(
        id="abc",
        name="passport.pdf",
        type="application/pdf",
        size=3,
        uploaded_at=datetime(2024, 1, 1),
        url="http://x/storage/files/abc.pdf",
    )
    data = projection.to_dict(include_category=False)
    assert "category" not in data
    assert data["name"] == "passport.pdf"

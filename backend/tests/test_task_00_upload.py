"""Tests for Task-00: document upload (POST /files)."""

from __future__ import annotations

import io
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient
from starlette.datastructures import UploadFile

from app.services.storage import PublicStorage

pytestmark = pytest.mark.asyncio

FILES_URL = "/api/v1/files"
MAX_BYTES = 4 * 1024 * 1024


async def _count_files(client: AsyncClient) -> int:
    resp = await client.get(FILES_URL)
    assert resp.status_code == 200
    return sum(len(group) for group in resp.json()["files"].values())


# ---------------------------------------------------------------------------
# T-1: PDF 업로드 성공
# ---------------------------------------------------------------------------

async def test_upload_pdf_success(client: AsyncClient, storage: PublicStorage) -> None:
    pdf_content = b"%PDF-1.4 fake passport scan"
    resp = await client.post(
        FILES_URL,
        data={"category": "identity"},
        files={"file": ("passport.pdf", io.BytesIO(pdf_content), "application/pdf")},
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True

    uploaded = body["file"]
    assert uploaded["category"] == "identity"
    assert uploaded["size"] == len(pdf_content)
    assert uploaded["name"] == "passport.pdf"
    assert uploaded["type"] == "application/pdf"
    assert uploaded["uploadedAt"].endswith("Z")
    assert uploaded["url"].startswith("http://test/storage/files/")
    assert uploaded["url"].endswith(".pdf")

    # blob이 실제로 저장되었는지 확인
    stored_path = uploaded["url"].removeprefix("http://test/storage/")
    assert storage.read(stored_path) == pdf_content


async def test_upload_images_accepted(client: AsyncClient) -> None:
    for name, mime in (("photo.png", "image/png"), ("photo.jpg", "image/jpeg"), ("photo.jpeg", "image/jpeg")):
        resp = await client.post(
            FILES_URL,
            data={"category": "supporting"},
            files={"file": (name, io.BytesIO(b"\x89fake-image"), mime)},
        )
        assert resp.status_code == 201, name
        assert resp.json()["file"]["category"] == "supporting"

    assert await _count_files(client) == 3


# ---------------------------------------------------------------------------
# T-2: 허용되지 않는 타입 거부
# ---------------------------------------------------------------------------

async def test_upload_text_plain_rejected(client: AsyncClient, storage: PublicStorage) -> None:
    before = await _count_files(client)

    resp = await client.post(
        FILES_URL,
        data={"category": "identity"},
        files={"file": ("notes.txt", io.BytesIO(b"hello"), "text/plain")},
    )
    assert resp.status_code == 422
    body = resp.json()
    assert body["success"] is False
    assert "pdf, jpg, jpeg, png" in body["message"]
    assert "file" in body["errors"]

    assert await _count_files(client) == before
    assert not (storage.root / "files").exists()


async def test_upload_mismatched_extension_rejected(client: AsyncClient) -> None:
    resp = await client.post(
        FILES_URL,
        data={"category": "identity"},
        files={"file": ("script.exe", io.BytesIO(b"MZ"), "application/pdf")},
    )
    assert resp.status_code == 422


# ---------------------------------------------------------------------------
# T-3: 4MiB 초과 파일 거부
# ---------------------------------------------------------------------------

async def test_upload_oversize_rejected(client: AsyncClient) -> None:
    for name, mime in (("big.pdf", "application/pdf"), ("big.png", "image/png")):
        resp = await client.post(
            FILES_URL,
            data={"category": "certificates"},
            files={"file": (name, io.BytesIO(b"x" * (MAX_BYTES + 1)), mime)},
        )
        assert resp.status_code == 422
        assert "4096 kilobytes" in resp.json()["message"]

    assert await _count_files(client) == 0


async def test_upload_oversize_rejected_before_reading_body(client: AsyncClient) -> None:
    with patch.object(UploadFile, "read", new_callable=AsyncMock) as read:
        resp = await client.post(
            FILES_URL,
            data={"category": "identity"},
            files={"file": ("big.pdf", io.BytesIO(b"x" * (MAX_BYTES + 1)), "application/pdf")},
        )

    assert resp.status_code == 422
    assert "4096 kilobytes" in resp.json()["message"]
    read.assert_not_awaited()


async def test_upload_exactly_max_size_accepted(client: AsyncClient) -> None:
    resp = await client.post(
        FILES_URL,
        data={"category": "certificates"},
        files={"file": ("limit.pdf", io.BytesIO(b"x" * MAX_BYTES), "application/pdf")},
    )
    assert resp.status_code == 201
    assert resp.json()["file"]["size"] == MAX_BYTES


# ---------------------------------------------------------------------------
# T-4: 카테고리 / 필수 필드 검증
# ---------------------------------------------------------------------------

async def test_upload_invalid_category_rejected(client: AsyncClient) -> None:
    resp = await client.post(
        FILES_URL,
        data={"category": "medical"},
        files={"file": ("a.pdf", io.BytesIO(b"%PDF"), "application/pdf")},
    )
    assert resp.status_code == 422
    body = resp.json()
    assert body["success"] is False
    assert body["errors"]["category"] == ["The selected category is invalid."]


async def test_upload_missing_fields_rejected(client: AsyncClient) -> None:
    resp = await client.post(FILES_URL, data={"category": "identity"})
    assert resp.status_code == 422
    assert resp.json()["errors"]["file"] == ["The file field is required."]

    resp = await client.post(
        FILES_URL,
        files={"file": ("a.pdf", io.BytesIO(b"%PDF"), "application/pdf")},
    )
    assert resp.status_code == 422
    assert resp.json()["errors"]["category"] == ["The category field is required."]


# ---------------------------------------------------------------------------
# T-5: 저장 실패 시 500, 레코드 없음
# ---------------------------------------------------------------------------

async def test_upload_storage_failure_returns_500(client: AsyncClient, storage: PublicStorage) -> None:
    with patch.object(PublicStorage, "save", side_effect=OSError("disk full")):
        resp = await client.post(
            FILES_URL,
            data={"category": "identity"},
            files={"file": ("a.pdf", io.BytesIO(b"%PDF"), "application/pdf")},
        )
    assert resp.status_code == 500
    assert resp.json() == {"success": False, "message": "File upload failed."}
    assert await _count_files(client) == 0


async def test_upload_db_failure_discards_blob(client: AsyncClient, storage: PublicStorage) -> None:
    with patch("sqlalchemy.ext.asyncio.AsyncSession.commit", side_effect=RuntimeError("db down")):
        resp = await client.post(
            FILES_URL,
            data={"category": "identity"},
            files={"file": ("a.pdf", io.BytesIO(b"%PDF"), "application/pdf")},
        )
    assert resp.status_code == 500
    assert resp.json()["message"] == "File upload failed."
    assert list((storage.root / "files").iterdir()) == []

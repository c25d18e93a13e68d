"""File upload, listing, and deletion endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db, get_storage
from app.config import settings
from app.models.file import FileCategory, UploadedFile
from app.schemas.file import FileProjection, UploadRules
from app.services.storage import PublicStorage

logger = logging.getLogger("app.files")

router = APIRouter()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _project(uploaded: UploadedFile, storage: PublicStorage) -> FileProjection:
    return FileProjection(
        id=uploaded.id,
        name=uploaded.original_name,
        type=uploaded.mime_type,
        size=uploaded.size_bytes,
        uploaded_at=uploaded.created_at,
        url=storage.url(uploaded.storage_path),
        category=uploaded.category,
    )


def _discard_blob(storage: PublicStorage, storage_path: str) -> None:
    """메타데이터 저장 실패 시 방금 쓴 blob을 정리한다 (best effort)."""
    try:
        storage.delete(storage_path)
    except OSError:
        logger.exception("could not discard blob after failed insert: %s", storage_path)
    else:
        logger.info("discarded blob after failed insert: %s", storage_path)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("", status_code=201)
async def upload_file(
    file: UploadFile | None = File(None),
    category: str | None = Form(None),
    db: AsyncSession = Depends(get_db),
    storage: PublicStorage = Depends(get_storage),
) -> dict:
    """문서 파일을 업로드합니다.

    1. 타입/크기/카테고리 검증 (실패 시 422, 저장 없음)
    2. public 스토리지에 blob 저장
    3. DB에 UploadedFile 레코드 생성
    """
    original_name = (file.filename or "unnamed") if file is not None else None
    content_type = file.content_type if file is not None else None

    # 크기를 이미 알고 있으면 본문을 읽기 전에 먼저 거른다
    rules = UploadRules(max_size_kb=settings.max_file_size_kb)
    errors = rules.validate(
        filename=original_name,
        content_type=content_type,
        size=file.size if file is not None else None,
        category=category,
    )
    contents = b""
    if not errors and file is not None:
        contents = await file.read()
        errors = rules.validate(
            filename=original_name,
            content_type=content_type,
            size=len(contents),
            category=category,
        )
    if errors:
        first = next(iter(errors.values()))[0]
        logger.debug("upload rejected: name=%s errors=%s", original_name, errors)
        raise HTTPException(status_code=422, detail={"message": first, "errors": errors})

    try:
        storage_path = storage.save(contents, original_name)
    except Exception:
        logger.exception("file upload failed while writing blob: name=%s", original_name)
        raise HTTPException(status_code=500, detail="File upload failed.")

    uploaded = UploadedFile(
        name=storage_path.rsplit("/", 1)[-1],
        original_name=original_name,
        mime_type=file.content_type,
        size_bytes=len(contents),
        category=FileCategory(category),
        storage_path=storage_path,
    )
    try:
        db.add(uploaded)
        await db.commit()
    except Exception:
        logger.exception("file upload failed while saving record: name=%s path=%s", original_name, storage_path)
        await db.rollback()
        _discard_blob(storage, storage_path)
        raise HTTPException(status_code=500, detail="File upload failed.")

    logger.debug("uploaded file: id=%s name=%s size=%d", uploaded.id, original_name, uploaded.size_bytes)
    return {"success": True, "file": _project(uploaded, storage).to_dict()}


@router.get("")
async def list_files(
    db: AsyncSession = Depends(get_db),
    storage: PublicStorage = Depends(get_storage),
) -> dict:
    """카테고리별로 묶은 전체 파일 목록을 조회합니다."""
    try:
        result = await db.execute(select(UploadedFile).order_by(UploadedFile.created_at, UploadedFile.id))
        records = result.scalars().all()
    except Exception:
        logger.exception("file listing failed")
        raise HTTPException(status_code=500, detail="Unable to fetch files.")

    grouped: dict[str, list[dict]] = {c.value: [] for c in FileCategory}
    for uploaded in records:
        grouped[uploaded.category.value].append(_project(uploaded, storage).to_dict(include_category=False))
    return {"success": True, "files": grouped}


@router.delete("/{file_id}")
async def delete_file(
    file_id: str,
    db: AsyncSession = Depends(get_db),
    storage: PublicStorage = Depends(get_storage),
) -> dict:
    """파일을 삭제합니다 (blob 먼저, 그다음 레코드).

    blob 삭제가 실패하면 레코드는 남겨 두고 500을 반환한다.
    blob이 이미 없으면 경고만 남기고 레코드를 삭제한다.
    """
    try:
        uploaded = await db.get(UploadedFile, file_id)
    except Exception:
        logger.exception("file lookup failed: id=%s", file_id)
        raise HTTPException(status_code=500, detail="File deletion failed.")
    if not uploaded:
        logger.warning("file not found: %s", file_id)
        raise HTTPException(status_code=404, detail="File not found.")

    try:
        removed = storage.delete(uploaded.storage_path)
    except Exception:
        logger.exception("blob deletion failed, record kept: id=%s path=%s", file_id, uploaded.storage_path)
        raise HTTPException(status_code=500, detail="File deletion failed.")
    if not removed:
        logger.warning("blob already missing, removing orphan record: id=%s path=%s", file_id, uploaded.storage_path)

    try:
        await db.delete(uploaded)
        await db.commit()
    except Exception:
        logger.exception("record deletion failed after blob removal, record is dangling: id=%s", file_id)
        await db.rollback()
        raise HTTPException(status_code=500, detail="File deletion failed.")

    logger.debug("deleted file: id=%s", file_id)
    return {"success": True}

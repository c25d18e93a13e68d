from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db

router = APIRouter()


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)) -> dict:
    """API와 DB 연결 상태를 확인합니다."""
    await db.execute(text("SELECT 1"))
    return {"status": "ok", "database": "connected"}

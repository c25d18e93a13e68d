from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Category(str, Enum):
    IDENTITY = "identity"
    SUPPORTING = "supporting"
    CERTIFICATES = "certificates"


# 카테고리 라벨/설명은 서버가 아닌 클라이언트의 고정값
CATEGORY_INFO: dict[Category, tuple[str, str]] = {
    Category.IDENTITY: ("Identity Documents", "Passport, ID cards, birth certificates"),
    Category.SUPPORTING: ("Supporting Documents", "Proof of status, insurance, bank statements"),
    Category.CERTIFICATES: ("Certificates", "Criminal record, medical certificates"),
}


# --- 서버 응답 모델 ---


class UploadedFile(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    type: str
    size: int = Field(ge=0)
    uploaded_at: datetime = Field(alias="uploadedAt")
    url: str | None = None
    category: Category | None = None


class FileCategory(BaseModel):
    label: str
    description: str
    files: list[UploadedFile] = Field(default_factory=list)


# --- 업로드 입력 ---


class SelectedFile(BaseModel):
    """사용자가 선택한 로컬 파일 (업로드 전)."""

    name: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


def empty_categories() -> dict[Category, FileCategory]:
    return {
        category: FileCategory(label=label, description=description)
        for category, (label, description) in CATEGORY_INFO.items()
    }

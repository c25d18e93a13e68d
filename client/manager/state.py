from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from client.models.schemas import Category, FileCategory, empty_categories


class UploadStatus(str, Enum):
    UPLOADING = "uploading"
    SUCCESS = "success"
    ERROR = "error"


class NotificationType(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class UploadProgress:
    file_id: str
    file_name: str
    progress: int = 0
    status: UploadStatus = UploadStatus.UPLOADING


@dataclass(frozen=True)
class Notification:
    id: str
    type: NotificationType
    message: str
    created_at: float


@dataclass(frozen=True)
class PendingDelete:
    """삭제 확인 대기 중인 파일 (두 번째 클릭을 기다림)."""

    file_id: str
    expires_at: float


@dataclass
class FileManagerState:
    """UI 전체가 공유하는 상태. FileManager의 액션으로만 변경한다."""

    files: dict[Category, FileCategory] = field(default_factory=empty_categories)
    upload_progress: list[UploadProgress] = field(default_factory=list)
    notifications: list[Notification] = field(default_factory=list)
    is_loading: bool = False
    is_uploading: bool = False
    validation_error: str | None = None
    validation_error_expires_at: float | None = None
    progress_clear_at: float | None = None
    pending_delete: PendingDelete | None = None

    @property
    def total_files(self) -> int:
        return sum(len(group.files) for group in self.files.values())

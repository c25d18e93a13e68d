"""FileManager: the single owner of the dossier UI state.

All mutations go through the action methods below. Delays (progress
clearing, delete confirmation, notification expiry) are stored as deadlines
on the state and applied by :meth:`FileManager.tick`, which the UI calls on
every rerun.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterable
from uuid import uuid4

from client.manager.state import (
    FileManagerState,
    Notification,
    NotificationType,
    PendingDelete,
    UploadProgress,
    UploadStatus,
)
from client.models.schemas import Category, SelectedFile, UploadedFile
from client.tools.files_api import ApiError, FilesAPIClient
from client.tools.validation import validate_files

logger = logging.getLogger(__name__)

PROGRESS_CLEAR_DELAY = 3.0
DELETE_CONFIRM_WINDOW = 3.0
NOTIFICATION_TTL = 5.0
VALIDATION_ERROR_TTL = 5.0


def _short_id() -> str:
    return uuid4().hex[:9]


def _plural(count: int) -> str:
    return f"{count} file{'s' if count > 1 else ''}"


class FileManager:
    def __init__(
        self,
        api: FilesAPIClient | None = None,
        clock: Callable[[], float] = time.monotonic,
        on_change: Callable[[FileManagerState], None] | None = None,
    ) -> None:
        self.api = api or FilesAPIClient()
        self.state = FileManagerState()
        self.on_change = on_change
        self._clock = clock

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change(self.state)

    # ------------------------------------------------------------------
    # Notifications / timers
    # ------------------------------------------------------------------

    def add_notification(self, type: NotificationType, message: str) -> Notification:
        notification = Notification(id=_short_id(), type=type, message=message, created_at=self._clock())
        self.state.notifications.append(notification)
        self._changed()
        return notification

    def remove_notification(self, notification_id: str) -> None:
        self.state.notifications = [n for n in self.state.notifications if n.id != notification_id]
        self._changed()

    def tick(self) -> None:
        """만료된 진행률, 알림, 삭제 확인, 검증 오류를 정리한다."""
        now = self._clock()
        state = self.state

        if state.progress_clear_at is not None and now >= state.progress_clear_at:
            state.upload_progress = []
            state.progress_clear_at = None
        state.notifications = [n for n in state.notifications if now - n.created_at < NOTIFICATION_TTL]
        if state.pending_delete is not None and now >= state.pending_delete.expires_at:
            state.pending_delete = None
        if state.validation_error_expires_at is not None and now >= state.validation_error_expires_at:
            state.validation_error = None
            state.validation_error_expires_at = None

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def load_files(self) -> None:
        self.state.is_loading = True
        self._changed()
        try:
            self.state.files = await self.api.fetch_files()
        except ApiError as exc:
            logger.error("failed to load files: %s", exc.message)
            self.add_notification(NotificationType.ERROR, exc.message or "Failed to load files")
        finally:
            self.state.is_loading = False
            self._changed()

    async def upload_files(self, files: Iterable[SelectedFile], category: Category) -> list[UploadedFile]:
        """선택된 파일을 각각 독립적으로 동시에 업로드하고 결과를 알림으로 요약한다."""
        selected = list(files)
        if not selected:
            return []

        error = validate_files(selected)
        if error:
            self.state.validation_error = error
            self.state.validation_error_expires_at = self._clock() + VALIDATION_ERROR_TTL
            self._changed()
            return []

        self.state.validation_error = None
        self.state.validation_error_expires_at = None
        entries = [UploadProgress(file_id=_short_id(), file_name=f.name) for f in selected]
        self.state.upload_progress = entries
        self.state.progress_clear_at = None
        self.state.is_uploading = True
        self._changed()

        try:
            results = await asyncio.gather(
                *(self._upload_one(f, category, entry) for f, entry in zip(selected, entries)),
                return_exceptions=True,
            )
        finally:
            self.state.is_uploading = False
            self.state.progress_clear_at = self._clock() + PROGRESS_CLEAR_DELAY

        uploaded = [r for r in results if isinstance(r, UploadedFile)]
        failures = [r for r in results if isinstance(r, BaseException)]

        if uploaded:
            self.add_notification(NotificationType.SUCCESS, f"Successfully uploaded {_plural(len(uploaded))}")
        if failures:
            messages = list(dict.fromkeys(self._error_message(exc) for exc in failures))
            if len(messages) == 1:
                self.add_notification(NotificationType.ERROR, messages[0])
            else:
                self.add_notification(NotificationType.ERROR, f"Failed to upload {_plural(len(failures))}")

        self._changed()
        return uploaded

    async def _upload_one(self, selected: SelectedFile, category: Category, entry: UploadProgress) -> UploadedFile:
        def on_progress(progress: int) -> None:
            entry.progress = progress
            self._changed()

        try:
            uploaded = await self.api.upload_file(selected, category, on_progress)
        except Exception:
            entry.status = UploadStatus.ERROR
            self._changed()
            raise

        entry.progress = 100
        entry.status = UploadStatus.SUCCESS
        # 도착 순서대로 목록에 추가
        uploaded = uploaded.model_copy(update={"category": category})
        self.state.files[category].files.append(uploaded)
        self._changed()
        return uploaded

    @staticmethod
    def _error_message(exc: BaseException) -> str:
        if isinstance(exc, ApiError):
            logger.error("upload failed: %s", exc.message)
            return exc.message
        logger.error("upload failed unexpectedly", exc_info=exc)
        return "Upload failed. Please try again."

    def request_delete(self, file_id: str) -> bool:
        """삭제 버튼 클릭 처리. 확인 창 안의 두 번째 클릭이면 True."""
        now = self._clock()
        pending = self.state.pending_delete
        if pending is not None and pending.file_id == file_id and now < pending.expires_at:
            self.state.pending_delete = None
            self._changed()
            return True

        self.state.pending_delete = PendingDelete(file_id=file_id, expires_at=now + DELETE_CONFIRM_WINDOW)
        self._changed()
        return False

    def is_pending_delete(self, file_id: str) -> bool:
        pending = self.state.pending_delete
        return pending is not None and pending.file_id == file_id and self._clock() < pending.expires_at

    async def delete_file(self, file_id: str) -> bool:
        try:
            await self.api.delete_file(file_id)
        except ApiError as exc:
            logger.error("delete failed: id=%s %s", file_id, exc.message)
            self.add_notification(NotificationType.ERROR, exc.message or "Failed to delete file. Please try again.")
            return False

        for group in self.state.files.values():
            group.files = [f for f in group.files if f.id != file_id]
        self.add_notification(NotificationType.SUCCESS, "File deleted successfully")
        return True

    async def click_delete(self, file_id: str) -> bool:
        """확인된 클릭이면 삭제까지 수행한다. 삭제가 일어났으면 True."""
        if not self.request_delete(file_id):
            return False
        return await self.delete_file(file_id)

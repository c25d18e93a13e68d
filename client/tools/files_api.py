"""Dossier 백엔드 파일 API 클라이언트 (httpx 비동기)"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import AsyncIterator, Callable

import httpx

from client.models.schemas import Category, FileCategory, SelectedFile, UploadedFile, empty_categories

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "http://localhost:8000/api/v1"
UPLOAD_TIMEOUT = 30.0
REQUEST_TIMEOUT = 15.0
_CHUNK_SIZE = 64 * 1024

CONNECTION_ERROR = "Unable to connect to server. Please check your connection."
NETWORK_ERROR = "Network error occurred"
TIMEOUT_ERROR = "Request timeout"
INVALID_RESPONSE = "Invalid response format"

ProgressCallback = Callable[[int], None]


class ApiError(Exception):
    """API 호출 실패. ``network`` 는 서버에 도달하지 못한 경우 True."""

    def __init__(self, message: str, status: int | None = None, network: bool = False) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.network = network


class FilesAPIClient:
    """업로드(진행률 포함), 카테고리별 목록, 삭제."""

    def __init__(
        self,
        base_url: str | None = None,
        upload_timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or os.getenv("API_BASE_URL", DEFAULT_API_BASE_URL)).rstrip("/")
        self.upload_timeout = upload_timeout or float(os.getenv("UPLOAD_TIMEOUT", UPLOAD_TIMEOUT))
        self._transport = transport

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=timeout,
            transport=self._transport,
            headers={"Accept": "application/json"},
        )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def upload_file(
        self,
        selected: SelectedFile,
        category: Category,
        on_progress: ProgressCallback | None = None,
    ) -> UploadedFile:
        """파일 하나를 업로드한다. 전송한 바이트 기준으로 on_progress(0~100)를 호출한다."""
        url = f"{self.base_url}/files"
        # multipart 본문을 미리 인코딩해 두고 청크 단위로 흘려보내며 진행률을 계산
        prepared = httpx.Request(
            "POST",
            url,
            data={"category": category.value},
            files={"file": (selected.name, selected.content, selected.content_type)},
        )
        body = prepared.read()
        headers = {
            "Content-Type": prepared.headers["Content-Type"],
            "Content-Length": str(len(body)),
        }

        async def stream() -> AsyncIterator[bytes]:
            total = len(body)
            for start in range(0, total, _CHUNK_SIZE):
                chunk = body[start:start + _CHUNK_SIZE]
                yield chunk
                if on_progress is not None:
                    on_progress(round((start + len(chunk)) / total * 100))

        try:
            # httpx 타임아웃은 단계별(connect/read/write)이라 시도 전체를 따로 제한한다
            async with asyncio.timeout(self.upload_timeout):
                async with self._client(self.upload_timeout) as client:
                    response = await client.post(url, content=stream(), headers=headers)
        except (TimeoutError, httpx.TimeoutException) as exc:
            raise ApiError(TIMEOUT_ERROR, network=True) from exc
        except httpx.TransportError as exc:
            raise ApiError(NETWORK_ERROR, network=True) from exc

        data = self._parse(response, "Upload failed")
        try:
            return UploadedFile.model_validate(data["file"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ApiError(INVALID_RESPONSE, status=response.status_code) from exc

    async def fetch_files(self) -> dict[Category, FileCategory]:
        """카테고리별 파일 목록. 응답에 없는 그룹은 빈 목록으로 채운다."""
        response = await self._request("GET", f"{self.base_url}/files")
        data = self._parse(response, "Failed to fetch files")

        grouped = empty_categories()
        raw_groups = data.get("files") or {}
        try:
            for category, group in grouped.items():
                group.files = [
                    UploadedFile.model_validate({**item, "category": category.value})
                    for item in raw_groups.get(category.value) or []
                ]
        except (TypeError, ValueError) as exc:
            raise ApiError(INVALID_RESPONSE, status=response.status_code) from exc
        return grouped

    async def delete_file(self, file_id: str) -> None:
        response = await self._request("DELETE", f"{self.base_url}/files/{file_id}")
        self._parse(response, "Failed to delete file")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _request(self, method: str, url: str) -> httpx.Response:
        try:
            async with self._client(REQUEST_TIMEOUT) as client:
                return await client.request(method, url)
        except httpx.TimeoutException as exc:
            raise ApiError(TIMEOUT_ERROR, network=True) from exc
        except httpx.TransportError as exc:
            raise ApiError(CONNECTION_ERROR, network=True) from exc

    @staticmethod
    def _parse(response: httpx.Response, fallback: str) -> dict:
        """응답 JSON을 검사하고, 실패면 가장 구체적인 메시지로 ApiError를 던진다."""
        try:
            data = response.json()
        except ValueError:
            data = None

        if not response.is_success:
            message = data.get("message") if isinstance(data, dict) else None
            raise ApiError(
                message or f"HTTP {response.status_code}: {response.reason_phrase}",
                status=response.status_code,
            )

        if not isinstance(data, dict):
            raise ApiError(INVALID_RESPONSE, status=response.status_code)
        if not data.get("success"):
            raise ApiError(data.get("message") or fallback, status=response.status_code)
        return data

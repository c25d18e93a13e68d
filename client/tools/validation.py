"""Client-side upload checks mirroring the server rules.

The server stays authoritative; this only avoids sending files that would
be rejected anyway.
"""

from __future__ import annotations

from collections.abc import Iterable

from client.models.schemas import SelectedFile

ALLOWED_TYPES = ("application/pdf", "image/png", "image/jpeg", "image/jpg")
ACCEPTED_EXTENSIONS = ("pdf", "png", "jpg", "jpeg")
MAX_SIZE = 4 * 1024 * 1024  # 4MB


def validate_files(files: Iterable[SelectedFile]) -> str | None:
    """첫 번째로 검증에 실패한 파일의 오류 메시지를 반환한다."""
    for f in files:
        if f.content_type not in ALLOWED_TYPES:
            return f"Invalid file type: {f.name}. Only PDF, PNG, and JPG files are allowed."
        if f.size > MAX_SIZE:
            return f"File too large: {f.name}. Maximum size is 4MB."
    return None

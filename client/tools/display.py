from __future__ import annotations

from datetime import datetime
from enum import Enum

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


class PreviewKind(str, Enum):
    IMAGE = "image"
    PDF = "pdf"
    UNSUPPORTED = "unsupported"


def format_file_size(size: int) -> str:
    """바이트 수를 사람이 읽기 쉬운 단위로 변환한다.

    Examples:
        >>> format_file_size(0)
        '0 Bytes'
        >>> format_file_size(1536)
        '1.5 KB'
    """
    if size <= 0:
        return "0 Bytes"
    i = 0
    while size >= 1024 ** (i + 1) and i < len(_SIZE_UNITS) - 1:
        i += 1
    value = round(size / 1024**i, 2)
    return f"{value:g} {_SIZE_UNITS[i]}"


def format_date(value: datetime, long: bool = False) -> str:
    """업로드 시각 표시용 (예: ``May 1, 2024, 02:30 PM``). 로컬 시간대로 변환한다."""
    local = value.astimezone() if value.tzinfo else value
    month = "%B" if long else "%b"
    return local.strftime(f"{month} {local.day}, %Y, %I:%M %p")


def preview_kind(mime_type: str) -> PreviewKind:
    if mime_type.startswith("image/"):
        return PreviewKind.IMAGE
    if mime_type == "application/pdf":
        return PreviewKind.PDF
    return PreviewKind.UNSUPPORTED

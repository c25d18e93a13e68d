from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from app.models.file import FileCategory


@dataclass(frozen=True)
class UploadRules:
    """업로드 검증 규칙 (타입, 크기, 카테고리)."""

    mime_types: frozenset[str] = frozenset({"application/pdf", "image/png", "image/jpeg", "image/jpg"})
    extensions: frozenset[str] = frozenset({".pdf", ".png", ".jpg", ".jpeg"})
    max_size_kb: int = 4096
    categories: tuple[str, ...] = tuple(c.value for c in FileCategory)

    @property
    def max_size_bytes(self) -> int:
        return self.max_size_kb * 1024

    def validate(
        self,
        filename: str | None,
        content_type: str | None,
        size: int | None,
        category: str | None,
    ) -> dict[str, list[str]]:
        """필드별 오류 메시지를 반환한다. 비어 있으면 통과."""
        errors: dict[str, list[str]] = {}

        if filename is None:
            errors.setdefault("file", []).append("The file field is required.")
        else:
            suffix = Path(filename).suffix.lower()
            if (content_type or "").lower() not in self.mime_types or (suffix and suffix not in self.extensions):
                errors.setdefault("file", []).append("The file must be a file of type: pdf, jpg, jpeg, png.")
            if size is not None and size > self.max_size_bytes:
                errors.setdefault("file", []).append(
                    f"The file may not be greater than {self.max_size_kb} kilobytes."
                )

        if not category:
            errors.setdefault("category", []).append("The category field is required.")
        elif category not in self.categories:
            errors.setdefault("category", []).append("The selected category is invalid.")

        return errors


@dataclass(frozen=True)
class FileProjection:
    id: str
    name: str
    type: str
    size: int
    uploaded_at: datetime
    url: str
    category: FileCategory | None = field(default=None)

    def to_dict(self, include_category: bool = True) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "size": self.size,
            "uploadedAt": to_iso8601(self.uploaded_at),
            "url": self.url,
        }
        if include_category and self.category is not None:
            data["category"] = self.category.value
        return data


def to_iso8601(value: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a ``Z`` suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")

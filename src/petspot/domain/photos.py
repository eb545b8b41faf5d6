"""Models for cached photo attachments."""

from datetime import datetime
from pathlib import Path
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

SUPPORTED_MEDIA_TYPES: frozenset[str] = frozenset(
    {"image/jpeg", "image/png", "image/heic", "image/gif", "image/webp"}
)


class PhotoAttachmentMetadata(BaseModel):
    """Metadata for the photo selected in the current flow."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    file_name: str
    file_size_bytes: int = Field(ge=0)
    pixel_width: int = Field(ge=0)
    pixel_height: int = Field(ge=0)
    media_type: str
    cached_path: Path
    saved_at: datetime

    @property
    def formatted_file_size(self) -> str:
        """Human-readable size using decimal units (e.g. "1.4 MB")."""
        if self.file_size_bytes >= 1_000_000:
            return f"{self.file_size_bytes / 1_000_000:.1f} MB"
        return f"{max(self.file_size_bytes / 1_000, 0.0):.0f} KB"

    @property
    def is_supported_type(self) -> bool:
        return self.media_type in SUPPORTED_MEDIA_TYPES

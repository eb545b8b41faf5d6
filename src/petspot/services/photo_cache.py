"""Disk-backed cache for the photo attached to a report flow."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from io import BytesIO
from pathlib import Path
from typing import Protocol
from uuid import UUID, uuid4

from PIL import Image, UnidentifiedImageError
from pydantic import ValidationError

from petspot.domain.errors import PhotoCacheError, PhotoMetadataError
from petspot.domain.photos import PhotoAttachmentMetadata

_logger = logging.getLogger(__name__)

_BLOB_SUFFIX = ".img"
_METADATA_SUFFIX = ".json"


class PhotoAttachmentCache(Protocol):
    """Storage for photo bytes; everything else holds only metadata."""

    def save(self, data: bytes, file_name: str) -> PhotoAttachmentMetadata:
        """Store photo bytes and return their metadata."""

    def get(self, photo_id: UUID) -> PhotoAttachmentMetadata | None:
        """Return metadata for a cached photo, if present."""

    def load_bytes(self, photo_id: UUID) -> bytes:
        """Return the raw bytes of a cached photo."""

    def remove(self, photo_id: UUID) -> None:
        """Delete a cached photo and its metadata."""

    def clear_all(self) -> None:
        """Delete every cached photo."""


@dataclass
class DiskPhotoAttachmentCache(PhotoAttachmentCache):
    """Keeps each photo as `<id>.img` next to an `<id>.json` metadata file."""

    directory: Path

    def save(self, data: bytes, file_name: str) -> PhotoAttachmentMetadata:
        """Extract metadata with Pillow and persist bytes plus metadata."""
        width, height, media_type = _extract_image_info(data)
        photo_id = uuid4()
        directory = self._ensure_directory()
        blob_path = directory / f"{photo_id}{_BLOB_SUFFIX}"
        metadata = PhotoAttachmentMetadata(
            id=photo_id,
            file_name=file_name,
            file_size_bytes=len(data),
            pixel_width=width,
            pixel_height=height,
            media_type=media_type,
            cached_path=blob_path,
            saved_at=datetime.now(tz=UTC),
        )
        try:
            blob_path.write_bytes(data)
            self._metadata_path(photo_id).write_text(
                metadata.model_dump_json(), encoding="utf-8"
            )
        except OSError as exc:
            blob_path.unlink(missing_ok=True)
            raise PhotoCacheError(f"Failed to cache photo {file_name}") from exc
        _logger.info(
            "Cached photo: id=%s size=%s dims=%sx%s",
            photo_id,
            metadata.file_size_bytes,
            width,
            height,
        )
        return metadata

    def get(self, photo_id: UUID) -> PhotoAttachmentMetadata | None:
        """Return metadata, dropping entries whose blob vanished from disk."""
        metadata_path = self._metadata_path(photo_id)
        if not metadata_path.exists():
            return None
        try:
            metadata = PhotoAttachmentMetadata.model_validate_json(
                metadata_path.read_text(encoding="utf-8")
            )
        except (OSError, ValidationError) as exc:
            raise PhotoCacheError(f"Failed to read metadata for {photo_id}") from exc
        if not metadata.cached_path.exists():
            _logger.warning("Cached photo file missing: id=%s", photo_id)
            metadata_path.unlink(missing_ok=True)
            return None
        return metadata

    def load_bytes(self, photo_id: UUID) -> bytes:
        """Return cached bytes or raise if the photo is gone."""
        metadata = self.get(photo_id)
        if metadata is None:
            raise PhotoCacheError(f"Photo {photo_id} is not cached")
        try:
            return metadata.cached_path.read_bytes()
        except OSError as exc:
            raise PhotoCacheError(f"Failed to read photo {photo_id}") from exc

    def remove(self, photo_id: UUID) -> None:
        """Delete a cached photo; missing entries are ignored."""
        try:
            (self.directory / f"{photo_id}{_BLOB_SUFFIX}").unlink(missing_ok=True)
            self._metadata_path(photo_id).unlink(missing_ok=True)
        except OSError as exc:
            raise PhotoCacheError(f"Failed to remove photo {photo_id}") from exc

    def clear_all(self) -> None:
        """Delete every cached photo in the directory."""
        if not self.directory.exists():
            return
        try:
            for path in self.directory.iterdir():
                if path.suffix in {_BLOB_SUFFIX, _METADATA_SUFFIX}:
                    path.unlink(missing_ok=True)
        except OSError as exc:
            raise PhotoCacheError("Failed to clear photo cache") from exc

    def _ensure_directory(self) -> Path:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PhotoCacheError(
                f"Cannot create cache directory {self.directory}"
            ) from exc
        return self.directory

    def _metadata_path(self, photo_id: UUID) -> Path:
        return self.directory / f"{photo_id}{_METADATA_SUFFIX}"


def _extract_image_info(data: bytes) -> tuple[int, int, str]:
    """Return width, height and MIME type of an encoded image."""
    if not data:
        raise PhotoMetadataError("Photo is empty")
    try:
        with Image.open(BytesIO(data)) as image:
            width, height = image.size
            image_format = image.format
    except (UnidentifiedImageError, OSError) as exc:
        raise PhotoMetadataError("Unable to read image metadata") from exc
    media_type = Image.MIME.get(image_format or "", "application/octet-stream")
    return width, height, media_type

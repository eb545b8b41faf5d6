"""PetSpot announcements REST API client."""

from dataclasses import dataclass

import httpx
from pydantic import ValidationError

from petspot.domain.announcements import (
    CreateAnnouncementRequest,
    CreateAnnouncementResponse,
    CreatedAnnouncement,
)
from petspot.domain.errors import DecodingError, HttpStatusError, NetworkError
from petspot.domain.photos import PhotoAttachmentMetadata
from petspot.services.photo_cache import PhotoAttachmentCache
from petspot.services.submission import AnnouncementRepository


@dataclass
class HttpxAnnouncementRepository(AnnouncementRepository):
    """HTTPX-backed announcement repository."""

    base_url: str
    photo_cache: PhotoAttachmentCache
    http_client: httpx.AsyncClient
    timeout_seconds: float = 15.0
    upload_timeout_seconds: float = 30.0

    @classmethod
    def create(
        cls,
        base_url: str,
        photo_cache: PhotoAttachmentCache,
        timeout_seconds: float = 15.0,
        upload_timeout_seconds: float = 30.0,
    ) -> "HttpxAnnouncementRepository":
        """Create a repository with a managed httpx session."""
        return cls(
            base_url=base_url,
            photo_cache=photo_cache,
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
            upload_timeout_seconds=upload_timeout_seconds,
        )

    async def create_announcement(
        self, request: CreateAnnouncementRequest
    ) -> CreatedAnnouncement:
        """POST the announcement and return its id and management password."""
        url = f"{self.base_url}/api/v1/announcements"
        try:
            response = await self.http_client.post(
                url,
                json=request.model_dump(by_alias=True, exclude_none=True),
                timeout=self.timeout_seconds,
            )
        except httpx.TransportError as exc:
            raise NetworkError(f"Create announcement request failed: {exc}") from exc
        _raise_for_status(response)
        try:
            payload = CreateAnnouncementResponse.model_validate_json(response.content)
        except ValidationError as exc:
            raise DecodingError("Unexpected create announcement response") from exc
        return CreatedAnnouncement(
            announcement_id=payload.id,
            management_password=payload.management_password,
        )

    async def upload_photo(
        self,
        announcement_id: str,
        photo: PhotoAttachmentMetadata,
        management_password: str,
    ) -> None:
        """Upload the cached photo as multipart with Basic auth."""
        url = f"{self.base_url}/api/v1/announcements/{announcement_id}/photos"
        content = self.photo_cache.load_bytes(photo.id)
        try:
            response = await self.http_client.post(
                url,
                auth=httpx.BasicAuth(announcement_id, management_password),
                files={"photo": (photo.file_name, content, photo.media_type)},
                timeout=self.upload_timeout_seconds,
            )
        except httpx.TransportError as exc:
            raise NetworkError(f"Photo upload request failed: {exc}") from exc
        _raise_for_status(response)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _raise_for_status(response: httpx.Response) -> None:
    """Map non-success responses to typed repository errors."""
    if response.is_success:
        return
    message, code = _error_details(response)
    raise HttpStatusError(response.status_code, message, code)


def _error_details(response: httpx.Response) -> tuple[str | None, str | None]:
    """Read `{"error": {"code": ..., "message": ...}}` bodies when present."""
    try:
        payload = response.json()
    except ValueError:
        return None, None
    error = payload.get("error") if isinstance(payload, dict) else None
    if not isinstance(error, dict):
        return None, None
    message = error.get("message")
    code = error.get("code")
    return (
        message if isinstance(message, str) else None,
        code if isinstance(code, str) else None,
    )

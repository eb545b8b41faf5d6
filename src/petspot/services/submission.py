"""Two-phase submission of a completed report."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from typing import Protocol

from petspot.domain.announcements import (
    CreateAnnouncementRequest,
    CreatedAnnouncement,
    SubmissionResult,
)
from petspot.domain.errors import (
    CreateFailure,
    MissingPhotoError,
    PhotoCacheError,
    RepositoryError,
    UploadFailure,
)
from petspot.domain.photos import PhotoAttachmentMetadata
from petspot.domain.report import FlowState
from petspot.services.validators import microchip_digits

_logger = logging.getLogger(__name__)


class AnnouncementRepository(Protocol):
    """Backend operations used to publish a report."""

    async def create_announcement(
        self, request: CreateAnnouncementRequest
    ) -> CreatedAnnouncement:
        """Create the announcement record and return its credentials."""

    async def upload_photo(
        self,
        announcement_id: str,
        photo: PhotoAttachmentMetadata,
        management_password: str,
    ) -> None:
        """Attach the cached photo to an existing announcement."""


@dataclass
class SubmissionOrchestrator:
    """Creates the announcement, then uploads its photo.

    The phases run strictly in sequence. A failure after phase 1 is not rolled
    back: the announcement stays on the server without a photo and the
    caller receives it inside `UploadFailure` so only the upload is retried.
    """

    repository: AnnouncementRepository

    async def submit(
        self, state: FlowState, photo: PhotoAttachmentMetadata | None
    ) -> SubmissionResult:
        """Run both phases for a validated flow state."""
        if photo is None:
            raise MissingPhotoError()
        request = build_announcement_request(state)
        try:
            created = await self.repository.create_announcement(request)
        except RepositoryError as exc:
            _logger.warning("Create announcement failed: %s", exc)
            raise CreateFailure(exc) from exc
        _logger.info("Announcement created: id=%s", created.announcement_id)
        return await self._upload(created, photo)

    async def retry_upload(
        self, created: CreatedAnnouncement, photo: PhotoAttachmentMetadata | None
    ) -> SubmissionResult:
        """Retry only phase 2 for an announcement that already exists."""
        if photo is None:
            raise MissingPhotoError()
        return await self._upload(created, photo)

    async def _upload(
        self, created: CreatedAnnouncement, photo: PhotoAttachmentMetadata
    ) -> SubmissionResult:
        try:
            await self.repository.upload_photo(
                announcement_id=created.announcement_id,
                photo=photo,
                management_password=created.management_password,
            )
        except asyncio.CancelledError as exc:
            _logger.warning(
                "Photo upload cancelled: announcement_id=%s", created.announcement_id
            )
            raise UploadFailure(created, exc) from exc
        except (RepositoryError, PhotoCacheError) as exc:
            _logger.warning(
                "Photo upload failed: announcement_id=%s error=%s",
                created.announcement_id,
                exc,
            )
            raise UploadFailure(created, exc) from exc
        _logger.info("Photo uploaded: announcement_id=%s", created.announcement_id)
        return SubmissionResult(
            announcement_id=created.announcement_id,
            management_password=created.management_password,
        )


def build_announcement_request(
    state: FlowState, today: date | None = None
) -> CreateAnnouncementRequest:
    """Shape the create payload from a flow state."""
    last_seen = state.disappearance_date or today or date.today()
    contact = state.contact_details
    return CreateAnnouncementRequest(
        species=state.animal_species.strip().upper(),
        sex=state.animal_gender.strip().upper(),
        last_seen_date=last_seen.isoformat(),
        location_latitude=_to_float(state.latitude),
        location_longitude=_to_float(state.longitude),
        email=contact.email.strip(),
        phone="".join(char for char in contact.phone if char.isdigit() or char == "+"),
        status=state.kind.value,
        pet_name=_blank_to_none(state.pet_name),
        breed=_blank_to_none(state.animal_breed),
        age=int(state.animal_age) if state.animal_age.strip() else None,
        microchip_number=microchip_digits(state.microchip_number) or None,
        description=_blank_to_none(state.additional_description),
        reward=_reward(contact.reward_description),
    )


def _to_float(raw: str) -> float:
    return float(raw) if raw.strip() else 0.0


def _reward(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value


def _blank_to_none(value: str) -> str | None:
    cleaned = value.strip()
    return cleaned or None

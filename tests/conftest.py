"""Shared test fixtures."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

from petspot.config import Settings
from petspot.containers import AppContainer
from petspot.domain.announcements import CreateAnnouncementRequest, CreatedAnnouncement
from petspot.domain.errors import RepositoryError
from petspot.domain.location import LocationPermissionStatus, UserLocation
from petspot.domain.photos import PhotoAttachmentMetadata
from petspot.domain.report import FlowKind, FlowStep
from petspot.services.flow import FlowSessionStore
from petspot.services.location import LocationService
from petspot.services.photo_cache import DiskPhotoAttachmentCache
from petspot.services.reporting import ReportFlowService
from petspot.services.submission import AnnouncementRepository, SubmissionOrchestrator


def make_png(width: int = 4, height: int = 3) -> bytes:
    """Encode a tiny PNG image."""
    buffer = BytesIO()
    Image.new("RGB", (width, height), color=(200, 120, 40)).save(buffer, "PNG")
    return buffer.getvalue()


@dataclass
class InMemoryAnnouncementRepository(AnnouncementRepository):
    """In-memory announcement repository for tests."""

    announcement_id: str = "abc"
    management_password: str = "654321"
    create_error: RepositoryError | None = None
    upload_errors: list[BaseException] = field(default_factory=list)
    created: list[CreateAnnouncementRequest] = field(default_factory=list)
    uploads: list[tuple[str, PhotoAttachmentMetadata, str]] = field(
        default_factory=list
    )
    before_upload: Callable[[], None] | None = None

    async def create_announcement(
        self, request: CreateAnnouncementRequest
    ) -> CreatedAnnouncement:
        if self.create_error is not None:
            raise self.create_error
        self.created.append(request)
        return CreatedAnnouncement(
            announcement_id=self.announcement_id,
            management_password=self.management_password,
        )

    async def upload_photo(
        self,
        announcement_id: str,
        photo: PhotoAttachmentMetadata,
        management_password: str,
    ) -> None:
        if self.before_upload is not None:
            self.before_upload()
        if self.upload_errors:
            raise self.upload_errors.pop(0)
        self.uploads.append((announcement_id, photo, management_password))


@dataclass
class FakeLocationService(LocationService):
    """Fake platform location service."""

    status: LocationPermissionStatus = LocationPermissionStatus.NOT_DETERMINED
    prompt_answer: LocationPermissionStatus = (
        LocationPermissionStatus.AUTHORIZED_WHEN_IN_USE
    )
    location: UserLocation | None = field(
        default_factory=lambda: UserLocation(latitude=52.23, longitude=21.01)
    )
    prompts: int = 0
    fetches: list[float] = field(default_factory=list)

    async def authorization_status(self) -> LocationPermissionStatus:
        return self.status

    async def request_when_in_use_authorization(self) -> LocationPermissionStatus:
        self.prompts += 1
        self.status = self.prompt_answer
        return self.status

    async def request_location(self, timeout: float) -> UserLocation | None:
        self.fetches.append(timeout)
        return self.location


def fill_missing_flow(store: FlowSessionStore) -> None:
    """Walk a missing-pet store up to the contact step with valid data."""
    store.update(microchip_number="12345-67890-12345")
    store.advance(FlowStep.MICROCHIP)
    store.attach_photo(make_png(), "rex.png")
    store.advance(FlowStep.PHOTO)
    store.update(
        disappearance_date=date(2024, 5, 1),
        animal_species="dog",
        animal_breed="Beagle",
        animal_gender="MALE",
        animal_age="5",
        latitude="52.2297",
        longitude="21.0122",
        additional_description="Brown collar",
    )
    store.advance(FlowStep.DESCRIPTION)
    store.update(phone="+48 123 456 789", email="owner@example.com")


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        api_base_url="https://api.test",
        photo_cache_dir=tmp_path / "photos",
    )


@pytest.fixture
def photo_cache(settings: Settings) -> DiskPhotoAttachmentCache:
    return DiskPhotoAttachmentCache(settings.photo_cache_dir)


@pytest.fixture
def store(photo_cache: DiskPhotoAttachmentCache) -> FlowSessionStore:
    return FlowSessionStore(photo_cache=photo_cache, kind=FlowKind.MISSING)


@pytest.fixture
def announcement_repository() -> InMemoryAnnouncementRepository:
    return InMemoryAnnouncementRepository()


@pytest.fixture
def container(
    settings: Settings,
    photo_cache: DiskPhotoAttachmentCache,
    store: FlowSessionStore,
    announcement_repository: InMemoryAnnouncementRepository,
) -> AppContainer:
    orchestrator = SubmissionOrchestrator(announcement_repository)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        photo_cache=photo_cache,
        announcement_repository=announcement_repository,
        flow_store=store,
        submission_orchestrator=orchestrator,
        report_flow_service=ReportFlowService(store=store, orchestrator=orchestrator),
        close_resources=close_resources,
    )

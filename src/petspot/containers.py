"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from petspot.adapters.announcement_client import HttpxAnnouncementRepository
from petspot.config import Settings, normalize_base_url
from petspot.domain.report import FlowKind
from petspot.services.flow import FlowSessionStore
from petspot.services.location import LocationPermissionHandler, LocationService
from petspot.services.photo_cache import DiskPhotoAttachmentCache, PhotoAttachmentCache
from petspot.services.reporting import ReportFlowService
from petspot.services.submission import AnnouncementRepository, SubmissionOrchestrator


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    photo_cache: PhotoAttachmentCache
    announcement_repository: AnnouncementRepository
    flow_store: FlowSessionStore
    submission_orchestrator: SubmissionOrchestrator
    report_flow_service: ReportFlowService
    close_resources: Callable[[], Awaitable[None]]
    location_permission_handler: LocationPermissionHandler | None = None


def build_container(
    settings: Settings | None = None,
    location_service: LocationService | None = None,
) -> AppContainer:
    """Create the default dependency container.

    The location permission handler only exists when the host provides a
    platform location service.
    """
    resolved_settings = settings or Settings()
    photo_cache = DiskPhotoAttachmentCache(resolved_settings.photo_cache_dir)
    announcement_repository = HttpxAnnouncementRepository.create(
        base_url=normalize_base_url(resolved_settings.api_base_url),
        photo_cache=photo_cache,
        timeout_seconds=resolved_settings.http_timeout_seconds,
        upload_timeout_seconds=resolved_settings.upload_timeout_seconds,
    )
    flow_store = FlowSessionStore(
        photo_cache=photo_cache,
        kind=FlowKind(resolved_settings.flow_kind.upper()),
    )
    orchestrator = SubmissionOrchestrator(announcement_repository)
    report_flow_service = ReportFlowService(store=flow_store, orchestrator=orchestrator)
    location_permission_handler = None
    if location_service is not None:
        location_permission_handler = LocationPermissionHandler(
            location_service=location_service,
            location_timeout_seconds=resolved_settings.location_timeout_seconds,
        )

    async def close_resources() -> None:
        await announcement_repository.close()

    return AppContainer(
        settings=resolved_settings,
        photo_cache=photo_cache,
        announcement_repository=announcement_repository,
        flow_store=flow_store,
        submission_orchestrator=orchestrator,
        report_flow_service=report_flow_service,
        close_resources=close_resources,
        location_permission_handler=location_permission_handler,
    )

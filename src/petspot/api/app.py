"""FastAPI application factory exposing one report flow session."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status

from petspot.api.flow_models import FlowUpdate, FlowView, PhotoView
from petspot.app_logging import configure_logging
from petspot.containers import AppContainer
from petspot.domain.errors import (
    CreateFailure,
    FlowError,
    MissingPhotoError,
    PhotoCacheError,
    PhotoMetadataError,
    UploadFailure,
)

_NULLABLE_UPDATE_FIELDS = frozenset({"disappearance_date", "reward_description"})


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    def _view(state_container: AppContainer) -> FlowView:
        store = state_container.flow_store
        return FlowView.from_state(store.state, store.photo())

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/flow")
    async def get_flow(request: Request) -> FlowView:
        """Return the current flow state."""
        return _view(request.app.state.container)

    @app.patch("/flow")
    async def update_flow(update: FlowUpdate, request: Request) -> FlowView:
        """Merge raw field edits into the flow."""
        state_container: AppContainer = request.app.state.container
        values = {
            name: value
            for name, value in update.model_dump(exclude_unset=True).items()
            if value is not None or name in _NULLABLE_UPDATE_FIELDS
        }
        try:
            state_container.flow_store.update(**values)
        except FlowError as exc:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={"code": "FIELD_NOT_EDITABLE", "message": str(exc)},
            ) from exc
        return _view(state_container)

    @app.post("/flow/continue")
    async def continue_flow(request: Request) -> dict[str, object]:
        """Validate the current step and advance, submitting after the last one."""
        state_container: AppContainer = request.app.state.container
        toasts: list[str] = []
        unsubscribe = state_container.flow_store.subscribe_toasts(toasts.append)
        try:
            outcome = await state_container.report_flow_service.continue_flow()
        except MissingPhotoError as exc:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={"code": "MISSING_PHOTO", "message": str(exc)},
            ) from exc
        except CreateFailure as exc:
            logger.exception("Report submission failed before creation")
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail={
                    "code": "CREATE_FAILED",
                    "message": str(exc.cause),
                    "retryable": exc.retryable,
                },
            ) from exc
        except UploadFailure as exc:
            logger.exception(
                "Photo upload failed",
                extra={"announcement_id": exc.created.announcement_id},
            )
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail={
                    "code": "UPLOAD_FAILED",
                    "message": str(exc.cause),
                    "retryable": exc.retryable,
                    "announcement_id": exc.created.announcement_id,
                },
            ) from exc
        except FlowError as exc:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={"code": "INVALID_TRANSITION", "message": str(exc)},
            ) from exc
        finally:
            unsubscribe()

        if not outcome.validation.is_valid:
            raise HTTPException(
                status_code=422,
                detail={
                    "code": "VALIDATION_FAILED",
                    "step": outcome.step.value,
                    "errors": outcome.validation.errors,
                    "toast": toasts[-1] if toasts else None,
                },
            )
        response: dict[str, object] = {"step": outcome.step.value}
        if outcome.submission is not None:
            response["management_password"] = (
                outcome.submission.management_password
            )
        return response

    @app.post("/flow/back")
    async def go_back(request: Request) -> dict[str, object]:
        """Go back one step; from the first step the flow is exited."""
        state_container: AppContainer = request.app.state.container
        try:
            target = state_container.report_flow_service.go_back()
        except FlowError as exc:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={"code": "INVALID_TRANSITION", "message": str(exc)},
            ) from exc
        return {
            "step": state_container.flow_store.current_step.value,
            "exited": target is None,
        }

    @app.get("/flow/photo")
    async def get_photo(request: Request) -> PhotoView:
        """Return metadata of the attached photo."""
        metadata = request.app.state.container.flow_store.photo()
        if metadata is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return PhotoView.from_metadata(metadata)

    @app.put("/flow/photo")
    async def attach_photo(request: Request, file_name: str = "photo") -> PhotoView:
        """Attach the request body as the flow photo."""
        state_container: AppContainer = request.app.state.container
        data = await request.body()
        try:
            metadata = state_container.flow_store.attach_photo(data, file_name)
        except PhotoMetadataError as exc:
            raise HTTPException(
                status_code=422,
                detail={"code": "INVALID_PHOTO", "message": str(exc)},
            ) from exc
        except PhotoCacheError as exc:
            logger.exception("Failed to cache photo")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail={"code": "PHOTO_CACHE_FAILED", "message": str(exc)},
            ) from exc
        return PhotoView.from_metadata(metadata)

    @app.delete("/flow/photo")
    async def remove_photo(request: Request) -> FlowView:
        """Remove the attached photo."""
        state_container: AppContainer = request.app.state.container
        state_container.flow_store.remove_photo()
        return _view(state_container)

    @app.post("/flow/finish")
    async def finish_flow(request: Request) -> FlowView:
        """Clear the flow after the summary has been shown."""
        state_container: AppContainer = request.app.state.container
        try:
            state_container.report_flow_service.finish()
        except FlowError as exc:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={"code": "INVALID_TRANSITION", "message": str(exc)},
            ) from exc
        return _view(state_container)

    @app.delete("/flow")
    async def cancel_flow(request: Request) -> FlowView:
        """Abandon the flow and release the cached photo."""
        state_container: AppContainer = request.app.state.container
        try:
            state_container.report_flow_service.cancel()
        except FlowError as exc:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={"code": "SUBMISSION_IN_PROGRESS", "message": str(exc)},
            ) from exc
        return _view(state_container)

    return app

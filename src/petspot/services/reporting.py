"""Coordinator that drives the report flow from the UI's continue/back actions."""

import logging
from dataclasses import dataclass, field

from petspot.domain.announcements import CreatedAnnouncement, SubmissionResult
from petspot.domain.errors import FlowError, UploadFailure
from petspot.domain.report import (
    FlowState,
    FlowStep,
    ValidationResult,
    last_input_step,
)
from petspot.services.flow import FlowSessionStore
from petspot.services.submission import SubmissionOrchestrator

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContinueOutcome:
    """Result of pressing Continue on the current screen."""

    step: FlowStep
    validation: ValidationResult
    submission: SubmissionResult | None = None


@dataclass
class ReportFlowService:
    """Connects the session store to the submission orchestrator.

    Once phase 1 of a submission has succeeded the created announcement is
    kept in `pending_announcement`, and later attempts retry only the photo
    upload so no duplicate announcement is created.
    """

    store: FlowSessionStore
    orchestrator: SubmissionOrchestrator
    pending_announcement: CreatedAnnouncement | None = None
    _submitting: bool = field(init=False, default=False)

    @property
    def state(self) -> FlowState:
        return self.store.state

    @property
    def is_submitting(self) -> bool:
        return self._submitting

    async def continue_flow(self) -> ContinueOutcome:
        """Validate the current step and move on, submitting after the last one."""
        step = self.store.current_step
        if step is FlowStep.COMPLETED:
            return ContinueOutcome(step=step, validation=ValidationResult())
        if step is not last_input_step(self.store.kind):
            transition = self.store.advance(step)
            return ContinueOutcome(
                step=transition.step, validation=transition.validation
            )

        validation = self.store.validate(step)
        if not validation.is_valid:
            transition = self.store.advance(step)
            return ContinueOutcome(
                step=transition.step, validation=transition.validation
            )
        self._ensure_idle()
        self._submitting = True
        try:
            result = await self._submit()
        finally:
            self._submitting = False

        self.pending_announcement = None
        _logger.info("Report submitted: announcement_id=%s", result.announcement_id)
        if self.store.current_step is not step:
            # The store was reset while the request was in flight; the caller
            # still gets the credential of the published announcement.
            _logger.warning(
                "Flow left %s during submission: announcement_id=%s",
                step.value,
                result.announcement_id,
            )
            return ContinueOutcome(
                step=self.store.current_step,
                validation=validation,
                submission=result,
            )
        transition = self.store.advance(step)
        self.store.record_management_password(result.management_password)
        return ContinueOutcome(
            step=transition.step, validation=transition.validation, submission=result
        )

    def go_back(self) -> FlowStep | None:
        """Go back one screen; leaving the first screen exits and clears the flow."""
        self._ensure_idle()
        target = self.store.retreat()
        if target is None:
            self.cancel()
        return target

    def cancel(self) -> None:
        """Abandon the flow."""
        self._ensure_idle()
        self.pending_announcement = None
        self.store.clear()

    def finish(self) -> None:
        """Clear the flow once the summary with the password has been shown."""
        if self.store.current_step is not FlowStep.COMPLETED:
            raise FlowError("Cannot finish a flow that has not been submitted")
        self.store.clear()

    def _ensure_idle(self) -> None:
        if self._submitting:
            raise FlowError("A submission is in progress")

    async def _submit(self) -> SubmissionResult:
        photo = self.store.photo()
        if self.pending_announcement is not None:
            return await self.orchestrator.retry_upload(
                self.pending_announcement, photo
            )
        try:
            return await self.orchestrator.submit(self.store.state, photo)
        except UploadFailure as exc:
            self.pending_announcement = exc.created
            raise

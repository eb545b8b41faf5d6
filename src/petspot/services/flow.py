"""Session state machine for the report flow."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, fields, replace
from uuid import UUID

from petspot.domain.errors import (
    FieldNotEditableError,
    FlowTransitionError,
    UnknownFieldError,
)
from petspot.domain.photos import PhotoAttachmentMetadata
from petspot.domain.report import (
    FlowKind,
    FlowState,
    FlowStep,
    StepTransition,
    ValidationResult,
    next_step,
    previous_step,
)
from petspot.services.photo_cache import PhotoAttachmentCache
from petspot.services.validators import validate_step

_logger = logging.getLogger(__name__)

StateListener = Callable[[FlowState], None]
ToastListener = Callable[[str], None]

VALIDATION_TOAST = "Please correct the highlighted fields"

_CONTACT_FIELDS = frozenset({"phone", "email", "reward_description"})
# Set by the store itself, never by raw user input.
_MANAGED_FIELDS = frozenset(
    {
        "kind",
        "current_step",
        "photo_attachment_id",
        "contact_details",
        "management_password",
        "errors",
    }
)
_INPUT_FIELDS = (
    frozenset(item.name for item in fields(FlowState)) - _MANAGED_FIELDS
) | _CONTACT_FIELDS

_DESCRIPTION_FIELDS = frozenset(
    {
        "disappearance_date",
        "pet_name",
        "animal_species",
        "animal_breed",
        "animal_gender",
        "animal_age",
        "latitude",
        "longitude",
        "additional_description",
    }
)
_STEP_FIELDS: dict[FlowStep, frozenset[str]] = {
    FlowStep.MICROCHIP: frozenset({"microchip_number"}),
    FlowStep.DESCRIPTION: _DESCRIPTION_FIELDS,
    FlowStep.CONTACT: _CONTACT_FIELDS,
}


def editable_fields(kind: FlowKind, step: FlowStep) -> frozenset[str]:
    """Return the input fields the user may change on `step`."""
    fields_on_step = _STEP_FIELDS.get(step, frozenset())
    # The found flow has no microchip screen; the number is typed on the
    # description screen instead.
    if kind is FlowKind.FOUND and step is FlowStep.DESCRIPTION:
        return fields_on_step | {"microchip_number"}
    return fields_on_step


@dataclass
class FlowSessionStore:
    """Owns the state of one report flow and emits snapshots to subscribers.

    All operations are synchronous; each one replaces the snapshot in a
    single assignment so subscribers never observe a half-applied update.
    """

    photo_cache: PhotoAttachmentCache
    kind: FlowKind = FlowKind.MISSING
    _state: FlowState = field(init=False)
    _listeners: list[StateListener] = field(init=False, default_factory=list)
    _toast_listeners: list[ToastListener] = field(init=False, default_factory=list)

    def __post_init__(self) -> None:
        self._state = FlowState.start(self.kind)

    @property
    def state(self) -> FlowState:
        """Current read-only snapshot."""
        return self._state

    @property
    def current_step(self) -> FlowStep:
        return self._state.current_step

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a snapshot listener and return an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def subscribe_toasts(self, listener: ToastListener) -> Callable[[], None]:
        """Register a transient-message listener."""
        self._toast_listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._toast_listeners:
                self._toast_listeners.remove(listener)

        return unsubscribe

    def update(self, **values: object) -> FlowState:
        """Merge raw input for the current step without validating it.

        Fields owned by another step raise `FieldNotEditableError`; nothing
        is applied in that case.
        """
        unknown = sorted(name for name in values if name not in _INPUT_FIELDS)
        if unknown:
            raise UnknownFieldError(unknown)
        state = self._state
        allowed = editable_fields(state.kind, state.current_step)
        foreign = sorted(name for name in values if name not in allowed)
        if foreign:
            raise FieldNotEditableError(foreign, state.current_step.value)

        errors = dict(state.errors)
        changes: dict[str, object] = {
            name: value for name, value in values.items() if name not in _CONTACT_FIELDS
        }
        if (
            "animal_species" in changes
            and changes["animal_species"] != state.animal_species
        ):
            changes.setdefault("animal_breed", "")
            errors.pop("animal_breed", None)

        contact_values = {
            name: value for name, value in values.items() if name in _CONTACT_FIELDS
        }
        if contact_values:
            if "reward_description" in contact_values:
                reward = contact_values["reward_description"]
                contact_values["reward_description"] = reward or None
            changes["contact_details"] = replace(
                state.contact_details, **contact_values
            )

        self._commit(replace(state, errors=errors, **changes))
        return self._state

    def validate(self, step: FlowStep) -> ValidationResult:
        """Run the validator for `step` against the current state."""
        return validate_step(step, self._state)

    def advance(self, from_step: FlowStep) -> StepTransition:
        """Validate `from_step` and move exactly one step forward."""
        state = self._state
        from_step = FlowStep(from_step)
        if state.current_step is FlowStep.COMPLETED:
            return StepTransition(
                advanced=False, step=state.current_step, validation=ValidationResult()
            )
        if from_step is not state.current_step:
            raise FlowTransitionError(
                f"Cannot continue from {from_step.value}; "
                f"current step is {state.current_step.value}"
            )

        validation = validate_step(from_step, state)
        if not validation.is_valid:
            self._commit(replace(state, errors=dict(validation.errors)))
            self._emit_toast(VALIDATION_TOAST)
            return StepTransition(
                advanced=False, step=state.current_step, validation=validation
            )

        target = next_step(state.kind, from_step)
        if target is None:
            raise FlowTransitionError(f"No step follows {from_step.value}")
        self._commit(replace(state, current_step=target, errors={}))
        _logger.info("Flow advanced: %s -> %s", from_step.value, target.value)
        return StepTransition(advanced=True, step=target, validation=validation)

    def retreat(self) -> FlowStep | None:
        """Move one step back, keeping entered data; None at the first step."""
        state = self._state
        if state.current_step is FlowStep.COMPLETED:
            raise FlowTransitionError("Cannot go back from a completed flow")
        target = previous_step(state.kind, state.current_step)
        if target is None:
            return None
        self._commit(replace(state, current_step=target, errors={}))
        return target

    def attach_photo(self, data: bytes, file_name: str) -> PhotoAttachmentMetadata:
        """Cache a newly selected photo, replacing any previous one."""
        metadata = self.photo_cache.save(data, file_name)
        previous_id = self._state.photo_attachment_id
        if previous_id is not None:
            self.photo_cache.remove(previous_id)
        errors = dict(self._state.errors)
        errors.pop("photo_attachment_id", None)
        self._commit(
            replace(self._state, photo_attachment_id=metadata.id, errors=errors)
        )
        return metadata

    def remove_photo(self) -> None:
        """Drop the attached photo from the state and the cache."""
        photo_id = self._state.photo_attachment_id
        if photo_id is None:
            return
        self.photo_cache.remove(photo_id)
        self._commit(replace(self._state, photo_attachment_id=None))

    def photo(self) -> PhotoAttachmentMetadata | None:
        """Return metadata for the attached photo, if still cached."""
        photo_id: UUID | None = self._state.photo_attachment_id
        if photo_id is None:
            return None
        return self.photo_cache.get(photo_id)

    def record_management_password(self, password: str) -> None:
        """Keep the server-issued credential for the summary screen."""
        self._commit(replace(self._state, management_password=password))

    def clear(self) -> None:
        """Reset to the default state and release cached photos."""
        self.photo_cache.clear_all()
        self._commit(FlowState.start(self.kind))
        _logger.info("Flow cleared: kind=%s", self.kind.value)

    def _commit(self, state: FlowState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    def _emit_toast(self, message: str) -> None:
        for listener in list(self._toast_listeners):
            listener(message)

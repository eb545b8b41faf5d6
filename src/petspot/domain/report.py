"""Domain models for the report flow session."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from uuid import UUID


class FlowKind(str, Enum):
    """Which report is being collected."""

    MISSING = "MISSING"
    FOUND = "FOUND"


class FlowStep(str, Enum):
    """Screens of the report flow."""

    MICROCHIP = "MICROCHIP"
    PHOTO = "PHOTO"
    DESCRIPTION = "DESCRIPTION"
    CONTACT = "CONTACT"
    COMPLETED = "COMPLETED"


class AnimalGender(str, Enum):
    """Genders accepted by the announcements API."""

    MALE = "MALE"
    FEMALE = "FEMALE"


FLOW_SEQUENCES: dict[FlowKind, tuple[FlowStep, ...]] = {
    FlowKind.MISSING: (
        FlowStep.MICROCHIP,
        FlowStep.PHOTO,
        FlowStep.DESCRIPTION,
        FlowStep.CONTACT,
        FlowStep.COMPLETED,
    ),
    FlowKind.FOUND: (
        FlowStep.PHOTO,
        FlowStep.DESCRIPTION,
        FlowStep.CONTACT,
        FlowStep.COMPLETED,
    ),
}


def first_step(kind: FlowKind) -> FlowStep:
    """Return the entry step for a flow kind."""
    return FLOW_SEQUENCES[kind][0]


def next_step(kind: FlowKind, step: FlowStep) -> FlowStep | None:
    """Return the step after `step`, or None at the end of the sequence."""
    sequence = FLOW_SEQUENCES[kind]
    index = sequence.index(step)
    if index + 1 < len(sequence):
        return sequence[index + 1]
    return None


def previous_step(kind: FlowKind, step: FlowStep) -> FlowStep | None:
    """Return the step before `step`, or None at the first step."""
    sequence = FLOW_SEQUENCES[kind]
    index = sequence.index(step)
    if index > 0:
        return sequence[index - 1]
    return None


def last_input_step(kind: FlowKind) -> FlowStep:
    """Return the final step that collects user input before submission."""
    return FLOW_SEQUENCES[kind][-2]


@dataclass(frozen=True)
class ContactDetails:
    """Owner or finder contact details."""

    phone: str = ""
    email: str = ""
    reward_description: str | None = None


@dataclass(frozen=True)
class FlowState:
    """Snapshot of everything collected by the report flow.

    Form inputs are kept as typed by the user; the validators decide whether
    they parse, and the submission payload converts them.
    """

    kind: FlowKind = FlowKind.MISSING
    current_step: FlowStep = FlowStep.MICROCHIP
    microchip_number: str = ""
    photo_attachment_id: UUID | None = None
    disappearance_date: date | None = None
    pet_name: str = ""
    animal_species: str = ""
    animal_breed: str = ""
    animal_gender: str = ""
    animal_age: str = ""
    latitude: str = ""
    longitude: str = ""
    additional_description: str = ""
    contact_details: ContactDetails = field(default_factory=ContactDetails)
    management_password: str | None = None
    errors: dict[str, str] = field(default_factory=dict)

    @classmethod
    def start(cls, kind: FlowKind) -> "FlowState":
        """Return the default state for a new flow of the given kind."""
        return cls(kind=kind, current_step=first_step(kind))


@dataclass(frozen=True)
class ValidationResult:
    """Field-level validation errors for one step."""

    errors: dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def error_for(self, field_name: str) -> str | None:
        return self.errors.get(field_name)


@dataclass(frozen=True)
class StepTransition:
    """Outcome of a continue action on the store."""

    advanced: bool
    step: FlowStep
    validation: ValidationResult

"""Per-step validation for the report flow.

Every validator is a pure function of a `FlowState` snapshot and returns a
`ValidationResult` keyed by the `FlowState` field name that failed.
Validators run once per continue action, not on every keystroke.
"""

import re
from collections.abc import Callable
from datetime import date

from petspot.domain.report import (
    AnimalGender,
    FlowKind,
    FlowState,
    FlowStep,
    ValidationResult,
)

MICROCHIP_MAX_DIGITS = 15
MIN_PHONE_DIGITS = 7
MAX_PHONE_DIGITS = 11
MIN_AGE = 0
MAX_AGE = 40
MIN_LATITUDE = -90.0
MAX_LATITUDE = 90.0
MIN_LONGITUDE = -180.0
MAX_LONGITUDE = 180.0
MAX_DESCRIPTION_LENGTH = 500

REQUIRED_MESSAGE = "This field cannot be empty"

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$", re.IGNORECASE)
_INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")


def microchip_digits(value: str) -> str:
    """Return only the digits of a microchip number."""
    return "".join(char for char in value if char.isdigit())


def format_microchip(value: str) -> str:
    """Format microchip digits for display as 00000-00000-00000."""
    digits = microchip_digits(value)[:MICROCHIP_MAX_DIGITS]
    groups = [digits[index : index + 5] for index in range(0, len(digits), 5)]
    return "-".join(groups)


def phone_digits(value: str) -> str:
    """Return the digits of a phone number, dropping separators and a leading +."""
    sanitized = "".join(char for char in value.strip() if char.isdigit() or char == "+")
    return "".join(char for char in sanitized.removeprefix("+") if char.isdigit())


def validate_microchip(state: FlowState) -> ValidationResult:
    """Microchip is optional; when given it may hold at most 15 digits."""
    errors: dict[str, str] = {}
    if len(microchip_digits(state.microchip_number)) > MICROCHIP_MAX_DIGITS:
        errors["microchip_number"] = (
            f"Microchip number cannot exceed {MICROCHIP_MAX_DIGITS} digits"
        )
    return ValidationResult(errors)


def validate_photo(state: FlowState) -> ValidationResult:
    """A photo must be attached before leaving the photo step."""
    if state.photo_attachment_id is None:
        return ValidationResult({"photo_attachment_id": "Please add a photo"})
    return ValidationResult()


def validate_description(
    state: FlowState, today: date | None = None
) -> ValidationResult:
    """Validate the animal description step."""
    checks = {
        "disappearance_date": _date_error(state.disappearance_date, today),
        "animal_species": _species_error(state.animal_species),
        "animal_breed": _breed_error(state.animal_breed, state.animal_species),
        "animal_gender": _gender_error(state.animal_gender),
        "animal_age": _age_error(state.animal_age),
        "latitude": _coordinate_error(
            state.latitude, "Latitude", MIN_LATITUDE, MAX_LATITUDE
        ),
        "longitude": _coordinate_error(
            state.longitude, "Longitude", MIN_LONGITUDE, MAX_LONGITUDE
        ),
        "additional_description": _description_error(state.additional_description),
    }
    errors = {name: message for name, message in checks.items() if message}
    if state.kind is FlowKind.FOUND:
        errors.update(validate_microchip(state).errors)
    return ValidationResult(errors)


def validate_contact(state: FlowState) -> ValidationResult:
    """Validate phone and email; the reward is free text."""
    errors: dict[str, str] = {}
    phone_error = _phone_error(state.contact_details.phone)
    if phone_error:
        errors["phone"] = phone_error
    if not _EMAIL_PATTERN.match(state.contact_details.email.strip()):
        errors["email"] = "Enter a valid email address"
    return ValidationResult(errors)


STEP_VALIDATORS: dict[FlowStep, Callable[[FlowState], ValidationResult]] = {
    FlowStep.MICROCHIP: validate_microchip,
    FlowStep.PHOTO: validate_photo,
    FlowStep.DESCRIPTION: validate_description,
    FlowStep.CONTACT: validate_contact,
}


def validate_step(step: FlowStep, state: FlowState) -> ValidationResult:
    """Run the validator that belongs to `step`."""
    validator = STEP_VALIDATORS.get(step)
    if validator is None:
        return ValidationResult()
    return validator(state)


def _date_error(value: date | None, today: date | None) -> str | None:
    if value is None:
        return None
    if value > (today or date.today()):
        return "Date cannot be in the future"
    return None


def _species_error(species: str) -> str | None:
    return REQUIRED_MESSAGE if not species.strip() else None


def _breed_error(breed: str, species: str) -> str | None:
    if species.strip() and not breed.strip():
        return REQUIRED_MESSAGE
    return None


def _gender_error(gender: str) -> str | None:
    if not gender.strip():
        return REQUIRED_MESSAGE
    if gender.strip().upper() not in AnimalGender.__members__:
        return "Invalid gender selected"
    return None


def _age_error(age: str) -> str | None:
    if not age.strip():
        return None
    if not _INTEGER_PATTERN.match(age.strip()):
        return "Age must be a number"
    value = int(age.strip())
    if value < MIN_AGE:
        return "Age cannot be negative"
    if value > MAX_AGE:
        return f"Age must be {MAX_AGE} or less"
    return None


def _coordinate_error(
    raw: str, label: str, minimum: float, maximum: float
) -> str | None:
    if not raw.strip():
        return None
    try:
        value = float(raw.strip())
    except ValueError:
        return f"Invalid {label.lower()} format"
    if not minimum <= value <= maximum:
        return f"{label} must be between {minimum} and {maximum}"
    return None


def _description_error(description: str) -> str | None:
    if len(description) > MAX_DESCRIPTION_LENGTH:
        return f"Description cannot exceed {MAX_DESCRIPTION_LENGTH} characters"
    return None


def _phone_error(phone: str) -> str | None:
    trimmed = phone.strip()
    if any(char.isalpha() for char in trimmed):
        return "Phone number cannot contain letters"
    digit_count = len(phone_digits(trimmed))
    if digit_count < MIN_PHONE_DIGITS:
        return f"Enter at least {MIN_PHONE_DIGITS} digits"
    if digit_count > MAX_PHONE_DIGITS:
        return f"Enter no more than {MAX_PHONE_DIGITS} digits"
    return None

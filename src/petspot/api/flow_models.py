"""Pydantic models for the report flow HTTP surface."""

from datetime import date
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from petspot.domain.photos import PhotoAttachmentMetadata
from petspot.domain.report import FlowKind, FlowState, FlowStep
from petspot.services.validators import format_microchip


class FlowUpdate(BaseModel):
    """Raw field edits sent while the user types."""

    model_config = ConfigDict(extra="forbid")

    microchip_number: str | None = None
    disappearance_date: date | None = None
    pet_name: str | None = None
    animal_species: str | None = None
    animal_breed: str | None = None
    animal_gender: str | None = None
    animal_age: str | None = None
    latitude: str | None = None
    longitude: str | None = None
    additional_description: str | None = None
    phone: str | None = None
    email: str | None = None
    reward_description: str | None = None


class ContactView(BaseModel):
    phone: str
    email: str
    reward_description: str | None


class PhotoView(BaseModel):
    id: UUID
    file_name: str
    file_size_bytes: int
    formatted_file_size: str
    pixel_width: int
    pixel_height: int
    media_type: str
    is_supported_type: bool

    @classmethod
    def from_metadata(cls, metadata: PhotoAttachmentMetadata) -> "PhotoView":
        return cls(
            id=metadata.id,
            file_name=metadata.file_name,
            file_size_bytes=metadata.file_size_bytes,
            formatted_file_size=metadata.formatted_file_size,
            pixel_width=metadata.pixel_width,
            pixel_height=metadata.pixel_height,
            media_type=metadata.media_type,
            is_supported_type=metadata.is_supported_type,
        )


class FlowView(BaseModel):
    """Read-only view of the flow for rendering."""

    kind: FlowKind
    current_step: FlowStep
    microchip_number: str
    formatted_microchip_number: str
    photo: PhotoView | None
    disappearance_date: date | None
    pet_name: str
    animal_species: str
    animal_breed: str
    animal_gender: str
    animal_age: str
    latitude: str
    longitude: str
    additional_description: str
    contact_details: ContactView
    management_password: str | None
    errors: dict[str, str]

    @classmethod
    def from_state(
        cls, state: FlowState, photo: PhotoAttachmentMetadata | None
    ) -> "FlowView":
        return cls(
            kind=state.kind,
            current_step=state.current_step,
            microchip_number=state.microchip_number,
            formatted_microchip_number=format_microchip(state.microchip_number),
            photo=PhotoView.from_metadata(photo) if photo else None,
            disappearance_date=state.disappearance_date,
            pet_name=state.pet_name,
            animal_species=state.animal_species,
            animal_breed=state.animal_breed,
            animal_gender=state.animal_gender,
            animal_age=state.animal_age,
            latitude=state.latitude,
            longitude=state.longitude,
            additional_description=state.additional_description,
            contact_details=ContactView(
                phone=state.contact_details.phone,
                email=state.contact_details.email,
                reward_description=state.contact_details.reward_description,
            ),
            management_password=state.management_password,
            errors=dict(state.errors),
        )

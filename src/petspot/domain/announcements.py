"""Announcement payloads exchanged with the report repository."""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CreateAnnouncementRequest(BaseModel):
    """Body of the create-announcement call."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    species: str
    sex: str
    last_seen_date: str
    location_latitude: float
    location_longitude: float
    email: str
    phone: str
    status: str
    pet_name: str | None = None
    breed: str | None = None
    age: int | None = Field(default=None, ge=0)
    microchip_number: str | None = None
    description: str | None = None
    reward: str | None = None


class CreateAnnouncementResponse(BaseModel):
    """Response of the create-announcement call."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    management_password: str


@dataclass(frozen=True)
class CreatedAnnouncement:
    """Announcement that exists server-side, possibly still without a photo."""

    announcement_id: str
    management_password: str


@dataclass(frozen=True)
class SubmissionResult:
    """Successful two-phase submission."""

    announcement_id: str
    management_password: str

"""Error types raised by the report flow."""

from petspot.domain.announcements import CreatedAnnouncement

_RETRYABLE_STATUS_CODES = frozenset({408, 429})


class PetSpotError(Exception):
    """Base class for PetSpot errors."""


class FlowError(PetSpotError):
    """Invalid use of the flow session store."""


class UnknownFieldError(FlowError):
    """An update named a field the flow does not collect."""

    def __init__(self, names: list[str]) -> None:
        self.names = names
        super().__init__(f"Unknown flow field(s): {', '.join(names)}")


class FieldNotEditableError(FlowError):
    """An update named a field that belongs to another step."""

    def __init__(self, names: list[str], step: str) -> None:
        self.names = names
        self.step = step
        super().__init__(f"Field(s) not editable on {step}: {', '.join(names)}")


class FlowTransitionError(FlowError):
    """A transition was requested from a step that is not current."""


class PhotoCacheError(PetSpotError):
    """The photo cache could not read or write its storage."""


class PhotoMetadataError(PhotoCacheError):
    """The handed photo could not be decoded to extract metadata."""


class RepositoryError(PetSpotError):
    """Typed failure coming from the report repository."""

    retryable: bool = False


class NetworkError(RepositoryError):
    """The request never produced an HTTP response."""

    retryable = True


class HttpStatusError(RepositoryError):
    """The backend answered with a non-success status code."""

    def __init__(
        self, status_code: int, message: str | None = None, code: str | None = None
    ) -> None:
        self.status_code = status_code
        self.code = code
        self.retryable = status_code >= 500 or status_code in _RETRYABLE_STATUS_CODES
        super().__init__(message or f"Backend responded with HTTP {status_code}")


class DecodingError(RepositoryError):
    """The backend response could not be decoded."""


class SubmissionError(PetSpotError):
    """Base class for submission failures."""


class MissingPhotoError(SubmissionError):
    """Submission was attempted without a cached photo."""

    def __init__(self) -> None:
        super().__init__("A photo is required before submitting the report")


class CreateFailure(SubmissionError):
    """Phase 1 failed; nothing exists server-side."""

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"Failed to create announcement: {cause}")

    @property
    def retryable(self) -> bool:
        return isinstance(self.cause, RepositoryError) and self.cause.retryable


class UploadFailure(SubmissionError):
    """Phase 2 failed or was cancelled; the announcement exists without a photo."""

    def __init__(self, created: CreatedAnnouncement, cause: BaseException) -> None:
        self.created = created
        self.cause = cause
        super().__init__(
            f"Announcement {created.announcement_id} created but photo upload "
            f"failed: {cause}"
        )

    @property
    def retryable(self) -> bool:
        if isinstance(self.cause, RepositoryError):
            return self.cause.retryable
        return True

"""Domain models for event-creation sessions.

Each step of the creation flow is its own state class carrying only the fields
collected up to that point, so a draft can never hold a value for a later step
without holding every earlier one.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import ClassVar

from event_photos.domain.events import MediaRef, ServiceType


class SessionStep(str, Enum):
    """Ordered positions in the creation flow plus the disable sub-flow."""

    AWAITING_WELCOME_TEXT = "awaiting-welcome-text"
    AWAITING_DESCRIPTION = "awaiting-description"
    AWAITING_BACKGROUND_IMAGE = "awaiting-background-image"
    AWAITING_SERVICE_TYPE = "awaiting-service-type"
    AWAITING_UPLOAD_LIMIT = "awaiting-upload-limit"
    AWAITING_EXPECTED_PHOTO_COUNT = "awaiting-expected-photo-count"
    AWAITING_PRELOADED_PHOTOS = "awaiting-preloaded-photos"
    AWAITING_EVENT_ID_FOR_DISABLE = "awaiting-event-id-for-disable"


@dataclass(frozen=True)
class PreloadedPhotoDraft:
    """A preloaded image already stored but not yet recorded."""

    media: MediaRef
    received_at: datetime


@dataclass(frozen=True)
class AwaitingWelcomeText:
    step: ClassVar[SessionStep] = SessionStep.AWAITING_WELCOME_TEXT

    event_id: str


@dataclass(frozen=True)
class AwaitingDescription:
    step: ClassVar[SessionStep] = SessionStep.AWAITING_DESCRIPTION

    event_id: str
    welcome_text: str


@dataclass(frozen=True)
class AwaitingBackgroundImage:
    step: ClassVar[SessionStep] = SessionStep.AWAITING_BACKGROUND_IMAGE

    event_id: str
    welcome_text: str
    description: str


@dataclass(frozen=True)
class AwaitingServiceType:
    step: ClassVar[SessionStep] = SessionStep.AWAITING_SERVICE_TYPE

    event_id: str
    welcome_text: str
    description: str
    background_image: MediaRef


@dataclass(frozen=True)
class AwaitingUploadLimit:
    step: ClassVar[SessionStep] = SessionStep.AWAITING_UPLOAD_LIMIT

    event_id: str
    welcome_text: str
    description: str
    background_image: MediaRef
    service_type: ServiceType


@dataclass(frozen=True)
class AwaitingExpectedPhotoCount:
    step: ClassVar[SessionStep] = SessionStep.AWAITING_EXPECTED_PHOTO_COUNT

    event_id: str
    welcome_text: str
    description: str
    background_image: MediaRef
    service_type: ServiceType
    upload_limit: int


@dataclass(frozen=True)
class AwaitingPreloadedPhotos:
    step: ClassVar[SessionStep] = SessionStep.AWAITING_PRELOADED_PHOTOS

    event_id: str
    welcome_text: str
    description: str
    background_image: MediaRef
    service_type: ServiceType
    upload_limit: int
    expected_count: int
    preloaded_photos: tuple[PreloadedPhotoDraft, ...] = ()

    @property
    def uploaded_count(self) -> int:
        return len(self.preloaded_photos)

    @property
    def remaining(self) -> int:
        return self.expected_count - self.uploaded_count


@dataclass(frozen=True)
class AwaitingEventIdForDisable:
    step: ClassVar[SessionStep] = SessionStep.AWAITING_EVENT_ID_FOR_DISABLE


SessionState = (
    AwaitingWelcomeText
    | AwaitingDescription
    | AwaitingBackgroundImage
    | AwaitingServiceType
    | AwaitingUploadLimit
    | AwaitingExpectedPhotoCount
    | AwaitingPreloadedPhotos
    | AwaitingEventIdForDisable
)

IMAGE_STEPS = frozenset(
    {SessionStep.AWAITING_BACKGROUND_IMAGE, SessionStep.AWAITING_PRELOADED_PHOTOS}
)


@dataclass(frozen=True)
class SessionRecord:
    """The in-progress session of one organizer."""

    organizer_id: str
    state: SessionState

    @property
    def step(self) -> SessionStep:
        return self.state.step

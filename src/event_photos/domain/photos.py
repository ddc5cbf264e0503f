"""Domain models for event photos."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from event_photos.domain.events import MediaRef


class UploadType(str, Enum):
    """How a photo entered an event."""

    PRELOADED = "preloaded"
    GUEST = "guest"


@dataclass(frozen=True)
class UploaderInfo:
    """Requester details recorded with guest uploads."""

    ip: str
    user_agent: str | None = None


@dataclass(frozen=True)
class Photo:
    """An append-only photo record."""

    id: UUID
    event_id: str
    media: MediaRef
    upload_type: UploadType
    uploaded_at: datetime
    uploader_info: UploaderInfo | None = None
    approved: bool = True


@dataclass(frozen=True)
class Album:
    """Photos of one event, each list newest first."""

    preloaded_photos: list[Photo]
    guest_photos: list[Photo]

"""Guest upload admission."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import uuid4

from event_photos.domain.errors import (
    AdmissionDeniedError,
    NotFoundError,
    ValidationError,
)
from event_photos.domain.events import EventStatus, ServiceType
from event_photos.domain.photos import Photo, UploaderInfo, UploadType
from event_photos.services.events import EventRepository, PhotoRepository
from event_photos.services.media import MediaStore

logger = logging.getLogger(__name__)


@dataclass
class UploadAdmissionService:
    """Decide whether a guest upload is accepted and record it.

    The quota is counted per origin address. The count and the insert are not
    guarded by a lock, so concurrent requests from one address can both pass
    the check before either photo is written.
    """

    event_repository: EventRepository
    photo_repository: PhotoRepository
    media_store: MediaStore

    async def admit_upload(
        self,
        event_id: str,
        image: bytes,
        uploader_info: UploaderInfo,
        content_type: str | None = "image/jpeg",
    ) -> Photo:
        """Validate, store and record a guest photo."""
        if not image:
            raise ValidationError("Photo payload is empty")
        if not content_type or not content_type.startswith("image/"):
            raise ValidationError("File must be an image")

        event = self.event_repository.get_event(event_id)
        if event is None:
            raise NotFoundError(event_id)
        if (
            event.status == EventStatus.DISABLED
            or event.service_type == ServiceType.VIEW_ALBUM
        ):
            raise AdmissionDeniedError("Uploads not allowed")

        uploaded = self.photo_repository.count_by_origin(
            event_id, UploadType.GUEST, uploader_info.ip
        )
        if uploaded >= event.upload_limit:
            logger.info(
                "Guest upload limit reached",
                extra={"event_id": event_id, "origin": uploader_info.ip},
            )
            raise AdmissionDeniedError("Upload limit reached")

        media = await self.media_store.upload(
            image, folder=f"events/{event_id}", content_type=content_type
        )
        photo = Photo(
            id=uuid4(),
            event_id=event_id,
            media=media,
            upload_type=UploadType.GUEST,
            uploaded_at=datetime.now(tz=UTC),
            uploader_info=uploader_info,
            approved=True,
        )
        self.photo_repository.create_photo(photo)
        return photo

"""Guest-facing event endpoints."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, File, HTTPException, Request, UploadFile, status

from event_photos.domain.errors import (
    AdmissionDeniedError,
    NotFoundError,
    ValidationError,
)
from event_photos.domain.photos import UploaderInfo

if TYPE_CHECKING:
    from event_photos.containers import AppContainer
    from event_photos.domain.events import Event
    from event_photos.domain.photos import Photo

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["events"])


@router.get("/{event_id}")
async def event_detail(event_id: str, request: Request) -> dict[str, object]:
    """Return an event with its photos and whether guests may upload."""
    container: AppContainer = request.app.state.container
    try:
        overview = container.album_service.get_event_overview(event_id)
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=exc.message
        ) from exc
    except Exception as exc:
        logger.exception("Failed to load event", extra={"event_id": event_id})
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail="Server error"
        ) from exc
    return {
        "event": _event_payload(overview.event),
        "preloadedPhotos": [
            _photo_payload(photo) for photo in overview.album.preloaded_photos
        ],
        "guestPhotos": [_photo_payload(photo) for photo in overview.album.guest_photos],
        "uploadEnabled": overview.upload_enabled,
    }


@router.get("/{event_id}/album")
async def event_album(event_id: str, request: Request) -> dict[str, object]:
    """Return preloaded and approved guest photos, newest first."""
    container: AppContainer = request.app.state.container
    try:
        album = container.album_service.get_album(event_id)
    except Exception as exc:
        logger.exception("Failed to load album", extra={"event_id": event_id})
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail="Server error"
        ) from exc
    return {
        "preloadedPhotos": [_photo_payload(photo) for photo in album.preloaded_photos],
        "guestPhotos": [_photo_payload(photo) for photo in album.guest_photos],
    }


@router.post("/{event_id}/photos")
async def upload_photo(
    event_id: str,
    request: Request,
    photo: UploadFile = File(..., description="Photo uploaded by a guest"),
) -> dict[str, object]:
    """Accept a guest photo when the event and the uploader's quota allow it."""
    container: AppContainer = request.app.state.container
    uploader_info = UploaderInfo(
        ip=request.client.host if request.client else "unknown",
        user_agent=request.headers.get("user-agent"),
    )
    image = await photo.read()
    try:
        created = await container.upload_admission_service.admit_upload(
            event_id,
            image,
            uploader_info,
            content_type=photo.content_type,
        )
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=exc.message
        ) from exc
    except (ValidationError, AdmissionDeniedError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message
        ) from exc
    except Exception as exc:
        logger.exception("Guest upload failed", extra={"event_id": event_id})
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail="Upload failed"
        ) from exc
    return {"success": True, "photo": _photo_payload(created)}


def _event_payload(event: Event) -> dict[str, object]:
    return {
        "eventId": event.event_id,
        "welcomeText": event.welcome_text,
        "description": event.description,
        "backgroundImage": {
            "mediaId": event.background_image.media_id,
            "url": event.background_image.url,
        },
        "serviceType": event.service_type.value,
        "uploadLimit": event.upload_limit,
        "status": event.status.value,
        "createdBy": event.created_by,
        "createdAt": event.created_at.isoformat(),
        "updatedAt": event.updated_at.isoformat(),
    }


def _photo_payload(photo: Photo) -> dict[str, object]:
    """Serialize a photo without the uploader's address."""
    return {
        "id": str(photo.id),
        "eventId": photo.event_id,
        "mediaId": photo.media.media_id,
        "url": photo.media.url,
        "uploadType": photo.upload_type.value,
        "approved": photo.approved,
        "uploadedAt": photo.uploaded_at.isoformat(),
    }

"""Supabase-backed photo repository."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from event_photos.domain.errors import UpstreamError
from event_photos.domain.events import MediaRef
from event_photos.domain.photos import Photo, UploaderInfo, UploadType
from event_photos.services.events import PhotoRepository

_PHOTO_COLUMNS = (
    "id, event_id, media_id, url, upload_type, uploader_ip, "
    "uploader_user_agent, approved, uploaded_at"
)


@dataclass
class SupabasePhotoRepository(PhotoRepository):
    """Supabase implementation for event photo persistence."""

    client: Client

    def create_photo(self, photo: Photo) -> None:
        """Insert a single photo row."""
        self.create_photos([photo])

    def create_photos(self, photos: list[Photo]) -> None:
        """Insert photo rows in one request."""
        if not photos:
            return
        response = (
            self.client.table("event_photos")
            .insert([_to_row(photo) for photo in photos])
            .execute()
        )
        if not response.data:
            raise UpstreamError("Failed to create photos")

    def list_photos(
        self, event_id: str, upload_type: UploadType, approved: bool | None = None
    ) -> list[Photo]:
        """Return photos for an event ordered by upload time, newest first."""
        query = (
            self.client.table("event_photos")
            .select(_PHOTO_COLUMNS)
            .eq("event_id", event_id)
            .eq("upload_type", upload_type.value)
        )
        if approved is not None:
            query = query.eq("approved", approved)
        response = query.order("uploaded_at", desc=True).execute()
        return [_parse_row(row) for row in response.data or []]

    def count_by_origin(
        self, event_id: str, upload_type: UploadType, origin_address: str
    ) -> int:
        """Count photos uploaded to an event from one address."""
        response = (
            self.client.table("event_photos")
            .select("id", count="exact")
            .eq("event_id", event_id)
            .eq("upload_type", upload_type.value)
            .eq("uploader_ip", origin_address)
            .execute()
        )
        return response.count or 0


def _to_row(photo: Photo) -> dict[str, object]:
    info = photo.uploader_info
    return {
        "id": str(photo.id),
        "event_id": photo.event_id,
        "media_id": photo.media.media_id,
        "url": photo.media.url,
        "upload_type": photo.upload_type.value,
        "uploader_ip": info.ip if info else None,
        "uploader_user_agent": info.user_agent if info else None,
        "approved": photo.approved,
        "uploaded_at": photo.uploaded_at.isoformat(),
    }


def _parse_row(row: dict[str, object]) -> Photo:
    uploader_ip = row.get("uploader_ip")
    user_agent = row.get("uploader_user_agent")
    return Photo(
        id=UUID(str(row["id"])),
        event_id=str(row["event_id"]),
        media=MediaRef(media_id=str(row["media_id"]), url=str(row["url"])),
        upload_type=UploadType(row["upload_type"]),
        uploaded_at=datetime.fromisoformat(str(row["uploaded_at"])),
        uploader_info=(
            UploaderInfo(
                ip=str(uploader_ip),
                user_agent=str(user_agent) if user_agent else None,
            )
            if uploader_ip
            else None
        ),
        approved=bool(row.get("approved", True)),
    )

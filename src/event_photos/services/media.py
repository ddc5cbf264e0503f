"""Media store interface."""

from typing import Protocol

from event_photos.domain.events import MediaRef


class MediaStore(Protocol):
    """Interface for hosting uploaded images."""

    async def upload(
        self, image: bytes | str, folder: str, content_type: str = "image/jpeg"
    ) -> MediaRef:
        """Store raw bytes or a remote image URL and return its reference."""

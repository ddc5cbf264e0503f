"""Supabase Storage media store."""

import mimetypes
from dataclasses import dataclass
from uuid import uuid4

import httpx
from supabase import Client

from event_photos.domain.errors import MediaUploadError
from event_photos.domain.events import MediaRef
from event_photos.services.media import MediaStore


@dataclass
class SupabaseMediaStore(MediaStore):
    """Store images in a public Supabase Storage bucket."""

    client: Client
    bucket: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, client: Client, bucket: str) -> "SupabaseMediaStore":
        """Create a media store with a managed httpx session."""
        return cls(client=client, bucket=bucket, http_client=httpx.AsyncClient())

    async def upload(
        self, image: bytes | str, folder: str, content_type: str = "image/jpeg"
    ) -> MediaRef:
        """Upload image bytes, or the image behind a URL, to the bucket."""
        try:
            if isinstance(image, str):
                image = await self._fetch(image)
            path = f"{folder}/{uuid4().hex}{_extension(content_type)}"
            storage = self.client.storage.from_(self.bucket)
            storage.upload(path, image, {"content-type": content_type})
            url = storage.get_public_url(path)
        except Exception as exc:
            raise MediaUploadError("Failed to upload image") from exc
        return MediaRef(media_id=path, url=url)

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()

    async def _fetch(self, url: str) -> bytes:
        response = await self.http_client.get(url, timeout=20)
        response.raise_for_status()
        return response.content


def _extension(content_type: str) -> str:
    return mimetypes.guess_extension(content_type) or ".jpg"

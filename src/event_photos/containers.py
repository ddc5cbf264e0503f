"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from event_photos.adapters.supabase_event_repository import SupabaseEventRepository
from event_photos.adapters.supabase_media_store import SupabaseMediaStore
from event_photos.adapters.supabase_photo_repository import SupabasePhotoRepository
from event_photos.adapters.telegram_client import (
    HttpxTelegramClient,
    TelegramClient,
)
from event_photos.adapters.telegram_file_client import (
    HttpxTelegramFileClient,
    TelegramFileClient,
)
from event_photos.config import Settings
from event_photos.services.albums import AlbumService
from event_photos.services.sessions import EventCreationService, InMemorySessionStore
from event_photos.services.uploads import UploadAdmissionService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    telegram_client: TelegramClient
    telegram_file_client: TelegramFileClient
    event_creation_service: EventCreationService
    upload_admission_service: UploadAdmissionService
    album_service: AlbumService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    event_repository = SupabaseEventRepository(supabase_client)
    photo_repository = SupabasePhotoRepository(supabase_client)
    media_store = SupabaseMediaStore.create(
        supabase_client, resolved_settings.supabase_storage_bucket
    )
    telegram_client = HttpxTelegramClient.create(resolved_settings.telegram_bot_token)
    telegram_file_client = HttpxTelegramFileClient.create(
        resolved_settings.telegram_bot_token
    )
    event_creation_service = EventCreationService(
        session_store=InMemorySessionStore(),
        event_repository=event_repository,
        photo_repository=photo_repository,
        media_store=media_store,
        frontend_url=resolved_settings.frontend_url,
        debug_errors=resolved_settings.debug_errors,
    )
    upload_admission_service = UploadAdmissionService(
        event_repository=event_repository,
        photo_repository=photo_repository,
        media_store=media_store,
    )
    album_service = AlbumService(
        event_repository=event_repository,
        photo_repository=photo_repository,
    )

    async def close_resources() -> None:
        await telegram_client.close()
        await telegram_file_client.close()
        await media_store.close()

    return AppContainer(
        settings=resolved_settings,
        telegram_client=telegram_client,
        telegram_file_client=telegram_file_client,
        event_creation_service=event_creation_service,
        upload_admission_service=upload_admission_service,
        album_service=album_service,
        close_resources=close_resources,
    )

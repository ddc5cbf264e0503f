"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime

import pytest

from event_photos.adapters.telegram_client import TelegramClient
from event_photos.config import Settings
from event_photos.containers import AppContainer
from event_photos.domain.errors import MediaUploadError, UpstreamError
from event_photos.domain.events import (
    Event,
    EventStatus,
    MediaRef,
    ServiceType,
)
from event_photos.domain.photos import Photo, UploadType
from event_photos.services.albums import AlbumService
from event_photos.services.events import EventRepository, PhotoRepository
from event_photos.services.media import MediaStore
from event_photos.services.sessions import (
    EventCreationService,
    InMemorySessionStore,
)
from event_photos.services.uploads import UploadAdmissionService


@dataclass
class InMemoryEventRepository(EventRepository):
    """In-memory event repository for tests."""

    events: dict[str, Event] = field(default_factory=dict)
    create_calls: int = 0
    fail_on_create: bool = False

    def create_event(self, event: Event) -> None:
        self.create_calls += 1
        if self.fail_on_create:
            raise UpstreamError("Failed to create event")
        self.events[event.event_id] = event

    def get_event(self, event_id: str) -> Event | None:
        return self.events.get(event_id)

    def update_status(self, event_id: str, status: EventStatus) -> None:
        event = self.events[event_id]
        self.events[event_id] = replace(
            event, status=status, updated_at=datetime.now(tz=UTC)
        )


@dataclass
class InMemoryPhotoRepository(PhotoRepository):
    """In-memory photo repository for tests."""

    photos: list[Photo] = field(default_factory=list)
    fail_on_create: bool = False

    def create_photo(self, photo: Photo) -> None:
        self.create_photos([photo])

    def create_photos(self, photos: list[Photo]) -> None:
        if self.fail_on_create:
            raise UpstreamError("Failed to create photos")
        self.photos.extend(photos)

    def list_photos(
        self, event_id: str, upload_type: UploadType, approved: bool | None = None
    ) -> list[Photo]:
        matches = [
            photo
            for photo in self.photos
            if photo.event_id == event_id
            and photo.upload_type == upload_type
            and (approved is None or photo.approved == approved)
        ]
        return sorted(matches, key=lambda photo: photo.uploaded_at, reverse=True)

    def count_by_origin(
        self, event_id: str, upload_type: UploadType, origin_address: str
    ) -> int:
        return sum(
            1
            for photo in self.photos
            if photo.event_id == event_id
            and photo.upload_type == upload_type
            and photo.uploader_info is not None
            and photo.uploader_info.ip == origin_address
        )


@dataclass
class FakeMediaStore(MediaStore):
    """Fake media store that records uploads."""

    uploads: list[tuple[bytes | str, str]] = field(default_factory=list)
    fail: bool = False

    async def upload(
        self, image: bytes | str, folder: str, content_type: str = "image/jpeg"
    ) -> MediaRef:
        await asyncio.sleep(0)
        if self.fail:
            raise MediaUploadError("Failed to upload image")
        self.uploads.append((image, folder))
        media_id = f"{folder}/{len(self.uploads)}.jpg"
        return MediaRef(media_id=media_id, url=f"https://cdn.example.com/{media_id}")


@dataclass
class FakeTelegramClient(TelegramClient):
    """Fake Telegram client that records messages."""

    messages: list[tuple[int, str]] = field(default_factory=list)
    markups: list[dict | None] = field(default_factory=list)
    parse_modes: list[str | None] = field(default_factory=list)
    commands: list[dict[str, str]] | None = None
    menu_button: dict[str, object] | None = None

    async def send_message(
        self,
        chat_id: int,
        text: str,
        reply_markup: dict | None = None,
        parse_mode: str | None = None,
    ) -> None:
        self.messages.append((chat_id, text))
        self.markups.append(reply_markup)
        self.parse_modes.append(parse_mode)

    async def set_my_commands(self, commands: list[dict[str, str]]) -> None:
        self.commands = commands

    async def set_chat_menu_button(
        self, menu_button: dict[str, object] | None = None
    ) -> None:
        self.menu_button = menu_button


@dataclass
class FakeTelegramFileClient:
    """Fake Telegram file client that resolves ids to static URLs."""

    requested: list[str] = field(default_factory=list)

    async def get_file_url(self, file_id: str) -> str:
        self.requested.append(file_id)
        return f"https://files.example.com/{file_id}.jpg"


def make_event(  # noqa: PLR0913
    event_id: str = "EVT_TEST00001",
    *,
    service_type: ServiceType = ServiceType.BOTH,
    upload_limit: int = 50,
    status: EventStatus = EventStatus.ACTIVE,
    welcome_text: str = "Welcome!",
    description: str = "Our wedding day",
) -> Event:
    now = datetime.now(tz=UTC)
    return Event(
        event_id=event_id,
        welcome_text=welcome_text,
        description=description,
        background_image=MediaRef(
            media_id="events/backgrounds/bg.jpg",
            url="https://cdn.example.com/events/backgrounds/bg.jpg",
        ),
        service_type=service_type,
        upload_limit=upload_limit,
        status=status,
        created_by="42",
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        telegram_bot_token="test-token",
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        frontend_url="https://photos.example.com",
        environment="test",
    )


@pytest.fixture
def event_repository() -> InMemoryEventRepository:
    return InMemoryEventRepository()


@pytest.fixture
def photo_repository() -> InMemoryPhotoRepository:
    return InMemoryPhotoRepository()


@pytest.fixture
def media_store() -> FakeMediaStore:
    return FakeMediaStore()


@pytest.fixture
def creation_service(
    event_repository: InMemoryEventRepository,
    photo_repository: InMemoryPhotoRepository,
    media_store: FakeMediaStore,
) -> EventCreationService:
    return EventCreationService(
        session_store=InMemorySessionStore(),
        event_repository=event_repository,
        photo_repository=photo_repository,
        media_store=media_store,
        frontend_url="https://photos.example.com",
    )


@pytest.fixture
def telegram_client() -> FakeTelegramClient:
    return FakeTelegramClient()


@pytest.fixture
def container(
    settings: Settings,
    event_repository: InMemoryEventRepository,
    photo_repository: InMemoryPhotoRepository,
    media_store: FakeMediaStore,
    creation_service: EventCreationService,
    telegram_client: FakeTelegramClient,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        telegram_client=telegram_client,
        telegram_file_client=FakeTelegramFileClient(),
        event_creation_service=creation_service,
        upload_admission_service=UploadAdmissionService(
            event_repository=event_repository,
            photo_repository=photo_repository,
            media_store=media_store,
        ),
        album_service=AlbumService(
            event_repository=event_repository,
            photo_repository=photo_repository,
        ),
        close_resources=close_resources,
    )

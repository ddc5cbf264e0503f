"""Session state machine for event creation."""

import asyncio
import html
import logging
import secrets
import string
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Protocol
from uuid import uuid4

from event_photos.domain.errors import ValidationError
from event_photos.domain.events import (
    DESCRIPTION_MAX_LENGTH,
    UPLOAD_LIMIT_MAX,
    UPLOAD_LIMIT_MIN,
    WELCOME_TEXT_MAX_LENGTH,
    Event,
    EventStatus,
    ServiceType,
)
from event_photos.domain.photos import Photo, UploadType
from event_photos.domain.sessions import (
    AwaitingBackgroundImage,
    AwaitingDescription,
    AwaitingEventIdForDisable,
    AwaitingExpectedPhotoCount,
    AwaitingPreloadedPhotos,
    AwaitingServiceType,
    AwaitingUploadLimit,
    AwaitingWelcomeText,
    PreloadedPhotoDraft,
    SessionRecord,
    SessionState,
)
from event_photos.services.events import EventRepository, PhotoRepository
from event_photos.services.media import MediaStore

logger = logging.getLogger(__name__)

EVENT_ID_PREFIX = "EVT_"
_EVENT_ID_ALPHABET = string.ascii_uppercase + string.digits
_EVENT_ID_SUFFIX_LENGTH = 9

BACKGROUND_FOLDER = "events/backgrounds"
PRELOADED_FOLDER = "events/preloaded"

ImageLoader = Callable[[], Awaitable[bytes | str]]


class SessionStore(Protocol):
    """Storage for in-progress sessions keyed by organizer id."""

    def get(self, organizer_id: str) -> SessionRecord | None:
        """Return the organizer's session, if present."""

    def save(self, record: SessionRecord) -> None:
        """Create or replace the organizer's session."""

    def delete(self, organizer_id: str) -> None:
        """Remove the organizer's session if it exists."""


@dataclass
class InMemorySessionStore(SessionStore):
    """Process-local session store. Sessions are lost on restart."""

    _sessions: dict[str, SessionRecord]

    def __init__(self) -> None:
        self._sessions = {}

    def get(self, organizer_id: str) -> SessionRecord | None:
        return self._sessions.get(organizer_id)

    def save(self, record: SessionRecord) -> None:
        self._sessions[record.organizer_id] = record

    def delete(self, organizer_id: str) -> None:
        self._sessions.pop(organizer_id, None)


@dataclass(frozen=True)
class SessionPrompt:
    """Represents the next organizer-facing message."""

    text: str
    reply_markup: dict | None = None
    parse_mode: str | None = None


def generate_event_id() -> str:
    """Return a new event id such as ``EVT_K3J9Q0ZP2``."""
    suffix = "".join(
        secrets.choice(_EVENT_ID_ALPHABET) for _ in range(_EVENT_ID_SUFFIX_LENGTH)
    )
    return f"{EVENT_ID_PREFIX}{suffix}"


@dataclass
class EventCreationService:
    """State machine guiding an organizer through event setup.

    Every input either moves the session exactly one step forward or leaves it
    untouched. Inputs from the same organizer are processed one at a time.
    """

    session_store: SessionStore
    event_repository: EventRepository
    photo_repository: PhotoRepository
    media_store: MediaStore
    frontend_url: str
    debug_errors: bool = False
    _locks: dict[str, asyncio.Lock] = field(
        default_factory=dict, init=False, repr=False
    )

    async def begin(self, organizer_id: str) -> SessionPrompt:
        """Start a new creation session, replacing any existing one."""
        async with self._lock_for(organizer_id):
            event_id = generate_event_id()
            self.session_store.save(
                SessionRecord(
                    organizer_id=organizer_id,
                    state=AwaitingWelcomeText(event_id=event_id),
                )
            )
            logger.info(
                "Event creation started",
                extra={"organizer_id": organizer_id, "event_id": event_id},
            )
            return SessionPrompt(
                text=(
                    f"New event created! ID: {event_id}\n"
                    f"Send the welcome text (max {WELCOME_TEXT_MAX_LENGTH} "
                    "characters)."
                )
            )

    async def start_disable(self, organizer_id: str) -> SessionPrompt:
        """Switch the organizer into the disable sub-flow."""
        async with self._lock_for(organizer_id):
            self.session_store.save(
                SessionRecord(
                    organizer_id=organizer_id, state=AwaitingEventIdForDisable()
                )
            )
            return _step_prompt(AwaitingEventIdForDisable(), note="")

    async def cancel(self, organizer_id: str) -> SessionPrompt | None:
        """Drop the organizer's session, if any."""
        async with self._lock_for(organizer_id):
            if self.session_store.get(organizer_id) is None:
                return None
            self.session_store.delete(organizer_id)
            return SessionPrompt(
                text="Event setup cancelled. Send /start to begin again."
            )

    async def handle_text(self, organizer_id: str, text: str) -> SessionPrompt | None:
        """Handle a text reply. Returns None when no session exists."""
        async with self._lock_for(organizer_id):
            record = self.session_store.get(organizer_id)
            if record is None:
                return None
            state = record.state
            if isinstance(state, AwaitingEventIdForDisable):
                return self._disable_event(organizer_id, text.strip())
            try:
                next_state = _accept_text(state, text)
            except ValidationError as exc:
                return _reprompt(state, exc.message)
            self.session_store.save(replace(record, state=next_state))
            return _step_prompt(next_state)

    async def handle_image(
        self, organizer_id: str, load_image: ImageLoader
    ) -> SessionPrompt | None:
        """Handle an image sent by the organizer.

        ``load_image`` is only awaited when the current step expects an image.
        """
        async with self._lock_for(organizer_id):
            record = self.session_store.get(organizer_id)
            if record is None:
                return None
            state = record.state
            if isinstance(state, AwaitingBackgroundImage):
                folder = BACKGROUND_FOLDER
            elif isinstance(state, AwaitingPreloadedPhotos):
                folder = PRELOADED_FOLDER
            else:
                return _reprompt(state, "Please send text here, not a photo.")

            try:
                image = await load_image()
                media = await self.media_store.upload(image, folder=folder)
            except Exception as exc:
                logger.exception(
                    "Failed to store organizer image",
                    extra={"organizer_id": organizer_id, "step": state.step.value},
                )
                return self._failure_prompt(
                    "Failed to upload image. Please send it again.", exc
                )

            if isinstance(state, AwaitingBackgroundImage):
                next_state = AwaitingServiceType(
                    event_id=state.event_id,
                    welcome_text=state.welcome_text,
                    description=state.description,
                    background_image=media,
                )
                self.session_store.save(replace(record, state=next_state))
                return _step_prompt(next_state, note="Background set!")

            collected = replace(
                state,
                preloaded_photos=(
                    *state.preloaded_photos,
                    PreloadedPhotoDraft(media=media, received_at=datetime.now(tz=UTC)),
                ),
            )
            if collected.remaining > 0:
                self.session_store.save(replace(record, state=collected))
                return SessionPrompt(
                    text=(
                        f"Photo added ({collected.uploaded_count}/"
                        f"{collected.expected_count}). Send the next one."
                    )
                )
            return self._finalize(organizer_id, collected)

    def _finalize(
        self, organizer_id: str, state: AwaitingPreloadedPhotos
    ) -> SessionPrompt:
        """Persist the event and its preloaded photos, then end the session.

        The event and the photo batch are written separately. A failed photo
        write leaves the event in place, and the session is removed either way.
        """
        now = datetime.now(tz=UTC)
        event = Event(
            event_id=state.event_id,
            welcome_text=state.welcome_text,
            description=state.description,
            background_image=state.background_image,
            service_type=state.service_type,
            upload_limit=state.upload_limit,
            status=EventStatus.ACTIVE,
            created_by=organizer_id,
            created_at=now,
            updated_at=now,
        )
        photos = [
            Photo(
                id=uuid4(),
                event_id=state.event_id,
                media=draft.media,
                upload_type=UploadType.PRELOADED,
                uploaded_at=draft.received_at,
                approved=True,
            )
            for draft in state.preloaded_photos
        ]
        try:
            self.event_repository.create_event(event)
            logger.info("Event saved", extra={"event_id": event.event_id})
            self.photo_repository.create_photos(photos)
            logger.info(
                "Preloaded photos saved",
                extra={"event_id": event.event_id, "count": len(photos)},
            )
        except Exception as exc:
            logger.exception(
                "Failed to finalize event", extra={"event_id": event.event_id}
            )
            return self._failure_prompt(
                "Failed to create event. Please send /start to try again.", exc
            )
        finally:
            self.session_store.delete(organizer_id)

        event_url = f"{self.frontend_url.rstrip('/')}/event/{event.event_id}"
        return SessionPrompt(
            text=(
                "<b>Event setup complete!</b>\n\n"
                f"<b>Event ID:</b> <code>{event.event_id}</code>\n"
                f"<b>Event URL:</b> {html.escape(event_url)}\n\n"
                "Share the URL with your guests!\n\n"
                "Use /disable to stop uploads anytime."
            ),
            parse_mode="HTML",
        )

    def _disable_event(self, organizer_id: str, event_id: str) -> SessionPrompt:
        try:
            event = self.event_repository.get_event(event_id)
            if event is None:
                return SessionPrompt(
                    text=f"Event not found: {event_id}. Send /disable to try again."
                )
            if event.status == EventStatus.DISABLED:
                return SessionPrompt(
                    text=f"Uploads are already disabled for event: {event_id}"
                )
            self.event_repository.update_status(event_id, EventStatus.DISABLED)
            logger.info(
                "Event disabled",
                extra={"event_id": event_id, "organizer_id": organizer_id},
            )
            return SessionPrompt(text=f"Uploads disabled for event: {event_id}")
        except Exception as exc:
            logger.exception("Failed to disable event", extra={"event_id": event_id})
            return self._failure_prompt("Failed to disable event.", exc)
        finally:
            self.session_store.delete(organizer_id)

    def _failure_prompt(self, fallback: str, exc: Exception) -> SessionPrompt:
        if self.debug_errors:
            detail = f"{type(exc).__name__}: {exc}".strip()
            if detail:
                return SessionPrompt(text=f"{fallback} (debug: {detail})")
        return SessionPrompt(text=fallback)

    def _lock_for(self, organizer_id: str) -> asyncio.Lock:
        lock = self._locks.get(organizer_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[organizer_id] = lock
        return lock


def _accept_text(state: SessionState, text: str) -> SessionState:  # noqa: PLR0911
    """Validate a text reply and return the next state."""
    if isinstance(state, AwaitingWelcomeText):
        return AwaitingDescription(
            event_id=state.event_id,
            welcome_text=_parse_text(text, WELCOME_TEXT_MAX_LENGTH),
        )
    if isinstance(state, AwaitingDescription):
        return AwaitingBackgroundImage(
            event_id=state.event_id,
            welcome_text=state.welcome_text,
            description=_parse_text(text, DESCRIPTION_MAX_LENGTH),
        )
    if isinstance(state, AwaitingServiceType):
        return AwaitingUploadLimit(
            event_id=state.event_id,
            welcome_text=state.welcome_text,
            description=state.description,
            background_image=state.background_image,
            service_type=_parse_service_type(text),
        )
    if isinstance(state, AwaitingUploadLimit):
        limit = _parse_int(text)
        if limit is None or not UPLOAD_LIMIT_MIN <= limit <= UPLOAD_LIMIT_MAX:
            raise ValidationError(
                f"Enter a number from {UPLOAD_LIMIT_MIN} to {UPLOAD_LIMIT_MAX}."
            )
        return AwaitingExpectedPhotoCount(
            event_id=state.event_id,
            welcome_text=state.welcome_text,
            description=state.description,
            background_image=state.background_image,
            service_type=state.service_type,
            upload_limit=limit,
        )
    if isinstance(state, AwaitingExpectedPhotoCount):
        count = _parse_int(text)
        if count is None or count <= 0:
            raise ValidationError("Enter a positive whole number.")
        return AwaitingPreloadedPhotos(
            event_id=state.event_id,
            welcome_text=state.welcome_text,
            description=state.description,
            background_image=state.background_image,
            service_type=state.service_type,
            upload_limit=state.upload_limit,
            expected_count=count,
        )
    if isinstance(state, AwaitingBackgroundImage | AwaitingPreloadedPhotos):
        raise ValidationError("Please send a photo, not text.")
    raise ValidationError("Unexpected input.")


def _parse_text(text: str, max_length: int) -> str:
    cleaned = text.strip()
    if not cleaned:
        raise ValidationError("The text can't be empty.")
    if len(cleaned) > max_length:
        raise ValidationError(f"Too long! Max {max_length} characters.")
    return cleaned


def _parse_int(text: str) -> int | None:
    """Parse a plain ASCII integer literal."""
    cleaned = text.strip()
    if cleaned.isascii() and cleaned.isdigit():
        return int(cleaned)
    return None


def _parse_service_type(text: str) -> ServiceType:
    token = text.strip().lower().removeprefix("/").split("@", maxsplit=1)[0]
    try:
        return ServiceType(token)
    except ValueError:
        raise ValidationError("Use /both, /viewalbum or /uploadpics.") from None


def _service_type_keyboard() -> dict:
    return {
        "keyboard": [
            [{"text": f"/{service_type.value}"} for service_type in ServiceType]
        ],
        "one_time_keyboard": True,
        "resize_keyboard": True,
    }


def _step_prompt(state: SessionState, note: str = "Saved!") -> SessionPrompt:
    """Return the prompt asking for the input the state is waiting on."""
    reply_markup = None
    if isinstance(state, AwaitingWelcomeText):
        text = f"Send the welcome text (max {WELCOME_TEXT_MAX_LENGTH} characters)."
    elif isinstance(state, AwaitingDescription):
        text = f"Now send the description (max {DESCRIPTION_MAX_LENGTH} characters)."
    elif isinstance(state, AwaitingBackgroundImage):
        text = "Now send the background image."
    elif isinstance(state, AwaitingServiceType):
        text = (
            "Choose the event type:\n"
            "/both - guests view the album and upload photos\n"
            "/viewalbum - guests only view the album\n"
            "/uploadpics - guests only upload photos"
        )
        reply_markup = _service_type_keyboard()
    elif isinstance(state, AwaitingUploadLimit):
        text = (
            f"Enter the upload limit per guest ({UPLOAD_LIMIT_MIN}-{UPLOAD_LIMIT_MAX})."
        )
    elif isinstance(state, AwaitingExpectedPhotoCount):
        text = "How many preloaded photos will you send?"
    elif isinstance(state, AwaitingPreloadedPhotos):
        text = (
            f"Send {state.remaining} preloaded photo(s) one at a time "
            f"({state.uploaded_count}/{state.expected_count} received)."
        )
    else:
        text = "Enter the event ID to disable uploads for:"
    return SessionPrompt(
        text=f"{note} {text}" if note else text, reply_markup=reply_markup
    )


def _reprompt(state: SessionState, message: str) -> SessionPrompt:
    return _step_prompt(state, note=message)

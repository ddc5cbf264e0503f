"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from event_photos.api.events import router as events_router
from event_photos.api.telegram_models import TelegramMessage, TelegramUpdate
from event_photos.app_logging import configure_logging
from event_photos.config import parse_allowed_user_ids
from event_photos.containers import AppContainer
from event_photos.services.sessions import SessionPrompt
from event_photos.telegram_commands import (
    CHAT_MENU_BUTTON,
    HELP_TEXT,
    SERVICE_TYPE_COMMANDS,
    parse_command,
    telegram_commands,
)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)
    allowed_user_ids = parse_allowed_user_ids(
        container.settings.telegram_allowed_user_ids
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            await app.state.container.telegram_client.set_my_commands(
                telegram_commands()
            )
            await app.state.container.telegram_client.set_chat_menu_button(
                CHAT_MENU_BUTTON
            )
        except Exception:
            logger.exception("Failed to sync Telegram bot commands")
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(events_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/telegram/webhook")
    async def telegram_webhook(
        update: TelegramUpdate, request: Request
    ) -> dict[str, str]:
        """Handle Telegram webhook updates from organizers."""
        state_container: AppContainer = request.app.state.container
        message = update.message
        if message is None:
            return {"status": "ok"}
        if not _is_user_allowed(message.from_user.id, allowed_user_ids):
            await state_container.telegram_client.send_message(
                chat_id=message.chat.id,
                text="This bot is private.",
            )
            return {"status": "ok"}

        organizer_id = message.organizer_id
        try:
            prompt = await _dispatch_message(state_container, message, organizer_id)
        except Exception as exc:
            logger.exception(
                "Failed to handle Telegram message",
                extra={"organizer_id": organizer_id},
            )
            prompt = SessionPrompt(
                text=_format_error(
                    state_container, exc, "Something went wrong. Please try again."
                )
            )
        if prompt:
            await state_container.telegram_client.send_message(
                chat_id=message.chat.id,
                text=prompt.text,
                reply_markup=prompt.reply_markup,
                parse_mode=prompt.parse_mode,
            )
        return {"status": "ok"}

    return app


async def _dispatch_message(  # noqa: PLR0911
    state_container: AppContainer, message: TelegramMessage, organizer_id: str
) -> SessionPrompt | None:
    """Route an organizer message to the event creation flow."""
    service = state_container.event_creation_service
    photo = message.largest_photo()
    if photo is not None:
        return await service.handle_image(
            organizer_id,
            lambda: state_container.telegram_file_client.get_file_url(photo.file_id),
        )
    if not message.text:
        return None

    command = parse_command(message.text)
    if command == "start":
        return await service.begin(organizer_id)
    if command == "disable":
        return await service.start_disable(organizer_id)
    if command == "cancel":
        prompt = await service.cancel(organizer_id)
        return prompt or SessionPrompt(text="No event setup in progress.")
    if command == "help":
        return SessionPrompt(text=HELP_TEXT)
    if command is not None and command not in SERVICE_TYPE_COMMANDS:
        return None
    return await service.handle_text(organizer_id, message.text)


def _is_user_allowed(user_id: int, allowed: set[int] | None) -> bool:
    """Return true when the user is allowed to interact with the bot."""
    return allowed is None or user_id in allowed


def _format_error(
    state_container: AppContainer, exc: Exception, fallback: str
) -> str:
    """Return a user-facing error message with local debug info."""
    if state_container.settings.debug_errors:
        detail = f"{type(exc).__name__}: {exc}".strip()
        if detail:
            return f"{fallback} (debug: {detail})"
    return fallback

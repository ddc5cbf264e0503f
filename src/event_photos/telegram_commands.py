"""Telegram bot command configuration."""

from dataclasses import dataclass
from enum import Enum

from event_photos.domain.events import ServiceType


@dataclass(frozen=True)
class TelegramCommand:
    """Declarative bot command definition."""

    command: str
    description: str


class BotCommand(Enum):
    """Enum of bot commands shown in the Telegram menu."""

    START = TelegramCommand("start", "Create a new photo event")
    DISABLE = TelegramCommand("disable", "Stop guest uploads for an event")
    CANCEL = TelegramCommand("cancel", "Cancel the event setup in progress")
    HELP = TelegramCommand("help", "How event setup works")


SERVICE_TYPE_COMMANDS = frozenset(service_type.value for service_type in ServiceType)

HELP_TEXT = (
    "Send /start to create an event. I'll ask for a welcome text, a description, "
    "a background image, the event type, a per-guest upload limit and how many "
    "photos you want to preload. The event is saved once the last preloaded "
    "photo arrives.\n"
    "Send /disable to stop guest uploads for an event, or /cancel to abandon "
    "the setup in progress."
)


def telegram_commands() -> list[dict[str, str]]:
    """Return commands formatted for Telegram API."""
    return [
        {"command": entry.value.command, "description": entry.value.description}
        for entry in BotCommand
    ]


def parse_command(text: str) -> str | None:
    """Return the bare command name of a slash command, if the text is one."""
    if not text.startswith("/"):
        return None
    head = text.split(maxsplit=1)[0]
    return head[1:].split("@", maxsplit=1)[0].lower()


CHAT_MENU_BUTTON: dict[str, object] = {"type": "commands"}

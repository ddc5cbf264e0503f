"""Pydantic models for the parts of a Telegram update the bot reads."""

from pydantic import BaseModel, Field


class TelegramUser(BaseModel):
    id: int
    username: str | None = None


class TelegramChat(BaseModel):
    id: int
    type: str | None = None


class TelegramPhotoSize(BaseModel):
    """One resolution of a photo sent to the bot."""

    file_id: str
    width: int
    height: int

    @property
    def area(self) -> int:
        return self.width * self.height


class TelegramMessage(BaseModel):
    """An organizer message: either text or a photo in several sizes."""

    message_id: int
    chat: TelegramChat
    from_user: TelegramUser = Field(alias="from")
    text: str | None = None
    photo: list[TelegramPhotoSize] = Field(default_factory=list)

    @property
    def organizer_id(self) -> str:
        return str(self.from_user.id)

    def largest_photo(self) -> TelegramPhotoSize | None:
        """Return the highest resolution size, if the message carries a photo."""
        if not self.photo:
            return None
        return max(self.photo, key=lambda size: size.area)


class TelegramUpdate(BaseModel):
    """Webhook update. Anything other than a new message is ignored."""

    update_id: int
    message: TelegramMessage | None = None

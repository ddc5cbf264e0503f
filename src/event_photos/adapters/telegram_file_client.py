"""Telegram file link resolution."""

from dataclasses import dataclass
from typing import Protocol

import httpx


class TelegramFileClient(Protocol):
    """Interface for resolving Telegram files."""

    async def get_file_url(self, file_id: str) -> str:
        """Return a download URL for a Telegram file."""


@dataclass
class HttpxTelegramFileClient(TelegramFileClient):
    """Telegram file client using httpx."""

    bot_token: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, bot_token: str) -> "HttpxTelegramFileClient":
        """Create a Telegram file client with a managed httpx session."""
        return cls(bot_token=bot_token, http_client=httpx.AsyncClient())

    async def get_file_url(self, file_id: str) -> str:
        """Resolve a file id to its download URL via getFile."""
        response = await self.http_client.get(
            f"https://api.telegram.org/bot{self.bot_token}/getFile",
            params={"file_id": file_id},
            timeout=10,
        )
        response.raise_for_status()
        payload = response.json()
        if not payload.get("ok"):
            raise RuntimeError("Telegram getFile failed")
        file_path = payload["result"]["file_path"]
        return f"https://api.telegram.org/file/bot{self.bot_token}/{file_path}"

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

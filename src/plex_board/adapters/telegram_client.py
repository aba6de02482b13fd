"""Telegram API client adapter."""

from dataclasses import dataclass
from typing import Protocol

import httpx

_NOT_MODIFIED = "message is not modified"


class TelegramClient(Protocol):
    """Interface for Telegram API interactions."""

    async def send_message(
        self, chat_id: int, text: str, parse_mode: str | None = None
    ) -> int:
        """Send a text message and return its message id."""

    async def edit_message_text(
        self, chat_id: int, message_id: int, text: str, parse_mode: str | None = None
    ) -> None:
        """Replace the text of an existing message."""

    async def delete_message(self, chat_id: int, message_id: int) -> None:
        """Delete a message."""

    async def set_my_commands(self, commands: list[dict[str, str]]) -> None:
        """Set the bot command list."""

    async def set_chat_menu_button(
        self, menu_button: dict[str, object] | None = None
    ) -> None:
        """Set the chat menu button."""


@dataclass
class HttpxTelegramClient:
    """Telegram client implemented with httpx."""

    bot_token: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, bot_token: str) -> "HttpxTelegramClient":
        """Create a Telegram client with a managed httpx session."""
        return cls(bot_token=bot_token, http_client=httpx.AsyncClient())

    def _url(self, method: str) -> str:
        return f"https://api.telegram.org/bot{self.bot_token}/{method}"

    async def send_message(
        self, chat_id: int, text: str, parse_mode: str | None = None
    ) -> int:
        """Send a message using Telegram's sendMessage API."""
        payload: dict[str, object] = {
            "chat_id": chat_id,
            "text": text,
            "disable_web_page_preview": False,
        }
        if parse_mode is not None:
            payload["parse_mode"] = parse_mode
        response = await self.http_client.post(
            self._url("sendMessage"), json=payload, timeout=10
        )
        response.raise_for_status()
        return int(response.json()["result"]["message_id"])

    async def edit_message_text(
        self, chat_id: int, message_id: int, text: str, parse_mode: str | None = None
    ) -> None:
        """Edit a message in place. Unchanged content is not an error."""
        payload: dict[str, object] = {
            "chat_id": chat_id,
            "message_id": message_id,
            "text": text,
        }
        if parse_mode is not None:
            payload["parse_mode"] = parse_mode
        response = await self.http_client.post(
            self._url("editMessageText"), json=payload, timeout=10
        )
        if response.status_code == httpx.codes.BAD_REQUEST and _NOT_MODIFIED in (
            response.text.lower()
        ):
            return
        response.raise_for_status()

    async def delete_message(self, chat_id: int, message_id: int) -> None:
        """Delete a message using Telegram's deleteMessage API."""
        payload: dict[str, object] = {"chat_id": chat_id, "message_id": message_id}
        response = await self.http_client.post(
            self._url("deleteMessage"), json=payload, timeout=10
        )
        response.raise_for_status()

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()

    async def set_my_commands(self, commands: list[dict[str, str]]) -> None:
        """Set the bot command list."""
        payload: dict[str, object] = {"commands": commands}
        response = await self.http_client.post(
            self._url("setMyCommands"), json=payload, timeout=10
        )
        response.raise_for_status()

    async def set_chat_menu_button(
        self, menu_button: dict[str, object] | None = None
    ) -> None:
        """Set the chat menu button."""
        payload: dict[str, object] = {
            "menu_button": menu_button or {"type": "commands"}
        }
        response = await self.http_client.post(
            self._url("setChatMenuButton"), json=payload, timeout=10
        )
        response.raise_for_status()

"""Create-or-edit decision for the board message."""

import logging
from dataclasses import dataclass

import httpx

from plex_board.adapters.telegram_client import TelegramClient
from plex_board.services.config_store import ConfigStore

BOARD_PARSE_MODE = "HTML"

_logger = logging.getLogger(__name__)


@dataclass
class BoardPublisher:
    """Write the rendered board to Telegram."""

    telegram_client: TelegramClient
    config_store: ConfigStore

    async def publish(
        self, chat_id: int, content: str, existing_message_id: int | None
    ) -> int | None:
        """Edit the existing board or create a new one.

        A failed edit keeps the stored message id so the next tick retries
        the same message. Errors are logged, never raised.
        """
        if existing_message_id is not None:
            try:
                await self.telegram_client.edit_message_text(
                    chat_id, existing_message_id, content, parse_mode=BOARD_PARSE_MODE
                )
            except httpx.HTTPError as exc:
                _logger.error(
                    "Failed to update board message %s: %s", existing_message_id, exc
                )
            else:
                _logger.debug("Updated board message %s", existing_message_id)
            return existing_message_id

        try:
            message_id = await self.telegram_client.send_message(
                chat_id, content, parse_mode=BOARD_PARSE_MODE
            )
        except (httpx.HTTPError, KeyError, ValueError) as exc:
            _logger.error("Failed to create board message in chat %s: %s", chat_id, exc)
            return None
        await self.config_store.set_board_message(chat_id, message_id)
        _logger.info("Created board message %s in chat %s", message_id, chat_id)
        return message_id

"""Board commands exposed to the chat layer."""

import logging
from dataclasses import dataclass

import httpx

from plex_board.adapters.telegram_client import TelegramClient
from plex_board.services.config_store import ConfigStore
from plex_board.services.session_source import SessionSource
from plex_board.telegram_commands import BotCommand

_logger = logging.getLogger(__name__)


@dataclass
class BoardCommandService:
    """Operations the chat command surface can invoke."""

    config_store: ConfigStore
    sources: list[SessionSource]
    telegram_client: TelegramClient

    async def set_destination_channel(self, chat_id: int) -> None:
        """Move the board to ``chat_id`` and publish a fresh message there."""
        await self.config_store.set_board_chat(chat_id)
        await self.trigger_immediate_refresh()

    async def trigger_immediate_refresh(self) -> None:
        """Poll every source now."""
        _logger.debug("Triggering updates for %s source(s)", len(self.sources))
        for source in self.sources:
            await source.trigger_update()

    async def clear_board(self) -> bool:
        """Delete the board message and forget the board.

        Returns True if a message existed and was removed. Stored state is
        cleared even when the delete call fails.
        """
        previous = await self.config_store.clear_board()
        if previous.board_chat_id is None or previous.board_message_id is None:
            return False
        try:
            await self.telegram_client.delete_message(
                previous.board_chat_id, previous.board_message_id
            )
        except httpx.HTTPError as exc:
            _logger.error("Failed to delete board message: %s", exc)
            return False
        return True


@dataclass
class BoardCommandHandler:
    """Handle board slash commands and reply in the invoking chat."""

    service: BoardCommandService
    telegram_client: TelegramClient

    async def handle(self, command: BotCommand, chat_id: int) -> None:
        """Run ``command`` for ``chat_id`` and send a short confirmation."""
        if command is BotCommand.BOARD:
            await self.service.set_destination_channel(chat_id)
            reply = "Session board will now be displayed in this chat."
        elif command is BotCommand.REFRESH:
            await self.service.trigger_immediate_refresh()
            reply = "Session board refreshed."
        elif command is BotCommand.CLEAR:
            config = await self.service.config_store.get()
            had_board = config.board_message_id is not None
            removed = await self.service.clear_board()
            if removed:
                reply = "Session board cleared."
            elif had_board:
                reply = "Failed to delete message, but cleared config."
            else:
                reply = "No session board message to clear."
        else:
            reply = BotCommand.help_text()
        await self.telegram_client.send_message(chat_id=chat_id, text=reply)

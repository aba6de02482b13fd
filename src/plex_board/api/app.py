"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from plex_board.api.telegram_models import TelegramMessage, TelegramUpdate
from plex_board.app_logging import configure_logging
from plex_board.config import parse_allowed_user_ids
from plex_board.containers import AppContainer
from plex_board.telegram_commands import (
    CHAT_MENU_BUTTON,
    BotCommand,
    telegram_commands,
)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)
    allowed_user_ids = parse_allowed_user_ids(
        container.settings.telegram_allowed_user_ids
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        try:
            await state_container.telegram_client.set_my_commands(telegram_commands())
            await state_container.telegram_client.set_chat_menu_button(
                CHAT_MENU_BUTTON
            )
        except Exception:
            logger.exception("Failed to sync Telegram bot commands")
        await state_container.runtime.start()
        try:
            yield
        finally:
            await state_container.runtime.stop()
            await state_container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/board")
    async def board(request: Request) -> dict[str, object]:
        """Return the aggregated sessions and server names."""
        state_container: AppContainer = request.app.state.container
        sessions, server_names = state_container.aggregator.snapshot()
        return {
            "servers": server_names,
            "sessions": [
                session.model_dump(include=_PUBLIC_SESSION_FIELDS)
                for session in sessions
            ],
        }

    @app.post("/telegram/webhook")
    async def telegram_webhook(
        update: TelegramUpdate, request: Request
    ) -> dict[str, str]:
        """Handle Telegram webhook updates."""
        state_container: AppContainer = request.app.state.container
        message = update.effective_message
        if message is None:
            return {"status": "ignored"}
        command = BotCommand.parse(message.text)
        if command is None:
            return {"status": "ignored"}
        if not _is_sender_allowed(message, allowed_user_ids):
            if message.from_user is not None:
                await state_container.telegram_client.send_message(
                    chat_id=message.chat.id,
                    text="This bot is private.",
                )
            return {"status": "ok"}
        logger.debug("Received /%s in chat %s", command.value.command, message.chat.id)
        await state_container.command_handler.handle(command, message.chat.id)
        return {"status": "ok"}

    return app


_PUBLIC_SESSION_FIELDS = {
    "title",
    "media_type",
    "year",
    "duration",
    "view_offset",
    "grandparent_title",
    "parent_title",
    "parent_index",
    "index",
    "art_url",
    "server_name",
}


def _is_sender_allowed(
    message: TelegramMessage, allowed_user_ids: set[int] | None
) -> bool:
    if allowed_user_ids is None:
        return True
    if message.from_user is None:
        return False
    return message.from_user.id in allowed_user_ids

"""Telegram bot command configuration."""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class TelegramCommand:
    """Declarative bot command definition."""

    command: str
    description: str


class BotCommand(Enum):
    """Enum of bot commands (single source of truth)."""

    BOARD = TelegramCommand("board", "Show the Plex session board in this chat")
    REFRESH = TelegramCommand("refresh", "Manually refresh the session board")
    CLEAR = TelegramCommand("clear", "Remove the session board message")
    HELP = TelegramCommand("help", "List available commands")

    @classmethod
    def parse(cls, text: str | None) -> "BotCommand | None":
        """Return the command in ``text`` such as ``/board@my_bot``."""
        if not text or not text.startswith("/"):
            return None
        parts = text[1:].split(maxsplit=1)
        if not parts:
            return None
        name = parts[0].split("@", 1)[0].lower()
        for entry in cls:
            if entry.value.command == name:
                return entry
        return None

    @classmethod
    def help_text(cls) -> str:
        return "\n".join(
            f"/{entry.value.command} - {entry.value.description}" for entry in cls
        )


def telegram_commands() -> list[dict[str, str]]:
    """Return commands formatted for Telegram API."""
    return [
        {"command": entry.value.command, "description": entry.value.description}
        for entry in BotCommand
    ]


CHAT_MENU_BUTTON: dict[str, object] = {"type": "commands"}

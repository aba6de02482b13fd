"""Persisted board configuration with serialized read-modify-write."""

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import ValidationError

from plex_board.domain.board import BoardConfig, PlexServerConfig

_logger = logging.getLogger(__name__)


@dataclass
class ConfigStore:
    """Owns the on-disk configuration.

    Every mutation runs under one lock and rewrites the file before the
    lock is released, so readers always see a value that is on disk.
    """

    path: Path
    _config: BoardConfig = field(default_factory=BoardConfig)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    @classmethod
    def load(cls, path: str | Path) -> "ConfigStore":
        """Load the configuration file, falling back to defaults."""
        resolved = Path(path)
        try:
            raw = resolved.read_text(encoding="utf-8")
        except FileNotFoundError:
            _logger.info("No config at %s, starting fresh", resolved)
            return cls(path=resolved)
        try:
            config = BoardConfig.model_validate_json(raw)
        except ValidationError as exc:
            _logger.warning("Ignoring unreadable config at %s: %s", resolved, exc)
            return cls(path=resolved)
        return cls(path=resolved, _config=config)

    @property
    def servers(self) -> list[PlexServerConfig]:
        """Snapshot of the stored servers, for startup wiring."""
        return list(self._config.plex_servers)

    async def get(self) -> BoardConfig:
        """Return a copy of the current configuration."""
        async with self._lock:
            return self._config.model_copy(deep=True)

    async def set_board_chat(self, chat_id: int) -> None:
        """Point the board at a new chat; any previous message is forgotten."""
        async with self._lock:
            self._config.board_chat_id = chat_id
            self._config.board_message_id = None
            self._save()

    async def set_board_message(self, chat_id: int, message_id: int) -> bool:
        """Record the board message for ``chat_id``.

        Ignored (returns False) when the board moved to another chat while
        the message was being created.
        """
        async with self._lock:
            if self._config.board_chat_id != chat_id:
                _logger.info(
                    "Board moved away from chat %s, not storing message %s",
                    chat_id,
                    message_id,
                )
                return False
            self._config.board_message_id = message_id
            self._save()
            return True

    async def clear_board(self) -> BoardConfig:
        """Forget the board chat and message; return the previous values."""
        async with self._lock:
            previous = self._config.model_copy(deep=True)
            self._config.board_chat_id = None
            self._config.board_message_id = None
            self._save()
            return previous

    async def set_servers(self, servers: list[PlexServerConfig]) -> None:
        """Replace the monitored server list."""
        async with self._lock:
            self._config.plex_servers = list(servers)
            self._save()

    async def get_servers(self) -> list[PlexServerConfig]:
        async with self._lock:
            return list(self._config.plex_servers)

    def _save(self) -> None:
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(
                self._config.model_dump_json(indent=2), encoding="utf-8"
            )
            tmp_path.replace(self.path)
        except OSError:
            _logger.exception("Failed to save config to %s", self.path)

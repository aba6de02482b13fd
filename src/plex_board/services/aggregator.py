"""Fan-in of source notifications into coalesced board refreshes."""

import asyncio
import logging
from dataclasses import dataclass, field

from plex_board.domain.sessions import Session
from plex_board.services.broadcast import DEFAULT_CAPACITY, Broadcast, Subscription
from plex_board.services.cancellation import ShutdownRequested, race
from plex_board.services.config_store import ConfigStore
from plex_board.services.publisher import BoardPublisher
from plex_board.services.render import render_board
from plex_board.services.session_source import SessionSource

_logger = logging.getLogger(__name__)


@dataclass(eq=False)
class UpdateAggregator:
    """Re-render the board whenever any source reports a change.

    Notifications carry no payload. Each tick re-reads every source, so a
    dropped intermediate notification only delays, never loses, an update.
    """

    sources: list[SessionSource]
    config_store: ConfigStore
    publisher: BoardPublisher
    capacity: int = DEFAULT_CAPACITY
    ticks: int = 0
    _channel: Broadcast = field(init=False)
    _inbox: Subscription = field(init=False)
    _source_subscriptions: list[Subscription] = field(init=False)

    def __post_init__(self) -> None:
        self._channel = Broadcast(capacity=self.capacity)
        self._inbox = self._channel.subscribe()
        self._source_subscriptions = [source.subscribe() for source in self.sources]

    def snapshot(self) -> tuple[list[Session], list[str]]:
        """Return every source's sessions, in registration order, and names."""
        sessions: list[Session] = []
        server_names: list[str] = []
        for source in self.sources:
            sessions.extend(source.get_sessions())
            server_names.append(source.server_name)
        return sessions, server_names

    async def tick(self) -> int | None:
        """Render and publish once; skipped when no chat is configured."""
        config = await self.config_store.get()
        if config.board_chat_id is None:
            _logger.debug("No board chat configured, skipping update")
            return None
        sessions, server_names = self.snapshot()
        _logger.debug(
            "Collected %s session(s) from %s server(s)",
            len(sessions),
            len(server_names),
        )
        content = render_board(sessions, server_names)
        return await self.publisher.publish(
            config.board_chat_id, content, config.board_message_id
        )

    async def run(self, cancel: asyncio.Event) -> None:
        """Forward source notifications and tick until ``cancel`` is set."""
        forwarders = [
            asyncio.create_task(self._forward(index, subscription, cancel))
            for index, subscription in enumerate(self._source_subscriptions)
        ]
        _logger.debug("Update loop ready with %s source(s)", len(forwarders))
        try:
            while True:
                lagged = await race(self._inbox.recv(), cancel)
                if lagged:
                    _logger.warning("Update loop lagged by %s notification(s)", lagged)
                self.ticks += 1
                try:
                    await race(self.tick(), cancel)
                except ShutdownRequested:
                    raise
                except Exception:
                    _logger.exception("Board update failed")
        except ShutdownRequested:
            _logger.info("Update loop shutting down")
        finally:
            if not cancel.is_set():
                for forwarder in forwarders:
                    forwarder.cancel()
            await asyncio.gather(*forwarders, return_exceptions=True)

    async def _forward(
        self, index: int, subscription: Subscription, cancel: asyncio.Event
    ) -> None:
        try:
            while True:
                lagged = await race(subscription.recv(), cancel)
                if lagged:
                    _logger.warning("Forwarder %s lagged by %s notification(s)", index, lagged)
                self._channel.send()
        except ShutdownRequested:
            _logger.debug("Update forwarder %s shutting down", index)
        finally:
            subscription.close()

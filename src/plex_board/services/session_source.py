"""Live session tracking for one Plex server."""

import asyncio
import logging
from contextlib import aclosing
from dataclasses import dataclass, field

import httpx

from plex_board.adapters.plex_server_client import PlexServerClient
from plex_board.domain.board import PlexServerConfig
from plex_board.domain.sessions import Session, SourceState
from plex_board.services.artwork import ArtworkService
from plex_board.services.broadcast import Broadcast, Subscription
from plex_board.services.cancellation import ShutdownRequested, race, sleep_or_cancel
from plex_board.services.resolver import ConnectionResolver

DEFAULT_SERVER_NAME = "Plex"

_logger = logging.getLogger(__name__)


@dataclass(eq=False)
class SessionSource:
    """Owns one server connection and its latest session snapshot.

    The push stream is only a wake-up signal: every event triggers a full
    poll of ``/status/sessions`` and event payloads are never parsed.
    """

    config: PlexServerConfig
    server_client: PlexServerClient
    resolver: ConnectionResolver
    artwork_service: ArtworkService
    notifications: Broadcast = field(default_factory=Broadcast)
    reconnect_delay_seconds: float = 10.0
    retry_delay_seconds: float = 5.0
    idle_timeout_seconds: float = 90.0
    server_name: str = DEFAULT_SERVER_NAME
    state: SourceState = SourceState.DISCONNECTED
    active_url: str | None = None
    _sessions: list[Session] = field(default_factory=list)

    @property
    def server_id(self) -> str:
        return self.config.server_id

    def subscribe(self) -> Subscription:
        """Subscribe to "sessions changed" notifications."""
        return self.notifications.subscribe()

    def get_sessions(self) -> list[Session]:
        """Return the latest published snapshot."""
        return list(self._sessions)

    async def find_working_url(self) -> str | None:
        """Resolve a reachable URL and remember it as the active one."""
        url = await self.resolver.resolve(
            self.config.server_id, self.config.token, self.active_url
        )
        self.active_url = url
        return url

    async def fetch_server_identity(self) -> None:
        """Resolve the server and load its display name."""
        base_url = await self.find_working_url()
        if base_url is None:
            return
        try:
            self.server_name = await self.server_client.get_identity(base_url)
        except (httpx.HTTPError, ValueError) as exc:
            _logger.warning("Failed to fetch server identity for %s: %s", base_url, exc)
            return
        _logger.info("Connected to Plex server: %s", self.server_name)

    async def poll_and_publish(self) -> bool:
        """Fetch, enrich and publish the current sessions.

        Returns False when the cycle was skipped because of a missing
        endpoint or a failed request.
        """
        base_url = self.active_url
        if base_url is None:
            _logger.warning("No active URL for %s, skipping poll", self.server_name)
            return False
        # ValueError covers undecodable bodies and pydantic validation errors.
        try:
            sessions = await self.server_client.get_sessions(base_url)
        except (httpx.HTTPError, ValueError) as exc:
            _logger.error("Failed to fetch sessions from %s: %s", self.server_name, exc)
            return False

        enriched: list[Session] = []
        for session in sessions:
            stamped = session.model_copy(update={"server_name": self.server_name})
            art_url = await self.artwork_service.artwork_for(stamped, base_url)
            enriched.append(stamped.model_copy(update={"art_url": art_url}))
        self._sessions = enriched
        _logger.debug("Published %s session(s) for %s", len(enriched), self.server_name)
        self.notifications.send()
        return True

    async def trigger_update(self) -> None:
        """Run an out-of-band poll, e.g. from a chat command."""
        _logger.debug("Manual update triggered for %s", self.server_name)
        await self.poll_and_publish()

    async def run(self, cancel: asyncio.Event) -> None:
        """Poll once, then keep an event stream open until ``cancel`` is set."""
        _logger.info("Starting session source for %s", self.server_name)
        try:
            await race(self.poll_and_publish(), cancel)
            while not cancel.is_set():
                self.state = SourceState.CONNECTING
                base_url = await race(self.find_working_url(), cancel)
                if base_url is None:
                    self.state = SourceState.DISCONNECTED
                    _logger.warning(
                        "No working URL for %s, retrying in %ss",
                        self.server_name,
                        self.reconnect_delay_seconds,
                    )
                    if await sleep_or_cancel(self.reconnect_delay_seconds, cancel):
                        break
                    continue

                await race(self._stream(base_url), cancel)

                self.active_url = None
                self.state = SourceState.DISCONNECTED
                _logger.warning(
                    "Event stream for %s closed, reconnecting in %ss",
                    self.server_name,
                    self.retry_delay_seconds,
                )
                if await sleep_or_cancel(self.retry_delay_seconds, cancel):
                    break
        except ShutdownRequested:
            pass
        finally:
            self.state = SourceState.DISCONNECTED
            _logger.info("Session source for %s stopped", self.server_name)

    async def _stream(self, base_url: str) -> None:
        """Consume the event stream until it errors, ends or goes idle."""
        loop = asyncio.get_running_loop()
        try:
            async with (
                asyncio.timeout(self.idle_timeout_seconds) as deadline,
                aclosing(self.server_client.events(base_url)) as events,
            ):
                async for event in events:
                    deadline.reschedule(loop.time() + self.idle_timeout_seconds)
                    if event.opened:
                        self.state = SourceState.STREAMING
                        _logger.info("Connected to event stream of %s", self.server_name)
                        continue
                    _logger.debug("Event from %s: %s", self.server_name, event.event)
                    # The idle deadline covers only the wait for the next event.
                    deadline.reschedule(None)
                    await self.poll_and_publish()
                    deadline.reschedule(loop.time() + self.idle_timeout_seconds)
            _logger.debug("Event stream for %s ended", self.server_name)
        except TimeoutError:
            self.state = SourceState.ERROR
            _logger.warning("No events from %s, connection timed out", self.server_name)
        except httpx.HTTPError as exc:
            self.state = SourceState.ERROR
            _logger.warning("Event stream error for %s: %s", self.server_name, exc)

"""Shared test fixtures."""

import asyncio
from collections.abc import AsyncGenerator, Callable
from dataclasses import dataclass, field
from pathlib import Path

import httpx
import pytest

from plex_board.adapters.plex_server_client import PlexServerClient, ServerEvent
from plex_board.adapters.plex_tv_client import PlexTvClient
from plex_board.adapters.telegram_client import TelegramClient
from plex_board.adapters.tmdb_client import TmdbClient
from plex_board.config import Settings
from plex_board.containers import AppContainer
from plex_board.domain.board import PlexServerConfig
from plex_board.domain.plex import PinResponse, PlexConnection, PlexResource
from plex_board.domain.sessions import GuidTag, Session
from plex_board.services.aggregator import UpdateAggregator
from plex_board.services.artwork import ArtworkService
from plex_board.services.cache import InMemoryArtworkCache
from plex_board.services.commands import BoardCommandHandler, BoardCommandService
from plex_board.services.config_store import ConfigStore
from plex_board.services.publisher import BoardPublisher
from plex_board.services.resolver import ConnectionResolver
from plex_board.services.runtime import BoardRuntime
from plex_board.services.session_source import SessionSource

REMOTE_URL = "https://1-2-3-4.abc.plex.direct:32400"
LOCAL_URL = "http://192.168.1.10:32400"


def make_session(**overrides: object) -> Session:
    """Build a session from a Plex-shaped payload."""
    payload: dict[str, object] = {
        "title": "Pilot",
        "type": "episode",
        "grandparentTitle": "Foo",
        "parentIndex": 1,
        "index": 2,
        "viewOffset": 300,
        "duration": 1200,
        "User": {"title": "alice"},
        "Player": {"state": "playing"},
        "Guid": [{"id": "tmdb://42"}],
        "key": "/library/metadata/10",
        "grandparentKey": "/library/metadata/1",
    }
    payload.update(overrides)
    return Session.model_validate(payload)


@dataclass
class FakeTelegramClient(TelegramClient):
    """Fake Telegram client that records messages."""

    messages: list[tuple[int, str]] = field(default_factory=list)
    edits: list[tuple[int, int, str]] = field(default_factory=list)
    deleted: list[tuple[int, int]] = field(default_factory=list)
    commands: list[dict[str, str]] | None = None
    menu_button: dict[str, object] | None = None
    fail_send: bool = False
    fail_edit: bool = False
    fail_delete: bool = False
    next_message_id: int = 100

    async def send_message(
        self, chat_id: int, text: str, parse_mode: str | None = None
    ) -> int:
        if self.fail_send:
            raise httpx.ConnectError("telegram down")
        self.messages.append((chat_id, text))
        self.next_message_id += 1
        return self.next_message_id

    async def edit_message_text(
        self, chat_id: int, message_id: int, text: str, parse_mode: str | None = None
    ) -> None:
        if self.fail_edit:
            raise httpx.ConnectError("telegram down")
        self.edits.append((chat_id, message_id, text))

    async def delete_message(self, chat_id: int, message_id: int) -> None:
        if self.fail_delete:
            raise httpx.ConnectError("telegram down")
        self.deleted.append((chat_id, message_id))

    async def set_my_commands(self, commands: list[dict[str, str]]) -> None:
        self.commands = commands

    async def set_chat_menu_button(
        self, menu_button: dict[str, object] | None = None
    ) -> None:
        self.menu_button = menu_button

    @property
    def writes(self) -> int:
        return len(self.messages) + len(self.edits)


@dataclass
class FakePlexServerClient(PlexServerClient):
    """In-memory Plex server with configurable reachability and events."""

    reachable: set[str] = field(default_factory=lambda: {REMOTE_URL})
    sessions: list[Session] = field(default_factory=list)
    metadata: dict[str, list[GuidTag]] = field(default_factory=dict)
    friendly_name: str = "Home"
    event_count: int = 0
    stream_error: bool = False
    fail_sessions: bool = False
    probes: list[str] = field(default_factory=list)
    session_calls: int = 0
    metadata_calls: list[str] = field(default_factory=list)
    streams_opened: int = 0
    streams_finished: int = 0

    async def probe(self, base_url: str) -> bool:
        self.probes.append(base_url)
        if base_url not in self.reachable:
            raise httpx.ConnectError(f"{base_url} unreachable")
        return True

    async def get_identity(self, base_url: str) -> str:
        return self.friendly_name

    async def get_sessions(self, base_url: str) -> list[Session]:
        self.session_calls += 1
        if self.fail_sessions:
            raise httpx.ConnectError("sessions failed")
        return [session.model_copy() for session in self.sessions]

    async def get_metadata_guids(self, base_url: str, key: str) -> list[GuidTag]:
        self.metadata_calls.append(key)
        return self.metadata.get(key, [])

    async def events(self, base_url: str) -> AsyncGenerator[ServerEvent, None]:
        self.streams_opened += 1
        try:
            if self.stream_error:
                raise httpx.ReadError("stream broke")
            yield ServerEvent(event="open", data="", opened=True)
            for number in range(self.event_count):
                yield ServerEvent(event="playing", data=f'{{"n": {number}}}')
        finally:
            self.streams_finished += 1


@dataclass
class FakePlexTvClient(PlexTvClient):
    """Fake plex.tv account API."""

    resources: list[PlexResource] = field(default_factory=list)
    pin_tokens: list[str | None] = field(default_factory=list)
    fail_discovery: bool = False
    discovery_calls: int = 0

    async def request_pin(self) -> PinResponse:
        return PinResponse(id=7, code="abcd")

    async def check_pin(self, pin_id: int) -> str | None:
        if not self.pin_tokens:
            return None
        return self.pin_tokens.pop(0)

    async def list_servers(self, token: str) -> list[PlexResource]:
        self.discovery_calls += 1
        if self.fail_discovery:
            raise httpx.ConnectError("plex.tv down")
        return self.resources

    def build_auth_url(self, code: str) -> str:
        return f"https://app.plex.tv/auth#?code={code}"


@dataclass
class FakeTmdbClient(TmdbClient):
    """Fake TMDB client with canned image payloads."""

    payload: dict[str, object] = field(
        default_factory=lambda: {
            "posters": [{"file_path": "/poster.jpg"}],
            "backdrops": [{"file_path": "/backdrop.jpg"}],
        }
    )
    fail: bool = False
    calls: list[tuple[str, str]] = field(default_factory=list)

    async def get_images(self, media_path: str, tmdb_id: str) -> dict[str, object]:
        self.calls.append((media_path, tmdb_id))
        if self.fail:
            raise httpx.ConnectError("tmdb down")
        return self.payload


def make_resource(
    server_id: str = "server-1",
    connections: list[tuple[str, bool]] | None = None,
    name: str = "Home",
) -> PlexResource:
    pairs = connections or [(LOCAL_URL, True), (REMOTE_URL, False)]
    return PlexResource(
        name=name,
        client_identifier=server_id,
        connections=[PlexConnection(uri=uri, local=local) for uri, local in pairs],
        access_token="server-token",
        provides="server",
    )


def make_source(
    server_client: FakePlexServerClient,
    plex_tv_client: FakePlexTvClient | None = None,
    tmdb_client: FakeTmdbClient | None = None,
    server_id: str = "server-1",
    **overrides: object,
) -> SessionSource:
    tv_client = plex_tv_client or FakePlexTvClient(
        resources=[make_resource(server_id)]
    )
    return SessionSource(
        config=PlexServerConfig(server_id=server_id, token="token"),
        server_client=server_client,
        resolver=ConnectionResolver(tv_client, server_client),
        artwork_service=ArtworkService(
            tmdb_client=tmdb_client or FakeTmdbClient(),
            server_client=server_client,
            cache=InMemoryArtworkCache(),
        ),
        **overrides,
    )


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Yield to the event loop until ``predicate`` holds."""
    async with asyncio.timeout(timeout):
        while not predicate():
            await asyncio.sleep(0.005)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        telegram_bot_token="test-token",
        config_path=str(tmp_path / "config.json"),
    )


@pytest.fixture
def config_store(tmp_path: Path) -> ConfigStore:
    return ConfigStore.load(tmp_path / "config.json")


@pytest.fixture
def telegram_client() -> FakeTelegramClient:
    return FakeTelegramClient()


@pytest.fixture
def server_client() -> FakePlexServerClient:
    return FakePlexServerClient(sessions=[make_session()])


@pytest.fixture
def container(
    settings: Settings,
    config_store: ConfigStore,
    telegram_client: FakeTelegramClient,
    server_client: FakePlexServerClient,
) -> AppContainer:
    source = make_source(server_client)
    source.active_url = REMOTE_URL
    publisher = BoardPublisher(telegram_client=telegram_client, config_store=config_store)
    aggregator = UpdateAggregator(
        sources=[source], config_store=config_store, publisher=publisher
    )
    command_service = BoardCommandService(
        config_store=config_store, sources=[source], telegram_client=telegram_client
    )
    command_handler = BoardCommandHandler(
        service=command_service, telegram_client=telegram_client
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        telegram_client=telegram_client,
        config_store=config_store,
        sources=[source],
        aggregator=aggregator,
        command_service=command_service,
        command_handler=command_handler,
        runtime=BoardRuntime(sources=[source], aggregator=aggregator),
        close_resources=close_resources,
    )

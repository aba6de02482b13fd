"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from plex_board.adapters.plex_server_client import HttpxPlexServerClient
from plex_board.adapters.plex_tv_client import HttpxPlexTvClient
from plex_board.adapters.telegram_client import (
    HttpxTelegramClient,
    TelegramClient,
)
from plex_board.adapters.tmdb_client import HttpxTmdbClient
from plex_board.config import Settings
from plex_board.services.aggregator import UpdateAggregator
from plex_board.services.artwork import ArtworkService
from plex_board.services.cache import InMemoryArtworkCache
from plex_board.services.commands import BoardCommandHandler, BoardCommandService
from plex_board.services.config_store import ConfigStore
from plex_board.services.publisher import BoardPublisher
from plex_board.services.resolver import ConnectionResolver
from plex_board.services.runtime import BoardRuntime
from plex_board.services.session_source import SessionSource


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    telegram_client: TelegramClient
    config_store: ConfigStore
    sources: list[SessionSource]
    aggregator: UpdateAggregator
    command_service: BoardCommandService
    command_handler: BoardCommandHandler
    runtime: BoardRuntime
    close_resources: Callable[[], Awaitable[None]]


def build_container(
    settings: Settings | None = None, config_store: ConfigStore | None = None
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    store = config_store or ConfigStore.load(resolved_settings.config_path)
    telegram_client = HttpxTelegramClient.create(resolved_settings.telegram_bot_token)
    plex_tv_client = HttpxPlexTvClient.create(
        client_identifier=resolved_settings.plex_client_identifier,
        product=resolved_settings.plex_product,
    )
    tmdb_client = HttpxTmdbClient.create(resolved_settings.tmdb_token)
    artwork_cache = InMemoryArtworkCache()

    server_clients: list[HttpxPlexServerClient] = []
    sources: list[SessionSource] = []
    for server in store.servers:
        server_client = HttpxPlexServerClient.create(
            token=server.token,
            client_identifier=resolved_settings.plex_client_identifier,
        )
        server_clients.append(server_client)
        sources.append(
            SessionSource(
                config=server,
                server_client=server_client,
                resolver=ConnectionResolver(plex_tv_client, server_client),
                artwork_service=ArtworkService(
                    tmdb_client=tmdb_client,
                    server_client=server_client,
                    cache=artwork_cache,
                ),
            )
        )

    publisher = BoardPublisher(telegram_client=telegram_client, config_store=store)
    aggregator = UpdateAggregator(
        sources=sources, config_store=store, publisher=publisher
    )
    command_service = BoardCommandService(
        config_store=store, sources=sources, telegram_client=telegram_client
    )
    command_handler = BoardCommandHandler(
        service=command_service, telegram_client=telegram_client
    )
    runtime = BoardRuntime(sources=sources, aggregator=aggregator)

    async def close_resources() -> None:
        await telegram_client.close()
        await plex_tv_client.close()
        await tmdb_client.close()
        for server_client in server_clients:
            await server_client.close()

    return AppContainer(
        settings=resolved_settings,
        telegram_client=telegram_client,
        config_store=store,
        sources=sources,
        aggregator=aggregator,
        command_service=command_service,
        command_handler=command_handler,
        runtime=runtime,
        close_resources=close_resources,
    )

"""Tests for artwork enrichment."""

import asyncio

import httpx
import pytest

from plex_board.adapters.tmdb_client import HttpxTmdbClient
from plex_board.domain.sessions import GuidTag
from plex_board.services.artwork import TMDB_IMAGE_BASE, ArtworkService
from plex_board.services.cache import InMemoryArtworkCache
from tests.conftest import (
    REMOTE_URL,
    FakePlexServerClient,
    FakeTmdbClient,
    make_session,
)


def _service(
    tmdb: FakeTmdbClient, server: FakePlexServerClient | None = None
) -> ArtworkService:
    return ArtworkService(
        tmdb_client=tmdb,
        server_client=server or FakePlexServerClient(),
        cache=InMemoryArtworkCache(),
    )


def test_embedded_id_uses_poster() -> None:
    tmdb = FakeTmdbClient()
    service = _service(tmdb)

    art = asyncio.run(service.artwork_for(make_session(), REMOTE_URL))

    assert art == f"{TMDB_IMAGE_BASE}/poster.jpg"
    assert tmdb.calls == [("tv", "42")]


def test_backdrop_used_without_posters() -> None:
    tmdb = FakeTmdbClient(payload={"posters": [], "backdrops": [{"file_path": "/b.jpg"}]})
    service = _service(tmdb)

    art = asyncio.run(service.artwork_for(make_session(), REMOTE_URL))

    assert art == f"{TMDB_IMAGE_BASE}/b.jpg"


def test_episode_without_guid_reads_show_metadata() -> None:
    server = FakePlexServerClient(
        metadata={"/library/metadata/1": [GuidTag(id="tmdb://777")]}
    )
    tmdb = FakeTmdbClient()
    service = _service(tmdb, server)

    asyncio.run(service.artwork_for(make_session(Guid=[]), REMOTE_URL))

    assert server.metadata_calls == ["/library/metadata/1"]
    assert tmdb.calls == [("tv", "777")]


def test_movie_without_guid_reads_item_metadata() -> None:
    server = FakePlexServerClient(
        metadata={"/library/metadata/10": [GuidTag(id="tmdb://949")]}
    )
    tmdb = FakeTmdbClient()
    service = _service(tmdb, server)

    asyncio.run(service.artwork_for(make_session(type="movie", Guid=[]), REMOTE_URL))

    assert server.metadata_calls == ["/library/metadata/10"]
    assert tmdb.calls == [("movie", "949")]


def test_tracks_are_not_enriched() -> None:
    tmdb = FakeTmdbClient()
    service = _service(tmdb)

    art = asyncio.run(service.artwork_for(make_session(type="track"), REMOTE_URL))

    assert art is None
    assert tmdb.calls == []


def test_missing_id_leaves_artwork_unset() -> None:
    tmdb = FakeTmdbClient()
    service = _service(tmdb)

    art = asyncio.run(service.artwork_for(make_session(Guid=[]), REMOTE_URL))

    assert art is None
    assert tmdb.calls == []


def test_lookups_are_cached_including_absence() -> None:
    tmdb = FakeTmdbClient(payload={"posters": [], "backdrops": []})
    service = _service(tmdb)

    async def scenario() -> list[str | None]:
        return [
            await service.artwork_for(make_session(), REMOTE_URL),
            await service.artwork_for(make_session(), REMOTE_URL),
        ]

    assert asyncio.run(scenario()) == [None, None]
    assert tmdb.calls == [("tv", "42")]


def test_catalog_failure_degrades_without_caching() -> None:
    tmdb = FakeTmdbClient(fail=True)
    service = _service(tmdb)

    async def scenario() -> list[str | None]:
        first = await service.artwork_for(make_session(), REMOTE_URL)
        tmdb.fail = False
        second = await service.artwork_for(make_session(), REMOTE_URL)
        return [first, second]

    assert asyncio.run(scenario()) == [None, f"{TMDB_IMAGE_BASE}/poster.jpg"]


def _tmdb_answering(body: dict[str, object], calls: list[str]) -> HttpxTmdbClient:
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        return httpx.Response(200, **body)

    return HttpxTmdbClient(
        token="tmdb-token",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


@pytest.mark.parametrize(
    "body",
    [
        {"text": "<html>upstream timeout</html>"},
        {"json": ["not", "an", "object"]},
    ],
)
def test_malformed_tmdb_body_yields_no_artwork_and_is_retried(
    body: dict[str, object],
) -> None:
    calls: list[str] = []
    service = ArtworkService(
        tmdb_client=_tmdb_answering(body, calls),
        server_client=FakePlexServerClient(),
        cache=InMemoryArtworkCache(),
    )

    async def scenario() -> tuple[str | None, str | None]:
        first = await service.artwork_for(make_session(), REMOTE_URL)
        second = await service.artwork_for(make_session(), REMOTE_URL)
        return first, second

    assert asyncio.run(scenario()) == (None, None)
    assert calls == ["/3/tv/42/images", "/3/tv/42/images"]

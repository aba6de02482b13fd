"""Plex Media Server API client."""

from collections.abc import AsyncGenerator
from dataclasses import dataclass
from typing import Protocol

import httpx

from plex_board.domain.sessions import (
    GuidTag,
    IdentityResponse,
    MetadataResponse,
    Session,
    SessionsResponse,
)

EVENT_STREAM_PATH = "/:/eventsource/notifications"


@dataclass(frozen=True)
class ServerEvent:
    """One server-sent event. The payload is never interpreted."""

    event: str
    data: str
    opened: bool = False


class PlexServerClient(Protocol):
    """Interface for requests against a single Plex server."""

    async def probe(self, base_url: str) -> bool:
        """Return True when the server answers at ``base_url``."""

    async def get_identity(self, base_url: str) -> str:
        """Return the server's friendly name."""

    async def get_sessions(self, base_url: str) -> list[Session]:
        """Return the active playback sessions."""

    async def get_metadata_guids(self, base_url: str, key: str) -> list[GuidTag]:
        """Return external identifiers of the item at ``key``."""

    def events(self, base_url: str) -> AsyncGenerator[ServerEvent, None]:
        """Stream playback notifications until the connection ends."""


@dataclass
class HttpxPlexServerClient(PlexServerClient):
    """Plex server client implemented with httpx."""

    token: str
    client_identifier: str
    http_client: httpx.AsyncClient
    stream_client: httpx.AsyncClient

    @classmethod
    def create(cls, token: str, client_identifier: str) -> "HttpxPlexServerClient":
        """Create a client with managed request and streaming sessions."""
        return cls(
            token=token,
            client_identifier=client_identifier,
            http_client=httpx.AsyncClient(
                timeout=10, headers={"User-Agent": client_identifier}
            ),
            stream_client=httpx.AsyncClient(
                timeout=httpx.Timeout(10, read=None),
                headers={"User-Agent": client_identifier},
            ),
        )

    def _headers(self, accept: str = "application/json") -> dict[str, str]:
        return {
            "X-Plex-Token": self.token,
            "X-Plex-Client-Identifier": self.client_identifier,
            "Accept": accept,
        }

    async def probe(self, base_url: str) -> bool:
        """Issue a lightweight authenticated request against ``base_url``.

        Any HTTP response counts as reachable; only transport errors fail.
        """
        await self.http_client.get(f"{base_url}/", headers=self._headers())
        return True

    async def get_identity(self, base_url: str) -> str:
        """Fetch the server's friendly name from the root endpoint."""
        response = await self.http_client.get(f"{base_url}/", headers=self._headers())
        response.raise_for_status()
        identity = IdentityResponse.model_validate(response.json())
        return identity.media_container.friendly_name

    async def get_sessions(self, base_url: str) -> list[Session]:
        """Fetch current sessions from ``/status/sessions``."""
        response = await self.http_client.get(
            f"{base_url}/status/sessions", headers=self._headers()
        )
        response.raise_for_status()
        payload = SessionsResponse.model_validate(response.json())
        return payload.media_container.metadata

    async def get_metadata_guids(self, base_url: str, key: str) -> list[GuidTag]:
        """Fetch the guid list of the first item returned for ``key``."""
        response = await self.http_client.get(
            f"{base_url}{key}", headers=self._headers()
        )
        response.raise_for_status()
        payload = MetadataResponse.model_validate(response.json())
        if not payload.media_container.metadata:
            return []
        return payload.media_container.metadata[0].guids

    async def events(self, base_url: str) -> AsyncGenerator[ServerEvent, None]:
        """Stream server-sent events filtered to playback notifications."""
        async with self.stream_client.stream(
            "GET",
            f"{base_url}{EVENT_STREAM_PATH}",
            params={"filters": "playing"},
            headers=self._headers(accept="text/event-stream"),
        ) as response:
            response.raise_for_status()
            yield ServerEvent(event="open", data="", opened=True)
            event_name = ""
            data_lines: list[str] = []
            async for line in response.aiter_lines():
                if not line:
                    if event_name or data_lines:
                        yield ServerEvent(
                            event=event_name or "message", data="\n".join(data_lines)
                        )
                    event_name = ""
                    data_lines = []
                    continue
                if line.startswith(":"):
                    continue
                field, _, value = line.partition(":")
                value = value.removeprefix(" ")
                if field == "event":
                    event_name = value
                elif field == "data":
                    data_lines.append(value)

    async def close(self) -> None:
        """Close the underlying HTTP sessions."""
        await self.http_client.aclose()
        await self.stream_client.aclose()

"""plex.tv account API client."""

from dataclasses import dataclass
from typing import Protocol
from urllib.parse import quote

import httpx

from plex_board.domain.plex import PinResponse, PlexResource

PLEX_TV_API = "https://plex.tv/api/v2"
PLEX_AUTH_URL = "https://app.plex.tv/auth"


class PlexTvClient(Protocol):
    """Interface for plex.tv pairing and resource discovery."""

    async def request_pin(self) -> PinResponse:
        """Issue a new device pairing pin."""

    async def check_pin(self, pin_id: int) -> str | None:
        """Return the auth token once the pin has been claimed."""

    async def list_servers(self, token: str) -> list[PlexResource]:
        """Return servers registered to the account."""

    def build_auth_url(self, code: str) -> str:
        """Return the browser link that claims a pin."""


@dataclass
class HttpxPlexTvClient(PlexTvClient):
    """plex.tv client implemented with httpx."""

    client_identifier: str
    product: str
    http_client: httpx.AsyncClient
    base_url: str = PLEX_TV_API

    @classmethod
    def create(cls, client_identifier: str, product: str) -> "HttpxPlexTvClient":
        """Create a plex.tv client with a managed httpx session."""
        return cls(
            client_identifier=client_identifier,
            product=product,
            http_client=httpx.AsyncClient(
                timeout=10, headers={"User-Agent": client_identifier}
            ),
        )

    def _headers(self, token: str | None = None) -> dict[str, str]:
        headers = {
            "X-Plex-Client-Identifier": self.client_identifier,
            "X-Plex-Product": self.product,
            "Accept": "application/json",
        }
        if token is not None:
            headers["X-Plex-Token"] = token
        return headers

    async def request_pin(self) -> PinResponse:
        """Request a strong pairing pin."""
        response = await self.http_client.post(
            f"{self.base_url}/pins",
            params={"strong": "true"},
            headers=self._headers(),
        )
        response.raise_for_status()
        return PinResponse.model_validate(response.json())

    async def check_pin(self, pin_id: int) -> str | None:
        """Poll a pin and return its auth token, if claimed."""
        response = await self.http_client.get(
            f"{self.base_url}/pins/{pin_id}", headers=self._headers()
        )
        response.raise_for_status()
        return PinResponse.model_validate(response.json()).auth_token

    async def list_servers(self, token: str) -> list[PlexResource]:
        """List account resources that provide a media server."""
        response = await self.http_client.get(
            f"{self.base_url}/resources",
            params={"includeHttps": "1", "includeRelay": "1"},
            headers=self._headers(token),
        )
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, list):
            raise ValueError(
                f"Unexpected resources payload: {type(payload).__name__}"
            )
        resources = [PlexResource.model_validate(item) for item in payload]
        return [resource for resource in resources if resource.is_server]

    def build_auth_url(self, code: str) -> str:
        """Build the browser link that claims a pin."""
        return (
            f"{PLEX_AUTH_URL}#?clientID={quote(self.client_identifier)}"
            f"&code={quote(code)}"
            f"&context%5Bdevice%5D%5Bproduct%5D={quote(self.product)}"
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

"""TMDB artwork catalog client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

TMDB_API = "https://api.themoviedb.org/3"


class TmdbClient(Protocol):
    """Interface for TMDB image lookups."""

    async def get_images(self, media_path: str, tmdb_id: str) -> dict[str, object]:
        """Return the raw images payload for an item."""


@dataclass
class HttpxTmdbClient(TmdbClient):
    """HTTPX-backed TMDB client."""

    token: str
    http_client: httpx.AsyncClient
    base_url: str = TMDB_API

    @classmethod
    def create(cls, token: str) -> "HttpxTmdbClient":
        """Create a TMDB client with a managed httpx session."""
        return cls(token=token, http_client=httpx.AsyncClient())

    async def get_images(self, media_path: str, tmdb_id: str) -> dict[str, object]:
        """Fetch posters and backdrops for a movie or show."""
        response = await self.http_client.get(
            f"{self.base_url}/{media_path}/{tmdb_id}/images",
            headers={
                "Authorization": f"Bearer {self.token}",
                "Accept": "application/json",
            },
            timeout=10,
        )
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError(
                f"Unexpected TMDB images payload: {type(payload).__name__}"
            )
        return payload

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

"""Reachable-endpoint discovery for Plex servers."""

import logging
from dataclasses import dataclass

import httpx

from plex_board.adapters.plex_server_client import PlexServerClient
from plex_board.adapters.plex_tv_client import PlexTvClient

_logger = logging.getLogger(__name__)


@dataclass
class ConnectionResolver:
    """Find a working URL for a server, preferring the last known good one."""

    plex_tv_client: PlexTvClient
    server_client: PlexServerClient

    async def resolve(
        self, server_id: str, token: str, cached_url: str | None
    ) -> str | None:
        """Return a reachable base URL, or None when the server is unreachable.

        Network failures never propagate; they read as "not found".
        """
        if cached_url is not None:
            if await self._probe(cached_url):
                _logger.debug("Cached URL still working: %s", cached_url)
                return cached_url
            _logger.debug("Cached URL %s failed, rediscovering", cached_url)

        candidates = await self.discover(server_id, token)
        if not candidates:
            _logger.error("No URLs found for server %s", server_id)
            return None

        for url in candidates:
            if url == cached_url:
                continue
            _logger.info("Trying Plex server at %s", url)
            if await self._probe(url):
                _logger.info("Connected to Plex server at %s", url)
                return url
            _logger.warning("Failed to connect to %s", url)
        _logger.error("No working URL for server %s", server_id)
        return None

    async def discover(self, server_id: str, token: str) -> list[str]:
        """Return candidate URLs for ``server_id``, remote before local."""
        try:
            servers = await self.plex_tv_client.list_servers(token)
        except (httpx.HTTPError, ValueError) as exc:
            _logger.warning("Failed to list Plex resources: %s", exc)
            return []
        for server in servers:
            if server.client_identifier == server_id:
                return server.candidate_urls()
        _logger.debug("Server %s not found in resources", server_id)
        return []

    async def _probe(self, url: str) -> bool:
        try:
            return await self.server_client.probe(url)
        except httpx.HTTPError as exc:
            _logger.warning("Connection error for %s: %s", url, exc)
            return False

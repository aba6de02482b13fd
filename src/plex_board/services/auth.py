"""First-run Plex device authentication."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass

import httpx

from plex_board.adapters.plex_tv_client import PlexTvClient
from plex_board.domain.board import PlexServerConfig
from plex_board.domain.errors import PlexAuthError
from plex_board.domain.plex import PlexResource

_RULE = "═" * 60

_logger = logging.getLogger(__name__)


def select_servers(servers: list[PlexResource], answer: str) -> list[PlexResource]:
    """Pick servers by 1-based comma-separated indices; blank means all."""
    cleaned = answer.strip()
    if not cleaned:
        return list(servers)
    selected: list[PlexResource] = []
    for chunk in cleaned.split(","):
        value = chunk.strip()
        if value.isdigit() and 1 <= int(value) <= len(servers):
            server = servers[int(value) - 1]
            if server not in selected:
                selected.append(server)
    return selected


@dataclass
class PlexAuthService:
    """Pair with plex.tv via a pin and pick the servers to monitor."""

    plex_tv_client: PlexTvClient
    poll_interval_seconds: float = 2.0
    timeout_seconds: float = 300.0
    output: Callable[[str], None] = print
    prompt: Callable[[str], str] = input

    async def authenticate(self) -> list[PlexServerConfig]:
        """Run the pairing flow; raise ``PlexAuthError`` if it fails."""
        try:
            pin = await self.plex_tv_client.request_pin()
        except (httpx.HTTPError, ValueError) as exc:
            raise PlexAuthError(f"Could not request a Plex pin: {exc}") from exc

        self.output("")
        self.output(_RULE)
        self.output("  Plex Authentication Required")
        self.output(_RULE)
        self.output("")
        self.output("  Open this link in your browser to sign in:")
        self.output("")
        self.output(f"  {self.plex_tv_client.build_auth_url(pin.code)}")
        self.output("")
        self.output("  Waiting for authentication...")

        token = await self._wait_for_token(pin.id)
        self.output("  ✓ Authentication successful!")

        try:
            servers = await self.plex_tv_client.list_servers(token)
        except (httpx.HTTPError, ValueError) as exc:
            raise PlexAuthError(f"Could not list Plex servers: {exc}") from exc
        if not servers:
            raise PlexAuthError("No Plex servers found on this account")

        for position, server in enumerate(servers, start=1):
            self.output(f"    {position}. {server.name}")
        answer = await asyncio.to_thread(
            self.prompt, "  Select servers to monitor (e.g. 1,3; Enter for all): "
        )
        selected = select_servers(servers, answer)
        if not selected:
            raise PlexAuthError("No servers selected")

        self.output(f"  ✓ Selected {len(selected)} server(s):")
        for server in selected:
            self.output(f"    • {server.name}")
        self.output(_RULE)
        return [
            PlexServerConfig(
                server_id=server.client_identifier,
                token=server.access_token or token,
            )
            for server in selected
        ]

    async def _wait_for_token(self, pin_id: int) -> str:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout_seconds
        while loop.time() < deadline:
            await asyncio.sleep(self.poll_interval_seconds)
            try:
                token = await self.plex_tv_client.check_pin(pin_id)
            except (httpx.HTTPError, ValueError) as exc:
                _logger.debug("Pin check failed: %s", exc)
                continue
            if token:
                return token
        self.output("  Authentication timed out.")
        raise PlexAuthError("Plex authentication timed out")

"""Command line entrypoint."""

import argparse
import asyncio
import logging
import sys

import uvicorn
from pydantic import ValidationError

from plex_board.adapters.plex_tv_client import HttpxPlexTvClient
from plex_board.api.app import create_app
from plex_board.app_logging import configure_logging
from plex_board.config import Settings
from plex_board.containers import build_container
from plex_board.domain.errors import PlexAuthError
from plex_board.services.auth import PlexAuthService
from plex_board.services.config_store import ConfigStore

_logger = logging.getLogger("plex_board.cli")


async def run_auth_flow(settings: Settings, store: ConfigStore) -> None:
    """Pair with plex.tv and persist the selected servers."""
    plex_tv_client = HttpxPlexTvClient.create(
        client_identifier=settings.plex_client_identifier,
        product=settings.plex_product,
    )
    try:
        servers = await PlexAuthService(plex_tv_client).authenticate()
    finally:
        await plex_tv_client.close()
    await store.set_servers(servers)
    _logger.info("Saved %s server(s) to %s", len(servers), store.path)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="plex-board",
        description="Keep a Telegram message in sync with Plex playback.",
    )
    subcommands = parser.add_subparsers(dest="command")
    subcommands.add_parser("serve", help="Run the bot (default)")
    subcommands.add_parser("auth", help="Sign in to Plex and choose servers")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the CLI and return an exit code."""
    args = build_parser().parse_args(argv)
    try:
        settings = Settings()
    except ValidationError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2
    configure_logging(settings.log_level)
    store = ConfigStore.load(settings.config_path)

    if args.command == "auth" or not store.servers:
        try:
            asyncio.run(run_auth_flow(settings, store))
        except (PlexAuthError, EOFError, KeyboardInterrupt) as exc:
            _logger.error("Authentication failed or cancelled: %s", exc)
            return 1
        if args.command == "auth":
            return 0

    app = create_app(build_container(settings, config_store=store))
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""ASGI entrypoint for the plex board API."""

from plex_board.api.app import create_app
from plex_board.containers import build_container

app = create_app(build_container())

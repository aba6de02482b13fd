"""Artwork enrichment backed by TMDB."""

import logging
from dataclasses import dataclass

import httpx

from plex_board.adapters.plex_server_client import PlexServerClient
from plex_board.adapters.tmdb_client import TmdbClient
from plex_board.domain.sessions import Session, find_tmdb_id
from plex_board.services.cache import ArtworkCache

TMDB_IMAGE_BASE = "https://image.tmdb.org/t/p/w500"

_MEDIA_PATHS = {"episode": "tv", "movie": "movie"}

_logger = logging.getLogger(__name__)


@dataclass
class ArtworkService:
    """Resolve poster URLs for sessions with a per-key TTL cache."""

    tmdb_client: TmdbClient
    server_client: PlexServerClient
    cache: ArtworkCache

    async def artwork_for(self, session: Session, base_url: str | None) -> str | None:
        """Return an artwork URL for ``session`` or None.

        Failures degrade to None and never raise.
        """
        media_path = _MEDIA_PATHS.get(session.media_type)
        if media_path is None:
            _logger.debug("No artwork for media type %s", session.media_type)
            return None
        tmdb_id = await self._tmdb_id(session, base_url)
        if tmdb_id is None:
            _logger.debug("No TMDB id found for %s", session.title)
            return None

        key = (media_path, tmdb_id)
        cached = self.cache.lookup(key)
        if cached is not None:
            return cached.art_url

        try:
            payload = await self.tmdb_client.get_images(media_path, tmdb_id)
        except (httpx.HTTPError, ValueError) as exc:
            _logger.warning("TMDB lookup failed for %s/%s: %s", media_path, tmdb_id, exc)
            return None
        art_url = _pick_image(payload)
        self.cache.store(key, art_url)
        return art_url

    async def _tmdb_id(self, session: Session, base_url: str | None) -> str | None:
        embedded = session.tmdb_id()
        if embedded is not None:
            return embedded
        if session.media_type == "episode":
            metadata_key = session.grandparent_key
        else:
            metadata_key = session.key
        if metadata_key is None or base_url is None:
            return None
        try:
            guids = await self.server_client.get_metadata_guids(base_url, metadata_key)
        except (httpx.HTTPError, ValueError) as exc:
            _logger.warning("Metadata lookup failed for %s: %s", metadata_key, exc)
            return None
        return find_tmdb_id(guids)


def _pick_image(payload: dict[str, object]) -> str | None:
    """Pick the first poster, else the first backdrop."""
    for bucket in ("posters", "backdrops"):
        images = payload.get(bucket) or []
        if isinstance(images, list):
            for image in images:
                file_path = image.get("file_path") if isinstance(image, dict) else None
                if file_path:
                    return f"{TMDB_IMAGE_BASE}{file_path}"
    return None

"""Domain models for Plex playback sessions."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

PROGRESS_BAR_WIDTH = 10
TMDB_GUID_PREFIX = "tmdb://"


class SourceState(Enum):
    """Connection state of a session source."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    STREAMING = "streaming"
    ERROR = "error"


class _PlexModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class PlexUser(_PlexModel):
    """User attached to a playback session."""

    title: str


class PlexPlayer(_PlexModel):
    """Player attached to a playback session."""

    state: str


class GuidTag(_PlexModel):
    """External identifier such as ``tmdb://1234``."""

    id: str


class Session(_PlexModel):
    """Snapshot of one playback in progress."""

    title: str
    media_type: str = Field(alias="type")
    year: int | None = None
    duration: int | None = None
    view_offset: int | None = Field(default=None, alias="viewOffset")
    grandparent_title: str | None = Field(default=None, alias="grandparentTitle")
    parent_title: str | None = Field(default=None, alias="parentTitle")
    parent_index: int | None = Field(default=None, alias="parentIndex")
    index: int | None = None
    user: PlexUser | None = Field(default=None, alias="User")
    player: PlexPlayer | None = Field(default=None, alias="Player")
    guids: list[GuidTag] = Field(default_factory=list, alias="Guid")
    key: str | None = None
    grandparent_key: str | None = Field(default=None, alias="grandparentKey")
    art_url: str | None = None
    server_name: str = ""

    @property
    def user_name(self) -> str:
        return self.user.title if self.user else "Unknown User"

    @property
    def player_state(self) -> str:
        return self.player.state if self.player else "unknown"

    def tmdb_id(self) -> str | None:
        """Return the TMDB id embedded in the session guids, if any."""
        return find_tmdb_id(self.guids)


class SessionsContainer(_PlexModel):
    metadata: list[Session] = Field(default_factory=list, alias="Metadata")


class SessionsResponse(_PlexModel):
    """Payload of ``/status/sessions``."""

    media_container: SessionsContainer = Field(alias="MediaContainer")


class ItemMetadata(_PlexModel):
    guids: list[GuidTag] = Field(default_factory=list, alias="Guid")


class MetadataContainer(_PlexModel):
    metadata: list[ItemMetadata] = Field(default_factory=list, alias="Metadata")


class MetadataResponse(_PlexModel):
    """Payload of an item metadata lookup."""

    media_container: MetadataContainer = Field(alias="MediaContainer")


class IdentityContainer(_PlexModel):
    friendly_name: str = Field(alias="friendlyName")


class IdentityResponse(_PlexModel):
    """Payload of the server root endpoint."""

    media_container: IdentityContainer = Field(alias="MediaContainer")


def find_tmdb_id(guids: list[GuidTag]) -> str | None:
    """Return the first ``tmdb://`` identifier from a guid list."""
    for guid in guids:
        if guid.id.startswith(TMDB_GUID_PREFIX):
            return guid.id.removeprefix(TMDB_GUID_PREFIX)
    return None


def progress_counts(view_offset: int | None, duration: int | None) -> tuple[int, int] | None:
    """Return ``(filled_segments, percent)`` or ``None`` when unknown.

    The ratio is clamped to ``[0, 1]`` and both values are floored.
    """
    if view_offset is None or not duration or duration <= 0:
        return None
    offset = min(max(view_offset, 0), duration)
    filled = offset * PROGRESS_BAR_WIDTH // duration
    percent = offset * 100 // duration
    return filled, percent


def progress_bar(session: Session) -> str:
    """Render a fixed-width text progress bar for a session."""
    counts = progress_counts(session.view_offset, session.duration)
    if counts is None:
        return f"[{'-' * PROGRESS_BAR_WIDTH}] --%"
    filled, percent = counts
    empty = PROGRESS_BAR_WIDTH - filled
    return f"[{'#' * filled}{'-' * empty}] {percent}%"

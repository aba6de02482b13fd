"""Domain models for the plex.tv account API."""

from pydantic import BaseModel, ConfigDict, Field


class _PlexTvModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class PlexConnection(_PlexTvModel):
    """One candidate network endpoint of a server."""

    uri: str
    local: bool = False


class PlexResource(_PlexTvModel):
    """A device registered to a plex.tv account."""

    name: str
    client_identifier: str = Field(alias="clientIdentifier")
    connections: list[PlexConnection] = Field(default_factory=list)
    access_token: str | None = Field(default=None, alias="accessToken")
    provides: str | None = None

    @property
    def is_server(self) -> bool:
        return self.provides is not None and "server" in self.provides.split(",")

    def candidate_urls(self) -> list[str]:
        """Return connection URIs with remote endpoints before local ones."""
        remote = [c.uri.rstrip("/") for c in self.connections if not c.local]
        local = [c.uri.rstrip("/") for c in self.connections if c.local]
        return remote + local


class PinResponse(_PlexTvModel):
    """Device pairing pin."""

    id: int
    code: str
    auth_token: str | None = Field(default=None, alias="authToken")

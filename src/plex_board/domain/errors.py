"""Application errors."""


class PlexAuthError(Exception):
    """Raised when first-run Plex authentication fails or is abandoned."""


class ConfigurationError(Exception):
    """Raised when the application cannot start with the stored configuration."""

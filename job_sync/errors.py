"""Exception hierarchy for the sync subsystem."""


class JobSyncError(Exception):
    """Base class for every error raised by job_sync."""


class ProviderError(JobSyncError):
    """A job provider could not deliver results."""

    def __init__(self, source: str, message: str):
        super().__init__(f"{source}: {message}")
        self.source = source


class ProviderUnavailable(ProviderError):
    """Network/transport failure, bad response or missing credentials."""


class RateLimited(ProviderError):
    """The provider answered with HTTP 429 (or an equivalent signal)."""


class MalformedRecord(JobSyncError):
    """A single provider record could not be parsed or normalized."""


class ConfigError(JobSyncError, ValueError):
    """Invalid configuration value or unknown configuration field."""

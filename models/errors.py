"""
Error taxonomy.

Every error is terminal for the current invocation; nothing here is retried.
"""

from typing import Optional


class SoError(Exception):
    """Base class for all errors surfaced to the user."""


class ConfigError(SoError):
    """Invalid override value or unreadable persisted configuration."""

    def __init__(self, message: str, value: Optional[str] = None):
        super().__init__(message)
        self.value = value


class RemoteError(SoError):
    """The StackExchange API could not be reached or rejected the request."""


class DecodeError(SoError):
    """A response did not have the expected shape."""


class CacheCorruptError(SoError):
    """The local site cache exists but cannot be parsed."""

    def __init__(self, path: str, reason: str = ""):
        message = f"Site cache at {path} is malformed"
        if reason:
            message = f"{message}: {reason}"
        message = f"{message}. Run `so --update-sites` to rebuild it."
        super().__init__(message)
        self.path = path


class EmptySites(SoError):
    """The site registry loaded but holds no sites."""

    def __init__(self):
        super().__init__(
            "The cached site list is empty. Run `so --update-sites` to rebuild it."
        )


class SiteNotFound(SoError):
    """A requested site code is not a known StackExchange site."""

    def __init__(self, site: str):
        super().__init__(
            f"{site} is not a valid StackExchange site. "
            f"See `so --list-sites` for the available codes."
        )
        self.site = site


class StorageError(SoError):
    """A local directory or file could not be created, read or written."""

    def __init__(self, path: str, reason: str = "", action: str = "write"):
        message = f"Could not {action} {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.path = path

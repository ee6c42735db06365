"""
Models package initialization.
"""

from .enums import Toggle, RegistryState
from .errors import (
    SoError,
    ConfigError,
    RemoteError,
    DecodeError,
    CacheCorruptError,
    EmptySites,
    SiteNotFound,
    StorageError,
)
from .schema import (
    Config,
    Site,
    Answer,
    Question,
    ResponseWrapper,
)

__all__ = [
    "Toggle",
    "RegistryState",
    "SoError",
    "ConfigError",
    "RemoteError",
    "DecodeError",
    "CacheCorruptError",
    "EmptySites",
    "SiteNotFound",
    "StorageError",
    "Config",
    "Site",
    "Answer",
    "Question",
    "ResponseWrapper",
]

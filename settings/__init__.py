"""
Settings package initialization.
"""

from .resolver import (
    ConfigOverrides,
    Resolution,
    resolve_config,
    toggle_from_flags,
    parse_limit,
    split_sites,
)
from .store import (
    config_dir,
    cache_dir,
    load_user_config,
    store_user_config,
    set_api_key,
)

__all__ = [
    "ConfigOverrides",
    "Resolution",
    "resolve_config",
    "toggle_from_flags",
    "parse_limit",
    "split_sites",
    "config_dir",
    "cache_dir",
    "load_user_config",
    "store_user_config",
    "set_api_key",
]

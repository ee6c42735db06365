"""
Configuration precedence resolution.

Merges persisted settings (or built-in defaults) with the overrides collected
for one invocation into a single immutable Config:

  - api_key:     override replaces persisted value, and is handed back for persistence
  - sites:       override list replaces persisted list (no merge); entries may be ';'-joined
  - limit:       override replaces persisted value; must be a positive integer
  - lucky,
    duckduckgo:  tri-state; ON / OFF force the value, INHERIT keeps the persisted one
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

from pydantic import ValidationError

from models.enums import Toggle
from models.errors import ConfigError
from models.schema import Config

SITE_DELIMITER = ";"


@dataclass
class ConfigOverrides:
    """Per-invocation override values; None / INHERIT mean 'not supplied'."""

    sites: Optional[List[str]] = None
    limit: Optional[Union[int, str]] = None
    api_key: Optional[str] = None
    lucky: Toggle = Toggle.INHERIT
    duckduckgo: Toggle = Toggle.INHERIT


@dataclass
class Resolution:
    """Resolved config plus the API key the caller may want to persist."""

    config: Config
    api_key_to_persist: Optional[str] = None


def toggle_from_flags(on: bool, off: bool, name: str = "toggle") -> Toggle:
    """Build a tri-state toggle from a pair of --x / --no-x flags."""
    if on and off:
        raise ConfigError(f"--{name} and --no-{name} cannot be used together", value=name)
    if on:
        return Toggle.ON
    if off:
        return Toggle.OFF
    return Toggle.INHERIT


def parse_limit(raw: Union[int, str]) -> int:
    """Parse a limit override as a positive integer."""
    if isinstance(raw, bool):
        raise ConfigError(f"Invalid limit {raw!r}: expected a positive integer", value=str(raw))
    try:
        limit = int(str(raw).strip())
    except ValueError:
        raise ConfigError(f"Invalid limit {raw!r}: expected a positive integer", value=str(raw))
    if limit <= 0:
        raise ConfigError(f"Invalid limit {raw!r}: must be greater than zero", value=str(raw))
    return limit


def split_sites(groups: Iterable[str]) -> List[str]:
    """Flatten site arguments, each of which may be a ';'-joined group."""
    sites: List[str] = []
    for group in groups:
        for code in group.split(SITE_DELIMITER):
            code = code.strip()
            if code:
                sites.append(code)
    return sites


def resolve_config(
    persisted: Optional[Config],
    overrides: Optional[ConfigOverrides] = None,
) -> Resolution:
    """
    Fold overrides onto persisted settings.

    Args:
        persisted: Previously stored settings; None on first run (defaults apply)
        overrides: Values supplied for this invocation

    Returns:
        Resolution with the validated Config

    Raises:
        ConfigError: On an invalid limit, an empty site list, or conflicting toggles
    """
    base = persisted if persisted is not None else Config()
    overrides = overrides or ConfigOverrides()

    for name in ("lucky", "duckduckgo"):
        if not isinstance(getattr(overrides, name), Toggle):
            raise ConfigError(f"Override for {name} must be a Toggle", value=name)

    limit = base.limit if overrides.limit is None else parse_limit(overrides.limit)

    if overrides.sites is None:
        sites = list(base.sites)
    else:
        sites = split_sites(overrides.sites)
        if not sites:
            raise ConfigError("No site codes given", value=SITE_DELIMITER.join(overrides.sites))

    api_key = overrides.api_key if overrides.api_key is not None else base.api_key

    try:
        config = Config(
            limit=limit,
            sites=tuple(sites),
            api_key=api_key,
            lucky=overrides.lucky.apply(base.lucky),
            duckduckgo=overrides.duckduckgo.apply(base.duckduckgo),
        )
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}")

    return Resolution(config=config, api_key_to_persist=overrides.api_key)

"""
Local cache of StackExchange sites.

Cache-aside: the site list is read from the local cache file on first use and
fetched from the API only when that file does not exist. Every remote fetch
replaces the in-memory list wholesale and overwrites the cache file.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional

import httpx
from pydantic import TypeAdapter, ValidationError

from models.enums import RegistryState
from models.errors import CacheCorruptError, EmptySites, SiteNotFound, StorageError
from models.schema import Site
from settings.store import cache_dir, ensure_dir

from .client import get_items

logger = logging.getLogger(__name__)

SITES_FILENAME = "sites.json"

# Should cover every StackExchange site in a single page
SE_SITES_PAGESIZE = 10000

_SITE_LIST = TypeAdapter(List[Site])


class SiteRegistry:
    """
    Site list holder for one invocation.

    Construct one per process and pass it to whatever needs site validation;
    the list is loaded at most once unless force_refresh() is called.
    """

    def __init__(
        self,
        directory: Optional[Path] = None,
        client: Optional[httpx.Client] = None,
    ):
        self.directory = Path(directory) if directory else cache_dir()
        self.filename = self.directory / SITES_FILENAME
        self._client = client
        self._sites: Optional[List[Site]] = None
        self.state = RegistryState.UNLOADED

    def get_sites(self) -> List[Site]:
        """
        Return the site list, loading it on first use.

        Raises:
            CacheCorruptError: If the cache file exists but cannot be parsed
            RemoteError, DecodeError: If the cache is absent and the fetch fails
        """
        if self._sites is not None:
            return self._sites
        if self._load_local():
            return self._sites
        self._fetch_remote()
        return self._sites

    def force_refresh(self) -> List[Site]:
        """Fetch the full site list from the API and overwrite the cache."""
        self._fetch_remote()
        return self._sites

    def validate(self, site_code: str) -> bool:
        """
        Check whether site_code is a known site.

        Raises:
            EmptySites: If the loaded list has no entries
        """
        sites = self.get_sites()
        if not sites:
            raise EmptySites()
        return any(site.api_site_parameter == site_code for site in sites)

    def require(self, site_code: str) -> None:
        """Like validate(), but raise SiteNotFound for an unknown code."""
        if not self.validate(site_code):
            raise SiteNotFound(site_code)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _load_local(self) -> bool:
        try:
            with open(self.filename, "rb") as f:
                raw = f.read()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(str(self.filename), e.strerror or str(e), action="read")

        try:
            sites = _SITE_LIST.validate_python(json.loads(raw))
        except (ValueError, ValidationError) as e:
            raise CacheCorruptError(str(self.filename), str(e).splitlines()[0])

        logger.info("Loaded %d sites from %s", len(sites), self.filename)
        self._sites = sites
        self.state = RegistryState.LOCAL_LOADED
        return True

    def _fetch_remote(self):
        logger.info("Fetching site list from StackExchange")
        params = {"pagesize": str(SE_SITES_PAGESIZE), "page": "1"}
        if self._client is None:
            with httpx.Client() as client:
                sites = get_items(client, "sites", params, Site, "sites")
        else:
            sites = get_items(self._client, "sites", params, Site, "sites")

        self._store_local(sites)
        self._sites = sites
        self.state = RegistryState.REMOTE_LOADED

    def _store_local(self, sites: List[Site]):
        # Truncates and rewrites in place; not atomic.
        ensure_dir(self.directory)
        try:
            with open(self.filename, "w", encoding="utf-8") as f:
                json.dump([site.model_dump() for site in sites], f)
        except OSError as e:
            raise StorageError(str(self.filename), e.strerror or str(e))
        logger.info("Cached %d sites at %s", len(sites), self.filename)

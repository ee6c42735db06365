"""
StackExchange API client.

Runs one search against the search/advanced endpoint and decodes the
gzip-compressed JSON envelope the API always returns. The envelope decoding
is shared with the site registry's remote fetch.
"""

from __future__ import annotations

import gzip
import json
import logging
import zlib
from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from models.errors import DecodeError, RemoteError
from models.schema import Config, Question, ResponseWrapper

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

# StackExchange API v2.2
SE_URL = "https://api.stackexchange.com/2.2/"

# Filter selecting only the fields the models need
# (ids, scores, markdown bodies, titles, accepted flag).
# New filters: https://api.stackexchange.com/docs/create-filter
SE_FILTER = ".DND5X2VHHUH8HyJzpjo)5NvdHI3w6auG"

GZIP_MAGIC = b"\x1f\x8b"


# ------------------------------------------------------------------
# Envelope decoding
# ------------------------------------------------------------------

def stackexchange_url(path: str) -> str:
    return SE_URL + path.lstrip("/")


def _decompress(content: bytes) -> bytes:
    """Gunzip the body unless the transport already did."""
    if content[:2] != GZIP_MAGIC:
        return content
    try:
        return gzip.decompress(content)
    except (OSError, EOFError, zlib.error) as e:
        raise DecodeError(f"Response body is not valid gzip: {e}")


def decode_items(content: bytes, model: Type[T], what: str) -> List[T]:
    """
    Decode an API response body into the items of its envelope.

    Args:
        content: Raw (possibly gzip-compressed) response body
        model: Pydantic model of one envelope item
        what: Human-readable name of the items, for error messages

    Raises:
        DecodeError: If the body is not gzip/JSON or not the expected envelope
    """
    body = _decompress(content)
    try:
        data = json.loads(body)
    except ValueError as e:
        raise DecodeError(f"Error decoding {what} from the StackExchange API: {e}")
    try:
        wrapper = ResponseWrapper[model].model_validate(data)
    except ValidationError as e:
        raise DecodeError(f"Error decoding {what} from the StackExchange API: {e}")
    return wrapper.items


def _error_message(resp: httpx.Response) -> str:
    """Best-effort extraction of the API's error envelope."""
    try:
        data = json.loads(_decompress(resp.content))
    except (ValueError, DecodeError):
        return f"HTTP {resp.status_code}"
    if isinstance(data, dict) and data.get("error_message"):
        name = data.get("error_name") or data.get("error_id")
        return f"{data['error_message']} ({name})" if name else str(data["error_message"])
    return f"HTTP {resp.status_code}"


def get_items(
    client: httpx.Client,
    path: str,
    params: Dict[str, Any],
    model: Type[T],
    what: str,
) -> List[T]:
    """
    GET an API endpoint and return the decoded envelope items.

    Raises:
        RemoteError: Transport failure or non-2xx status
        DecodeError: Malformed body
    """
    url = stackexchange_url(path)
    logger.debug("GET %s params=%s", url, {k: v for k, v in params.items() if k != "key"})
    try:
        resp = client.get(url, params=params, headers={"Accepts": "application/json"})
    except httpx.DecodingError as e:
        raise DecodeError(f"Error decoding {what} from the StackExchange API: {e}")
    except httpx.HTTPError as e:
        raise RemoteError(f"Error encountered while requesting {what} from StackExchange: {e}")

    if resp.is_error:
        raise RemoteError(
            f"StackExchange rejected the request for {what}: {_error_message(resp)}"
        )
    return decode_items(resp.content, model, what)


# ------------------------------------------------------------------
# Search client
# ------------------------------------------------------------------

def rank_answers(question: Question) -> Question:
    """Re-sort answers by score, highest first; ties keep their original order."""
    question.answers = sorted(question.answers, key=lambda a: -a.score)
    return question


class StackExchange:
    """Searches one StackExchange site using the settings in Config."""

    def __init__(self, config: Config, client: Optional[httpx.Client] = None):
        self.config = config
        self._client = client or httpx.Client()
        self._owns_client = client is None

    @property
    def site(self) -> str:
        return self.config.site

    def search(self, query: str) -> List[Question]:
        """
        Search against the search/advanced endpoint.

        Only questions with at least one answer are requested. Exactly one
        request is made, to the first configured site.

        Args:
            query: Free-text query

        Returns:
            Questions in relevance order, each with answers ranked by score

        Raises:
            RemoteError: Transport failure or rejected request
            DecodeError: Malformed response
        """
        params = self._default_params()
        params.update({
            "q": query,
            "pagesize": str(self.config.limit),
            "page": "1",
            "answers": "1",
            "order": "desc",
            "sort": "relevance",
        })
        questions = get_items(self._client, "search/advanced", params, Question, "questions")
        logger.info("Found %d questions on %s", len(questions), self.site)
        return [rank_answers(q) for q in questions]

    def _default_params(self) -> Dict[str, str]:
        params = {"site": self.site, "filter": SE_FILTER}
        if self.config.api_key:
            params["key"] = self.config.api_key
        return params

    def close(self):
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> StackExchange:
        return self

    def __exit__(self, *exc):
        self.close()

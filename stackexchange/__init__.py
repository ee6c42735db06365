"""
StackExchange API access: question search and the local site cache.
"""

from .client import StackExchange, rank_answers, decode_items, get_items
from .storage import SiteRegistry

__all__ = [
    "StackExchange",
    "rank_answers",
    "decode_items",
    "get_items",
    "SiteRegistry",
]

"""Cache module for userlist."""

from userlist.cache.base import Fetcher, Listener, SubscriptionHandle
from userlist.cache.fetch import FetchCache

__all__ = [
    "FetchCache",
    "Fetcher",
    "Listener",
    "SubscriptionHandle",
]

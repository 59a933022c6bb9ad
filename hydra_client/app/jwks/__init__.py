"""
Key retrieval from the provider's key sets.

Keys are addressed by (set, kid) and the first key of the returned set is
used. An optional TTL cache avoids refetching the same key on every call;
there is no rotation handling or background refresh.
"""

from .fetcher import KeyFetcher

__all__ = ["KeyFetcher"]

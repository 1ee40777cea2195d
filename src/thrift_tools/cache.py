"""Explicitly constructed caches with bounded size and time-to-live eviction."""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Optional

from thrift_tools.parser.thrift_ast import Document
from thrift_tools.parser.thrift_parser import ThriftParser

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class CacheError(Exception):
    """Raised on misuse of a cache, e.g. an unregistered cache name."""


@dataclass
class _Entry:
    value: Any
    stored_at: float


class TtlCache:
    """Insertion-ordered cache holding at most ``max_size`` live entries.

    Entries older than ``ttl_seconds`` are treated as missing. When a new key
    does not fit, expired entries are dropped first, then the oldest ones.
    """

    def __init__(self, max_size: int = 128, ttl_seconds: float = 300.0, clock: Clock = time.monotonic):
        if max_size < 1:
            raise CacheError(f"max_size must be positive, got {max_size}")
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: "OrderedDict[Hashable, _Entry]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not None

    def get(self, key: Hashable) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._expired(entry):
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: Hashable, value: Any) -> None:
        if key in self._entries:
            del self._entries[key]
        elif len(self._entries) >= self.max_size:
            self.clear_expired()
            while len(self._entries) >= self.max_size:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted oldest cache entry %r", evicted)
        self._entries[key] = _Entry(value, self._clock())

    def delete(self, key: Hashable) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def clear_expired(self) -> int:
        expired = [key for key, entry in self._entries.items() if self._expired(entry)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def _expired(self, entry: _Entry) -> bool:
        return self._clock() - entry.stored_at >= self.ttl_seconds


class AstCache:
    """Parsed documents keyed by document identity plus a content snapshot."""

    def __init__(self, max_size: int = 64, ttl_seconds: float = 300.0, clock: Clock = time.monotonic):
        self._cache = TtlCache(max_size, ttl_seconds, clock)

    def get(self, uri: str, content: str) -> Document:
        """Return the cached AST for ``uri`` while ``content`` is unchanged."""
        cached = self._cache.get(uri)
        if cached is not None and cached[0] == content:
            return cached[1]
        logger.debug("Parsing %s", uri)
        document = ThriftParser(content).parse()
        self._cache.set(uri, (content, document))
        return document

    def clear(self, uri: Optional[str] = None) -> None:
        if uri is None:
            self._cache.clear()
        else:
            self._cache.delete(uri)


class CacheManager:
    """Registry of named caches owned by whoever constructs it."""

    def __init__(self, clock: Clock = time.monotonic):
        self._clock = clock
        self._caches: Dict[str, TtlCache] = {}

    def register(self, name: str, max_size: int = 128, ttl_seconds: float = 300.0) -> TtlCache:
        cache = TtlCache(max_size, ttl_seconds, self._clock)
        self._caches[name] = cache
        return cache

    def cache(self, name: str) -> TtlCache:
        try:
            return self._caches[name]
        except KeyError:
            raise CacheError(f"Cache '{name}' is not registered") from None

    def get(self, name: str, key: Hashable) -> Optional[Any]:
        return self.cache(name).get(key)

    def set(self, name: str, key: Hashable, value: Any) -> None:
        self.cache(name).set(key, value)

    def clear(self, name: Optional[str] = None) -> None:
        if name is None:
            for cache in self._caches.values():
                cache.clear()
        else:
            self.cache(name).clear()

#!/usr/bin/env python3
"""
Settings Cache
==============
Read-through cache for ComposedSettings.

The store itself belongs to the host; anything implementing CacheBackend
(get/set/delete) can be plugged in. Two backends ship with the package:

- MemoryCache: process-local dict, returns the stored object itself
- FileCache: one YAML file per key, with an optional TTL

Usage:
    from kalastatic.cache import SettingsCache, MemoryCache
    from kalastatic.loader import SettingsLoader

    cache = SettingsCache(SettingsLoader(host_root, theme_path), MemoryCache())
    cache.get_composed_settings()   # loads on first call
    cache.rebuild()                 # reloads and stores, next read is warm
"""

import hashlib
import logging
import time
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

import yaml

from kalastatic.loader import ComposedSettings, SettingsLoader
from kalastatic.settings import get_setting, require_setting, resolve_path

logger = logging.getLogger(__name__)


# =============================================================================
# Backends
# =============================================================================

class CacheBackend(Protocol):
    """Key-value store owned by the host."""

    def get(self, key: str) -> Optional[Any]:
        """Return the stored value, or None on a miss."""

    def set(self, key: str, value: Any) -> None:
        """Store value under key."""

    def delete(self, key: str) -> None:
        """Drop key if present."""


class MemoryCache:
    """In-process backend. Values are stored and returned as-is."""

    def __init__(self):
        self._data: Dict[str, Any] = {}

    def get(self, key: str) -> Optional[Any]:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class FileCache:
    """
    YAML file backend.

    Values must be representable by yaml.safe_dump, which covers everything
    yaml.safe_load produces (dates, non-string keys). Entries older than
    ttl_seconds are treated as misses; a ttl of 0 or None never expires.
    """

    def __init__(self, cache_dir: str = None, ttl_seconds: Optional[float] = None):
        if cache_dir:
            self.cache_dir = resolve_path(cache_dir)
        else:
            self.cache_dir = resolve_path(require_setting("cache.dir"))
        if ttl_seconds is None:
            ttl_seconds = get_setting("cache.ttl_seconds", 0)
        self.ttl_seconds = ttl_seconds
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    def _get_cache_path(self, key: str) -> Path:
        key_hash = hashlib.md5(key.encode()).hexdigest()[:16]
        return self.cache_dir / f"{key_hash}.yaml"

    def get(self, key: str) -> Optional[Any]:
        cache_path = self._get_cache_path(key)
        if not cache_path.exists():
            return None

        try:
            data = yaml.safe_load(cache_path.read_text(encoding='utf-8'))
        except yaml.YAMLError:
            logger.warning("Ignoring unreadable cache entry %s", cache_path)
            return None
        if not isinstance(data, dict) or data.get('key') != key:
            return None
        if self.ttl_seconds and time.time() - data.get('timestamp', 0) > self.ttl_seconds:
            return None
        return data.get('value')

    def set(self, key: str, value: Any) -> None:
        data = {
            'key': key,
            'value': value,
            'timestamp': time.time(),
        }
        self._get_cache_path(key).write_text(
            yaml.safe_dump(data, sort_keys=False, allow_unicode=True), encoding='utf-8'
        )

    def delete(self, key: str) -> None:
        self._get_cache_path(key).unlink(missing_ok=True)


# =============================================================================
# Settings Cache
# =============================================================================

class SettingsCache:
    """
    Cache-through access to ComposedSettings.

    MemoryCache entries are stored as ComposedSettings objects. Other
    backends receive the plain dict form so they can serialize it, and
    reads always go through the backend so every read sees the same form.
    """

    def __init__(self, loader: SettingsLoader, backend: CacheBackend = None,
                 key: str = None):
        self.loader = loader
        self.backend = backend if backend is not None else MemoryCache()
        self.key = key or require_setting("cache.key")

    def _store(self, settings: ComposedSettings) -> None:
        if isinstance(self.backend, MemoryCache):
            self.backend.set(self.key, settings)
        else:
            self.backend.set(self.key, settings.to_dict())

    def _lookup(self) -> Optional[ComposedSettings]:
        cached = self.backend.get(self.key)
        if cached is None:
            return None
        if isinstance(cached, ComposedSettings):
            return cached
        return ComposedSettings.from_dict(cached)

    def rebuild(self) -> ComposedSettings:
        """Load settings from disk and store them. Returns the new settings."""
        settings = self.loader.load()
        self._store(settings)
        logger.info("KalaStatic settings rebuilt")
        # Hand back what later hits will return, not the pre-serialization object
        stored = self._lookup()
        return stored if stored is not None else settings

    def invalidate(self) -> None:
        """Drop the cached entry without reloading."""
        self.backend.delete(self.key)

    def get_composed_settings(self) -> ComposedSettings:
        settings = self._lookup()
        if settings is None:
            logger.debug("Settings cache miss for %s", self.key)
            settings = self.rebuild()
        return settings

    def get_root_config(self) -> Dict[str, Any]:
        return self.get_composed_settings().yaml

    def get_metadata(self) -> Dict[str, Any]:
        return self.get_composed_settings().config


__all__ = [
    "CacheBackend",
    "MemoryCache",
    "FileCache",
    "SettingsCache",
]

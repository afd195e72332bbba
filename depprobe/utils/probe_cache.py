"""Session cache for dependency probe outcomes."""

from __future__ import annotations

import json
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..depprobe_types.probe import ProbeResult

_CACHE_VERSION = 1


class ProbeCache:
    """Maps a dependency key to its probe outcome.

    A key that was never stored is "not yet probed" and ``get`` returns
    ``None``; otherwise the stored entry says whether the dependency was
    found and where.
    """

    def __init__(self, cache_file: Optional[Path] = None):
        """Create the cache.

        Args:
            cache_file: Optional JSON file used to keep outcomes between
                sessions. ``None`` keeps the cache in memory only.
        """
        self.cache_file = Path(cache_file) if cache_file is not None else None
        self._lock = threading.RLock()
        self._key_locks: Dict[str, threading.Lock] = {}
        self._dirty = False
        self.cache_data: Dict[str, Dict[str, Any]] = self._load_cache()

    def _load_cache(self) -> Dict[str, Dict[str, Any]]:
        """Load cache from file, starting empty if it is missing or unusable"""
        if self.cache_file is None or not self.cache_file.exists():
            return {}
        try:
            with open(self.cache_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError):
            return {}
        if not isinstance(data, dict) or data.get("version") != _CACHE_VERSION:
            return {}
        entries = data.get("entries")
        if not isinstance(entries, dict):
            return {}
        return {
            key: raw
            for key, raw in entries.items()
            if isinstance(key, str) and isinstance(raw, dict) and "found" in raw
        }

    def key_lock(self, key: str) -> threading.Lock:
        """Return the lock serialising probes of one key"""
        with self._lock:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._key_locks[key] = lock
            return lock

    def contains(self, key: str) -> bool:
        """True once the key has been probed"""
        with self._lock:
            return key in self.cache_data

    def get(self, key: str) -> Optional[ProbeResult]:
        """
        Get the cached outcome for a key

        Args:
            key: Dependency identifier

        Returns:
            The cached result, or None if the key was never probed
        """
        with self._lock:
            entry = self.cache_data.get(key)
            if entry is None:
                return None
            return ProbeResult(
                found=bool(entry.get("found")),
                header_path=str(entry.get("header_path") or ""),
                library_path=str(entry.get("library_path") or ""),
                from_cache=True,
            )

    def store(self, key: str, result: ProbeResult):
        """
        Record the outcome of a probe

        Args:
            key: Dependency identifier
            result: Probe outcome to remember
        """
        with self._lock:
            self.cache_data[key] = {
                "found": result.found,
                "header_path": result.header_path,
                "library_path": result.library_path,
                "timestamp": datetime.now().isoformat(),
            }
            self._dirty = True

    def keys(self) -> List[str]:
        """Return the probed keys in insertion order"""
        with self._lock:
            return list(self.cache_data.keys())

    def clear_entry(self, key: str) -> bool:
        """Forget one key. Returns True if it was cached."""
        with self._lock:
            if key not in self.cache_data:
                return False
            del self.cache_data[key]
            self._dirty = True
            return True

    def clear(self):
        """Forget every key"""
        with self._lock:
            self.cache_data = {}
            self._dirty = True

    def persist(self):
        """Write the cache to its file, if it has one and changed"""
        with self._lock:
            if self.cache_file is None or not self._dirty:
                return
            payload = {"version": _CACHE_VERSION, "entries": self.cache_data}
            self.cache_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.cache_file, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, sort_keys=True)
            self._dirty = False


__all__ = ["ProbeCache"]

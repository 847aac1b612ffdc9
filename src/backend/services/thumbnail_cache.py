"""Bounded LRU cache for rendered thumbnails, invalidated by field revision."""
from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from typing import Hashable, List, Optional, Tuple

import numpy as np

from common.log_utils import log_debug


@dataclass
class ThumbnailCacheEntry:
    revision: int
    image: np.ndarray


class ThumbnailCache:
    """Keeps the most recently used thumbnails; stale revisions count as misses."""

    def __init__(self, capacity: int) -> None:
        self.capacity = max(1, capacity)
        self._entries: "OrderedDict[Hashable, ThumbnailCacheEntry]" = OrderedDict()

    def get(self, key: Hashable, revision: int) -> Optional[np.ndarray]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.revision != revision:
            self._entries.pop(key, None)
            return None
        self._entries.move_to_end(key)
        return entry.image

    def put(self, key: Hashable, revision: int, image: np.ndarray) -> List[Hashable]:
        """Store ``image`` and return the keys evicted to stay within capacity."""
        self._entries.pop(key, None)
        self._entries[key] = ThumbnailCacheEntry(revision, image)
        evicted: List[Hashable] = []
        while len(self._entries) > self.capacity:
            old_key, _ = self._entries.popitem(last=False)
            evicted.append(old_key)
        if evicted:
            log_debug(f"Evicted {len(evicted)} thumbnails", "REPO")
        return evicted

    def invalidate(self, prefix: Optional[Tuple[int, ...]] = None) -> None:
        """Drop everything, or only keys whose leading items equal ``prefix``."""
        if prefix is None:
            self._entries.clear()
            return
        size = len(prefix)
        for key in [k for k in self._entries if isinstance(k, tuple) and k[:size] == prefix]:
            self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)

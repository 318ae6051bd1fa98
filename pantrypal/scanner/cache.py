"""Small in-process query cache with named invalidation keys."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable

logger = logging.getLogger(__name__)

INVENTORY_KEY = "inventory"
DASHBOARD_METRICS_KEY = "dashboard-metrics"


class QueryCache:
    """Holds derived read results under string keys.

    ``invalidate`` drops the cached values and notifies subscribers so
    views can reload.
    """

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}
        self._listeners: dict[str, list[Callable[[str], None]]] = defaultdict(list)

    def get_or_load(self, key: str, loader: Callable[[], Any]) -> Any:
        if key not in self._values:
            self._values[key] = loader()
        return self._values[key]

    def is_cached(self, key: str) -> bool:
        return key in self._values

    def subscribe(self, key: str, callback: Callable[[str], None]) -> None:
        self._listeners[key].append(callback)

    def invalidate(self, *keys: str) -> None:
        for key in keys:
            self._values.pop(key, None)
            logger.debug("Invalidated cache key %s", key)
            for callback in self._listeners.get(key, ()):
                try:
                    callback(key)
                except Exception:
                    logger.exception("Cache listener for %s failed", key)

"""In-memory cache of the latest analysis input."""

import logging
import threading
import time
from datetime import datetime
from typing import Optional

from .api.schemas import Cluster

logger = logging.getLogger(__name__)


class AnalysisCache:
    """Holds the cluster data of the most recent analysis.

    Entries older than ``ttl`` seconds are treated as missing. A ``ttl`` of
    None keeps the entry until it is replaced or cleared.
    """

    def __init__(self, ttl: Optional[float] = None):
        self._ttl = ttl
        self._clusters: Optional[tuple[Cluster, ...]] = None
        self._stored_at = 0.0
        self._lock = threading.Lock()

    def store(self, clusters: list[Cluster]) -> datetime:
        """Replace the cached analysis. Returns the time it was stored."""
        with self._lock:
            self._clusters = tuple(clusters)
            self._stored_at = time.time()
        logger.info(f"Cached analysis with {len(clusters)} clusters")
        return datetime.fromtimestamp(self._stored_at)

    def load(self) -> Optional[list[Cluster]]:
        """Return a copy of the cached clusters, or None if missing or expired."""
        with self._lock:
            if self._clusters is None:
                return None
            if self._ttl is not None and time.time() - self._stored_at > self._ttl:
                self._clusters = None
                return None
            return list(self._clusters)

    def clear(self):
        with self._lock:
            self._clusters = None


analysis_cache = AnalysisCache()

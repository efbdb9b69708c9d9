"""In-memory store of generated concept maps, one per application."""

import logging
import threading
import time
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field

from conceptmap.analysis.metrics import GraphMetrics
from conceptmap.config import settings
from conceptmap.models import ConceptGraph

logger = logging.getLogger(__name__)


@dataclass
class StoredMap:
    """A generated map kept for follow-up render requests."""

    id: str
    graph: ConceptGraph
    metrics: GraphMetrics | None = None

    # Graphviz layout engine for static renders (settings.dot_engine when None)
    engine: str | None = None
    created_at: float = field(default_factory=time.time)


class MapStore:
    """
    Bounded map store; the oldest map is evicted once max_maps is reached.

    Lives on app.state and is handed to handlers through a dependency, so
    concurrent requests each address their own map by id.
    """

    def __init__(self, max_maps: int | None = None):
        self.max_maps = max_maps or settings.store_max_maps
        self._maps: OrderedDict[str, StoredMap] = OrderedDict()
        self._lock = threading.Lock()

    def put(
        self,
        graph: ConceptGraph,
        metrics: GraphMetrics | None = None,
        engine: str | None = None,
    ) -> StoredMap:
        stored = StoredMap(id=uuid.uuid4().hex[:12], graph=graph, metrics=metrics, engine=engine)
        with self._lock:
            self._maps[stored.id] = stored
            while len(self._maps) > self.max_maps:
                evicted, _ = self._maps.popitem(last=False)
                logger.debug(f"Evicted concept map {evicted}")
        return stored

    def get(self, map_id: str) -> StoredMap:
        """Look up a map; raises KeyError for unknown or evicted ids."""
        with self._lock:
            return self._maps[map_id]

    def __contains__(self, map_id: object) -> bool:
        with self._lock:
            return map_id in self._maps

    def __len__(self) -> int:
        with self._lock:
            return len(self._maps)

"""
Route service: owns the transit graph handle and answers validated route queries.

The graph is built lazily on first use; at most one build runs at a time and
later callers wait for it. ``reload`` builds a fresh graph and swaps the
reference, so searches already running keep using the instance they started
with.
"""

import threading
import time
from typing import Any, Dict, List, Optional

from .config import OPTIMIZATION_MODES, Config
from .config import config as default_config
from .data_loader import DataSource, fetch_records
from .exceptions import GraphBuildError, InvalidQueryError, StopNotFoundError, UnknownModeError
from .graph import TransitGraph
from .logger import logger
from .models import BusLine, Itinerary, Stop
from .routing.algorithms import find_routes
from .utils.geo_utils import nearby_stops


class RouteService:
    """Route planning over a graph built from a data source"""

    def __init__(self, data_source: DataSource, config: Optional[Config] = None):
        self.data_source = data_source
        self.config = config or default_config
        self.config.validate()
        self._graph: Optional[TransitGraph] = None
        self._build_lock = threading.Lock()
        self._generation = 0

    def _build(self) -> TransitGraph:
        start = time.time()
        stops, lines, timetable = fetch_records(self.data_source)
        try:
            graph = TransitGraph.from_records(
                stops, lines, timetable, **self.config.get_graph_builder_config()
            )
        except (TypeError, ValueError, AttributeError) as e:
            logger.error(f"Graph build failed: {e}")
            raise GraphBuildError(f"Failed to build transit graph: {e}") from e
        logger.log_graph_build(
            graph.number_of_nodes, graph.number_of_edges, graph.walking_edges,
            (time.time() - start) * 1000,
        )
        return graph

    @property
    def graph(self) -> TransitGraph:
        """The current graph, building it on first access"""
        graph = self._graph
        if graph is None:
            with self._build_lock:
                # Double-check: another caller may have finished the build while we waited
                if self._graph is None:
                    self._graph = self._build()
                    self._generation += 1
                graph = self._graph
        return graph

    def is_built(self) -> bool:
        return self._graph is not None

    def reload(self) -> TransitGraph:
        """Rebuild the graph from the data source and swap it in.

        Callers that queued behind an in-flight reload reuse its result.
        A failed rebuild leaves the previous graph in place.
        """
        generation = self._generation
        with self._build_lock:
            if self._generation != generation and self._graph is not None:
                return self._graph
            logger.info("Reloading transit graph")
            graph = self._build()
            self._graph = graph
            self._generation += 1
        return graph

    def find_routes(self, source, target, mode: Optional[str] = None,
                    k: Optional[int] = None) -> List[Itinerary]:
        """Validate a query and return up to k ranked itineraries"""
        router_config = self.config.get_router_config()
        mode = mode or router_config['default_mode']
        k = router_config['default_route_count'] if k is None else k

        if mode not in OPTIMIZATION_MODES:
            raise UnknownModeError(
                f"Unknown optimization mode {mode!r}; expected one of {', '.join(OPTIMIZATION_MODES)}"
            )
        if isinstance(k, bool) or not isinstance(k, int) or not 1 <= k <= router_config['max_route_count']:
            raise InvalidQueryError(f"k must be an integer between 1 and {router_config['max_route_count']}")
        if source == target:
            raise InvalidQueryError("Start and destination must be different stops")

        graph = self.graph
        if not graph.has_stop(source):
            raise StopNotFoundError(source, 'Start')
        if not graph.has_stop(target):
            raise StopNotFoundError(target, 'Destination')

        start = time.time()
        routes = find_routes(graph, source, target, mode, k)
        logger.log_route_request(source, target, mode, k, (time.time() - start) * 1000, len(routes))
        return routes

    def nearby_stops(self, lat: float, lon: float, radius_km: Optional[float] = None,
                     limit: Optional[int] = None) -> List[Dict[str, Any]]:
        radius_km = self.config.nearby_radius_km if radius_km is None else radius_km
        limit = self.config.nearby_limit if limit is None else limit
        found = nearby_stops(lat, lon, self.graph.all_stops(), radius_km, limit)
        return [dict(stop.to_dict(), distance=distance) for stop, distance in found]

    def get_stop(self, stop_id) -> Optional[Stop]:
        return self.graph.get_stop(stop_id)

    def list_stops(self) -> List[Stop]:
        return self.graph.all_stops()

    def list_lines(self) -> List[BusLine]:
        return self.graph.all_lines()

    def status(self) -> Dict[str, Any]:
        graph = self._graph
        if graph is None:
            return {'built': False}
        return dict(graph.stats(), built=True)

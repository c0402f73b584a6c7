"""
Immutable transit graph: stops, bus lines and a directed multigraph of
bus-ride and walking edges keyed by stop id.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple

import networkx as nx

from ..models import BusLine, Edge, Stop, TimetableEntry
from .graph_builder import (
    DEFAULT_LINE_DURATION_MIN,
    DEFAULT_WALK_RADIUS_KM,
    DEFAULT_WALKING_SPEED_KMH,
    build_stop_line_index,
    build_transit_edges,
    build_walking_edges,
)

logger = logging.getLogger(__name__)


class TransitGraph:
    """Read-only routing graph built once from a snapshot of input records.

    Searches never mutate it, so one instance can be shared by concurrent
    queries. A fresh load means building a new instance.
    """

    def __init__(self, stops: Dict[int, Stop], lines: Dict[int, BusLine],
                 graph: nx.MultiDiGraph, transit_edges: int = 0, walking_edges: int = 0):
        self._stops = stops
        self._lines = lines
        self._graph = graph
        self.transit_edges = transit_edges
        self.walking_edges = walking_edges
        self.built_at = datetime.now(timezone.utc)
        # Frozen per-stop edge lists, in insertion order
        self._adjacency: Dict[int, Tuple[Edge, ...]] = {
            node: tuple(data['edge'] for _, _, data in graph.out_edges(node, data=True))
            for node in graph.nodes
        }

    @classmethod
    def from_records(cls, stops: Iterable[Stop], lines: Iterable[BusLine],
                     timetable: Iterable[TimetableEntry],
                     walk_radius_km: float = DEFAULT_WALK_RADIUS_KM,
                     walking_speed_kmh: float = DEFAULT_WALKING_SPEED_KMH,
                     default_duration_min: float = DEFAULT_LINE_DURATION_MIN) -> 'TransitGraph':
        """Build the graph from the three record sets"""
        start = time.time()
        timetable = list(timetable)
        stop_index = {stop.id: stop for stop in stops}
        line_index = {line.id: line for line in lines}

        graph = nx.MultiDiGraph()
        # Every stop is a node, so isolated stops remain valid endpoints
        graph.add_nodes_from(stop_index)

        transit_edges = build_transit_edges(
            graph, stop_index, line_index, timetable,
            default_duration_min=default_duration_min, logger=logger,
        )
        stop_lines = build_stop_line_index(timetable, line_index)
        walking_edges = build_walking_edges(
            graph, stop_index, stop_lines,
            walk_radius_km=walk_radius_km, walking_speed_kmh=walking_speed_kmh, logger=logger,
        )

        transit_graph = cls(stop_index, line_index, graph, transit_edges, walking_edges)
        logger.info(
            f"Graph built: {graph.number_of_nodes()} nodes, {graph.number_of_edges()} edges "
            f"in {time.time() - start:.2f} seconds"
        )
        return transit_graph

    def has_stop(self, stop_id) -> bool:
        return stop_id in self._stops

    def get_stop(self, stop_id) -> Optional[Stop]:
        return self._stops.get(stop_id)

    def get_edges(self, stop_id) -> Tuple[Edge, ...]:
        """Outgoing edges of a stop; empty for unknown ids"""
        return self._adjacency.get(stop_id, ())

    def all_stops(self) -> List[Stop]:
        return list(self._stops.values())

    def all_lines(self) -> List[BusLine]:
        return list(self._lines.values())

    def stop_ids(self) -> List[int]:
        return list(self._adjacency)

    @property
    def number_of_nodes(self) -> int:
        return self._graph.number_of_nodes()

    @property
    def number_of_edges(self) -> int:
        return self._graph.number_of_edges()

    def stats(self) -> dict:
        return {
            'stops': len(self._stops),
            'lines': len(self._lines),
            'nodes': self.number_of_nodes,
            'edges': self.number_of_edges,
            'transit_edges': self.transit_edges,
            'walking_edges': self.walking_edges,
            'built_at': self.built_at.isoformat(),
        }

import logging
import time
from collections import defaultdict
from typing import Dict, FrozenSet, Iterable, Mapping

import networkx as nx
import numpy as np
from rtree import index

from ..models import WALK_LINE_ID, WALK_LINE_LABEL, BusLine, Edge, Stop, TimetableEntry
from ..utils.geo_utils import bounding_box_deltas, haversine_distance, vectorized_haversine

log = logging.getLogger(__name__)

DEFAULT_LINE_DURATION_MIN = 30.0
DEFAULT_WALK_RADIUS_KM = 0.3
DEFAULT_WALKING_SPEED_KMH = 4.5


def group_timetable(timetable: Iterable[TimetableEntry]) -> Dict[tuple, list]:
    """Group entries by (line, direction), each group sorted by ordinal position"""
    groups = defaultdict(list)
    for entry in timetable:
        groups[(entry.line_id, entry.direction_id)].append(entry)
    for key in groups:
        groups[key].sort(key=lambda e: e.position)
    return dict(groups)


def build_stop_line_index(timetable: Iterable[TimetableEntry],
                          lines: Mapping[int, BusLine]) -> Dict[int, FrozenSet[int]]:
    """Map every stop id to the set of known line ids that visit it"""
    served = defaultdict(set)
    for entry in timetable:
        if entry.line_id in lines:
            served[entry.stop_id].add(entry.line_id)
    return {stop_id: frozenset(line_ids) for stop_id, line_ids in served.items()}


def _add_edge(graph: nx.MultiDiGraph, edge: Edge) -> bool:
    """Add an edge keyed by line id; an existing edge with the same key keeps the lower time.

    Returns True only when a new key was inserted.
    """
    if graph.has_edge(edge.origin_stop_id, edge.target_stop_id, key=edge.line_id):
        data = graph[edge.origin_stop_id][edge.target_stop_id][edge.line_id]
        if edge.time < data['time']:
            data.update(edge=edge, distance=edge.distance, time=edge.time)
        return False
    graph.add_edge(
        edge.origin_stop_id,
        edge.target_stop_id,
        key=edge.line_id,
        edge=edge,
        distance=edge.distance,
        time=edge.time,
    )
    return True


def build_transit_edges(graph: nx.MultiDiGraph, stops: Mapping[int, Stop],
                        lines: Mapping[int, BusLine], timetable: Iterable[TimetableEntry],
                        default_duration_min: float = DEFAULT_LINE_DURATION_MIN,
                        logger: logging.Logger = log) -> int:
    """Add one bus-ride edge per pair of ordinally consecutive stops of each (line, direction).

    A line's scheduled duration is spread evenly over its hops. Pairs whose stops
    are unknown or lack coordinates are skipped.
    """
    transit_edges = 0
    skipped = 0
    for (line_id, direction_id), entries in group_timetable(timetable).items():
        line = lines.get(line_id)
        if line is None:
            logger.warning(f"Line {line_id} not found for direction {direction_id}, skipping {len(entries)} entries")
            continue

        segment_count = max(len(entries) - 1, 1)
        segment_time = (line.duration_minutes or default_duration_min) / segment_count

        for current, following in zip(entries, entries[1:]):
            from_stop = stops.get(current.stop_id)
            to_stop = stops.get(following.stop_id)
            if from_stop is None or to_stop is None:
                logger.debug(f"Line {line_id}/{direction_id}: unknown stop in hop {current.stop_id} -> {following.stop_id}")
                skipped += 1
                continue
            if not from_stop.has_coordinates or not to_stop.has_coordinates:
                logger.debug(f"Line {line_id}/{direction_id}: missing coordinates for hop {from_stop.id} -> {to_stop.id}")
                skipped += 1
                continue
            if from_stop.id == to_stop.id:
                skipped += 1
                continue

            distance = haversine_distance(
                from_stop.latitude, from_stop.longitude,
                to_stop.latitude, to_stop.longitude
            )
            edge = Edge(
                origin_stop_id=from_stop.id,
                target_stop_id=to_stop.id,
                line_id=line.id,
                line_label=line.number,
                distance=distance,
                time=segment_time,
                origin_name=current.stop_name or from_stop.name,
                target_name=following.stop_name or to_stop.name,
            )
            if _add_edge(graph, edge):
                transit_edges += 1
            else:
                logger.debug(f"Duplicate hop {from_stop.id} -> {to_stop.id} on line {line_id}, keeping the faster")

    if skipped:
        logger.warning(f"Skipped {skipped} timetable hops with unknown stops or missing coordinates")
    logger.info(f"Created {transit_edges} transit edges")
    return transit_edges


def build_walking_edges(graph: nx.MultiDiGraph, stops: Mapping[int, Stop],
                        stop_lines: Mapping[int, FrozenSet[int]],
                        walk_radius_km: float = DEFAULT_WALK_RADIUS_KM,
                        walking_speed_kmh: float = DEFAULT_WALKING_SPEED_KMH,
                        logger: logging.Logger = log) -> int:
    """Add symmetric walking edges between nearby stops not served by an identical set of lines"""
    start_time = time.time()
    located = [stop for stop in stops.values() if stop.has_coordinates]
    if len(located) < 2:
        return 0

    lats = np.array([stop.latitude for stop in located])
    lons = np.array([stop.longitude for stop in located])

    # R-tree over point boxes (min_lon, min_lat, max_lon, max_lat); ids are positions in `located`
    idx = index.Index()
    for i, stop in enumerate(located):
        idx.insert(i, (stop.longitude, stop.latitude, stop.longitude, stop.latitude))

    empty = frozenset()
    walking_edges = 0
    for i, stop in enumerate(located):
        dlat, dlon = bounding_box_deltas(stop.latitude, walk_radius_km)
        bounds = (stop.longitude - dlon, stop.latitude - dlat, stop.longitude + dlon, stop.latitude + dlat)
        # Each unordered pair once, in a fixed order
        candidates = sorted(j for j in idx.intersection(bounds) if j > i)
        if not candidates:
            continue

        distances = vectorized_haversine(stop.latitude, stop.longitude, lats[candidates], lons[candidates])
        for j, dist_km in zip(candidates, distances):
            if dist_km > walk_radius_km:
                continue
            neighbour = located[j]
            if stop_lines.get(stop.id, empty) == stop_lines.get(neighbour.id, empty):
                continue

            dist_km = float(dist_km)
            walk_time = dist_km / walking_speed_kmh * 60.0
            for a, b in ((stop, neighbour), (neighbour, stop)):
                _add_edge(graph, Edge(
                    origin_stop_id=a.id,
                    target_stop_id=b.id,
                    line_id=WALK_LINE_ID,
                    line_label=WALK_LINE_LABEL,
                    distance=dist_km,
                    time=walk_time,
                    origin_name=a.name,
                    target_name=b.name,
                ))
            walking_edges += 2

    elapsed = time.time() - start_time
    logger.info(f"Built {walking_edges} walking edges from {len(located)} located stops in {elapsed:.2f} seconds")
    return walking_edges

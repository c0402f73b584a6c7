import itertools
import logging
from dataclasses import dataclass
from heapq import heappop, heappush
from typing import Collection, Dict, List, Optional, Tuple

from ..graph import TransitGraph
from ..models import Edge, Itinerary, RouteSegment, SearchState, StopSnapshot
from .cost_functions import is_transfer, make_cost_function, path_cost

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PathResult:
    """Raw search result: visited stops, traversed edges and cost under one mode"""
    stops: Tuple[int, ...]
    edges: Tuple[Edge, ...]
    cost: float

    def signature(self) -> tuple:
        """Ordered (from, to, line) hops; two paths with the same signature are the same itinerary"""
        return tuple(edge.key for edge in self.edges)


def shortest_path(graph: TransitGraph, source, target, mode: str = 'balanced',
                  excluded_edges: Optional[Collection[tuple]] = None,
                  excluded_stops: Optional[Collection] = None,
                  start_line: Optional[int] = None) -> Optional[PathResult]:
    """Dijkstra over (stop, current line) states.

    The same stop reached on different lines is kept as distinct states so the
    transfer penalty is charged only on an actual line change. ``excluded_edges``
    holds (from, to, line) triples; ``excluded_stops`` are never entered as
    intermediate stops (the source and target are exempt). Returns None when the
    target cannot be reached.
    """
    cost_func = make_cost_function(mode)
    excluded_edges = excluded_edges or frozenset()
    excluded_stops = excluded_stops or frozenset()

    start = SearchState(source, start_line)
    dist: Dict[SearchState, float] = {start: 0.0}
    prev: Dict[SearchState, Tuple[SearchState, Edge]] = {}
    counter = itertools.count()
    heap = [(0.0, next(counter), start)]

    while heap:
        current_dist, _, state = heappop(heap)
        if current_dist > dist[state]:
            continue  # stale entry

        if state.stop_id == target:
            return _build_path(source, state, prev, current_dist)

        if state.stop_id in excluded_stops and state.stop_id != source:
            continue

        for edge in graph.get_edges(state.stop_id):
            if edge.target_stop_id in excluded_stops and edge.target_stop_id != target:
                continue
            if edge.key in excluded_edges:
                continue

            new_dist = current_dist + cost_func(edge, is_transfer(state.line_id, edge))
            next_state = SearchState(edge.target_stop_id, edge.line_id)
            if next_state not in dist or new_dist < dist[next_state]:
                dist[next_state] = new_dist
                prev[next_state] = (state, edge)
                heappush(heap, (new_dist, next(counter), next_state))

    return None


def _build_path(source, state: SearchState, prev: Dict[SearchState, Tuple[SearchState, Edge]],
                cost: float) -> PathResult:
    edges = []
    while state in prev:
        state, edge = prev[state]
        edges.append(edge)
    edges.reverse()
    stops = (source,) + tuple(edge.target_stop_id for edge in edges)
    return PathResult(stops=stops, edges=tuple(edges), cost=cost)


def yen_k_shortest_paths(graph: TransitGraph, source, target, mode: str = 'balanced',
                         k: int = 3) -> List[PathResult]:
    """Return up to *k* loopless paths ordered by cost under *mode* (Yen's algorithm).

    Fewer than k paths is a normal outcome; an unreachable target gives an
    empty list.
    """
    cost_func = make_cost_function(mode)
    if k < 1:
        return []

    first = shortest_path(graph, source, target, mode)
    if first is None:
        return []

    accepted = [first]        # Paths confirmed so far, in rank order
    candidates = []           # Pool of spur candidates not yet accepted
    seen = {first.signature()}

    while len(accepted) < k:
        previous = accepted[-1]
        for i in range(len(previous.stops) - 1):
            spur_node = previous.stops[i]
            root_stops = previous.stops[:i + 1]
            root_edges = previous.edges[:i]

            # Block the hop every accepted path with this root takes out of the spur node
            excluded_edges = {
                path.edges[i].key
                for path in accepted
                if len(path.stops) > i + 1 and path.stops[:i + 1] == root_stops
            }
            # The spur path may not loop back through its own root
            excluded_stops = set(root_stops[:-1])
            # Continue on the root's last line so the junction transfer is charged exactly
            start_line = root_edges[-1].line_id if root_edges else None

            spur = shortest_path(
                graph, spur_node, target, mode,
                excluded_edges=excluded_edges,
                excluded_stops=excluded_stops,
                start_line=start_line,
            )
            if spur is None:
                continue

            edges = root_edges + spur.edges
            candidate = PathResult(
                stops=root_stops[:-1] + spur.stops,
                edges=edges,
                cost=path_cost(edges, cost_func),
            )
            signature = candidate.signature()
            if signature in seen:
                continue
            seen.add(signature)
            candidates.append(candidate)

        if not candidates:
            logger.debug(f"Only {len(accepted)} distinct paths between {source} and {target}")
            break

        # Cheapest candidate; ties go to the one found first
        best_index = min(range(len(candidates)), key=lambda n: candidates[n].cost)
        accepted.append(candidates.pop(best_index))

    return accepted


def _snapshot(graph: TransitGraph, stop_id, name: str) -> StopSnapshot:
    stop = graph.get_stop(stop_id)
    return StopSnapshot(
        id=stop_id,
        name=name or stop.name,
        latitude=stop.latitude,
        longitude=stop.longitude,
    )


def reconstruct_itinerary(graph: TransitGraph, path: PathResult) -> Itinerary:
    """Merge consecutive same-line edges into segments and compute totals"""
    segments: List[RouteSegment] = []
    current: Optional[RouteSegment] = None
    for edge in path.edges:
        if current is None or current.line_id != edge.line_id:
            current = RouteSegment(
                line_id=edge.line_id,
                line_label=edge.line_label,
                stops=[_snapshot(graph, edge.origin_stop_id, edge.origin_name)],
            )
            segments.append(current)
        current.stops.append(_snapshot(graph, edge.target_stop_id, edge.target_name))
        current.distance += edge.distance
        current.time += edge.time

    # Walking legs connect rides; they are neither transfers nor counted stops
    ride_segments = [s for s in segments if not s.is_walk]
    boundaries = max(0, len(ride_segments) - 1)
    total_stops = sum(len(s.stops) for s in ride_segments) - boundaries

    return Itinerary(
        segments=segments,
        total_distance=round(sum(s.distance for s in segments), 2),
        total_time=round(sum(s.time for s in segments), 1),
        total_transfers=boundaries,
        total_stops=total_stops,
        cost=path.cost,
    )


def find_routes(graph: TransitGraph, source, target, mode: str = 'balanced',
                k: int = 3) -> List[Itinerary]:
    """Up to k distinct itineraries from source to target, best first.

    Callers validate the stop ids; an unknown id simply yields no route.
    """
    paths = yen_k_shortest_paths(graph, source, target, mode, k)
    logger.debug(f"find_routes {source} -> {target} mode={mode} k={k}: {len(paths)} paths")
    return [reconstruct_itinerary(graph, path) for path in paths]

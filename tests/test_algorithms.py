"""
Tests for the state-space search, Yen's k-shortest paths and itinerary reconstruction.
"""

import pytest

from aynarouting.exceptions import UnknownModeError
from aynarouting.models import WALK_LINE_ID, Edge
from aynarouting.routing import (
    find_routes,
    make_cost_function,
    path_cost,
    shortest_path,
    yen_k_shortest_paths,
)
from aynarouting.routing.cost_functions import is_transfer
from conftest import build_graph, make_line, make_stop, make_timetable


@pytest.fixture
def express_vs_local_graph():
    """Line 1 runs A -> B -> D in 20 min; line 2 runs A -> B in 6 min.

    Reaching B fastest (line 2) and reaching D fastest (line 1 all the way)
    need different arrival lines at B.
    """
    stops = [make_stop(1, 0.0, name="A"), make_stop(2, 1.0, name="B"), make_stop(4, 2.0, name="D")]
    lines = [make_line(1, duration=20), make_line(2, duration=6)]
    timetable = make_timetable(1, [1, 2, 4]) + make_timetable(2, [1, 2])
    return build_graph(stops, lines, timetable)


@pytest.fixture
def two_alternatives_graph():
    """Line 1 runs A -> B in 10 min; line 2 runs A -> C -> B in 20 min."""
    stops = [make_stop(1, 0.0, name="A"), make_stop(2, 1.0, name="B"), make_stop(3, 2.0, name="C")]
    lines = [make_line(1, duration=10), make_line(2, duration=20)]
    timetable = make_timetable(1, [1, 2]) + make_timetable(2, [1, 3, 2])
    return build_graph(stops, lines, timetable)


def _edge(line_id=7, distance=2.0, time=10.0):
    return Edge(origin_stop_id=1, target_stop_id=2, line_id=line_id, line_label=str(line_id),
                distance=distance, time=time)


# ---- cost functions ----

def test_cost_function_values():
    edge = _edge()

    assert make_cost_function('shortest')(edge, False) == pytest.approx(2.0)
    assert make_cost_function('shortest')(edge, True) == pytest.approx(2.5)
    assert make_cost_function('fastest')(edge, False) == pytest.approx(10.0)
    assert make_cost_function('fastest')(edge, True) == pytest.approx(15.0)
    assert make_cost_function('balanced')(edge, False) == pytest.approx(5.6)
    assert make_cost_function('balanced')(edge, True) == pytest.approx(7.6)


def test_unknown_mode_is_rejected():
    with pytest.raises(UnknownModeError):
        make_cost_function('cheapest')


def test_is_transfer():
    assert not is_transfer(None, _edge(7))
    assert not is_transfer(7, _edge(7))
    assert is_transfer(7, _edge(12))
    assert is_transfer(7, _edge(WALK_LINE_ID))
    assert is_transfer(WALK_LINE_ID, _edge(12))


def test_path_cost_charges_line_changes():
    edges = [_edge(7, time=10.0), _edge(WALK_LINE_ID, time=3.0), _edge(12, time=10.0)]
    fastest = make_cost_function('fastest')

    assert path_cost(edges, fastest) == pytest.approx(10.0 + 3.0 + 5.0 + 10.0 + 5.0)
    assert path_cost(edges[:1], fastest, start_line=12) == pytest.approx(15.0)
    assert path_cost([], fastest) == 0.0


# ---- shortest path ----

def test_shortest_path_single_line(single_line_graph):
    path = shortest_path(single_line_graph, 1, 3, 'fastest')

    assert path.stops == (1, 2, 3)
    assert path.cost == pytest.approx(30.0)
    assert path.signature() == ((1, 2, 7), (2, 3, 7))


def test_shortest_path_unreachable(single_line_graph):
    assert shortest_path(single_line_graph, 3, 1, 'fastest') is None
    assert shortest_path(single_line_graph, 999, 1, 'fastest') is None


def test_search_state_includes_arrival_line(express_vs_local_graph):
    path = shortest_path(express_vs_local_graph, 1, 4, 'fastest')

    assert path.cost == pytest.approx(20.0)
    assert {edge.line_id for edge in path.edges} == {1}


def test_excluded_edges_and_stops(two_alternatives_graph):
    path = shortest_path(two_alternatives_graph, 1, 2, 'fastest', excluded_edges={(1, 2, 1)})
    assert path.stops == (1, 3, 2)

    assert shortest_path(
        two_alternatives_graph, 1, 2, 'fastest',
        excluded_edges={(1, 2, 1)}, excluded_stops={3},
    ) is None


def test_start_line_charges_first_transfer(two_alternatives_graph):
    path = shortest_path(two_alternatives_graph, 1, 2, 'fastest', start_line=2)

    # Staying on line 2 costs 20; switching to line 1 costs 10 + 5
    assert path.cost == pytest.approx(15.0)
    assert path.edges[0].line_id == 1


# ---- Yen's k shortest paths ----

def test_single_route_with_k3(single_line_graph):
    paths = yen_k_shortest_paths(single_line_graph, 1, 3, 'balanced', k=3)
    assert len(paths) == 1


def test_k_below_one_returns_nothing(single_line_graph):
    assert yen_k_shortest_paths(single_line_graph, 1, 3, 'fastest', k=0) == []


def test_alternatives_are_ranked_and_distinct(two_alternatives_graph):
    paths = yen_k_shortest_paths(two_alternatives_graph, 1, 2, 'fastest', k=3)

    assert [p.cost for p in paths] == pytest.approx([10.0, 20.0])
    assert len({p.signature() for p in paths}) == len(paths)


@pytest.mark.parametrize('mode', ['shortest', 'fastest', 'balanced'])
def test_costs_are_non_decreasing(two_alternatives_graph, mode):
    paths = yen_k_shortest_paths(two_alternatives_graph, 1, 2, mode, k=5)

    costs = [p.cost for p in paths]
    assert costs == sorted(costs)
    assert len(paths) == 2


def test_transfer_alternative_is_ranked_second(express_vs_local_graph):
    paths = yen_k_shortest_paths(express_vs_local_graph, 1, 4, 'fastest', k=3)

    assert [p.cost for p in paths] == pytest.approx([20.0, 21.0])
    assert [e.line_id for e in paths[1].edges] == [2, 1]


# ---- reconstruction ----

def test_single_line_itinerary(single_line_graph):
    routes = find_routes(single_line_graph, 1, 3, 'fastest', 1)

    assert len(routes) == 1
    route = routes[0]
    assert len(route.segments) == 1
    assert route.total_time == 30.0
    assert route.total_transfers == 0
    assert route.total_stops == 3
    assert route.total_distance == pytest.approx(1.0)
    assert [s.id for s in route.segments[0].stops] == [1, 2, 3]


def test_walk_transfer_itinerary(walk_transfer_graph):
    routes = find_routes(walk_transfer_graph, 10, 20, 'balanced', 3)

    assert len(routes) == 1
    route = routes[0]
    assert [s.line_label for s in route.segments] == ['7', 'Walk', '12']
    assert route.total_transfers == 1
    assert route.total_stops == 3
    assert route.segments[1].is_walk
    assert route.segments[1].time == pytest.approx(3.33, abs=0.01)
    assert route.total_time == pytest.approx(63.3)
    assert route.total_distance == pytest.approx(2.25)


def test_transfer_itinerary_segments(express_vs_local_graph):
    routes = find_routes(express_vs_local_graph, 1, 4, 'fastest', 2)

    assert len(routes) == 2
    best, second = routes
    assert len(best.segments) == 1
    assert best.total_transfers == 0
    assert [s.line_id for s in second.segments] == [2, 1]
    assert [s.name for s in second.segments[0].stops] == ['A', 'B']
    assert second.total_transfers == 1
    assert second.total_stops == 3
    assert second.cost == pytest.approx(21.0)
    assert best.signature() != second.signature()


def test_itinerary_serialization(walk_transfer_graph):
    data = find_routes(walk_transfer_graph, 10, 20)[0].to_dict()

    assert set(data) == {'segments', 'totalDistance', 'totalTime', 'totalTransfers', 'totalStops', 'cost'}
    walk = data['segments'][1]
    assert walk['isWalk'] is True
    assert walk['lineId'] == WALK_LINE_ID
    assert [s['name'] for s in walk['stops']] == ['Market', 'Square']


def test_no_route_is_empty(single_line_graph):
    assert find_routes(single_line_graph, 3, 1) == []
    assert find_routes(single_line_graph, 1, 999) == []


def test_same_source_and_target(single_line_graph):
    routes = find_routes(single_line_graph, 2, 2)

    assert len(routes) == 1
    assert routes[0].segments == []
    assert routes[0].total_stops == 0


def test_find_routes_unknown_mode(single_line_graph):
    with pytest.raises(UnknownModeError):
        find_routes(single_line_graph, 1, 3, 'scenic')

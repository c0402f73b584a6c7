"""Pytest configuration and fixtures."""

import pytest

from aynarouting.api import create_app
from aynarouting.config import Config
from aynarouting.core_route_service import RouteService
from aynarouting.data_loader import InMemoryDataSource
from aynarouting.graph import TransitGraph
from aynarouting.models import BusLine, Stop, TimetableEntry
from aynarouting.utils.geo_utils import KM_PER_DEGREE_LAT

BASE_LAT = 40.40
BASE_LON = 49.85


def north(km: float) -> float:
    """Latitude lying km due north of the base point"""
    return BASE_LAT + km / KM_PER_DEGREE_LAT


def make_stop(stop_id, km_north=0.0, name=None, lon=BASE_LON, **kwargs) -> Stop:
    return Stop(
        id=stop_id,
        code=f"C{stop_id}",
        name=name or f"S{stop_id}",
        latitude=north(km_north),
        longitude=lon,
        **kwargs,
    )


def make_line(line_id, number=None, duration=None) -> BusLine:
    return BusLine(
        id=line_id,
        carrier="Test Carrier",
        number=number or str(line_id),
        duration_minutes=duration,
    )


def make_timetable(line_id, stop_ids, direction_id=1):
    return [
        TimetableEntry(line_id=line_id, direction_id=direction_id, position=position, stop_id=stop_id)
        for position, stop_id in enumerate(stop_ids, start=1)
    ]


def build_graph(stops, lines, timetable, **kwargs) -> TransitGraph:
    return TransitGraph.from_records(stops, lines, timetable, **kwargs)


@pytest.fixture
def single_line_records():
    """S1 -> S2 -> S3 on line 7 (30 minutes), stops 500 m apart."""
    stops = [make_stop(1, 0.0), make_stop(2, 0.5), make_stop(3, 1.0)]
    lines = [make_line(7, duration=30)]
    timetable = make_timetable(7, [1, 2, 3])
    return stops, lines, timetable


@pytest.fixture
def walk_transfer_records():
    """Line 7 runs S10 -> S1, line 12 runs S4 -> S20; S1 and S4 are 250 m apart."""
    stops = [
        make_stop(10, 0.0, name="Depot"),
        make_stop(1, 1.0, name="Market"),
        make_stop(4, 1.25, name="Square"),
        make_stop(20, 2.25, name="Harbour"),
    ]
    lines = [make_line(7), make_line(12)]
    timetable = make_timetable(7, [10, 1]) + make_timetable(12, [4, 20])
    return stops, lines, timetable


@pytest.fixture
def single_line_graph(single_line_records):
    return build_graph(*single_line_records)


@pytest.fixture
def walk_transfer_graph(walk_transfer_records):
    return build_graph(*walk_transfer_records)


@pytest.fixture
def route_service(walk_transfer_records):
    return RouteService(InMemoryDataSource(*walk_transfer_records), Config())


@pytest.fixture
def client(route_service):
    app = create_app(route_service)
    app.config['TESTING'] = True
    with app.test_client() as test_client:
        yield test_client

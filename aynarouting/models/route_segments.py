from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# Line identifier and label carried by walking-transfer edges
WALK_LINE_ID = -1
WALK_LINE_LABEL = 'Walk'


@dataclass(frozen=True)
class Edge:
    """Directed arc between two stops, either a bus ride or a walking transfer"""
    origin_stop_id: int
    target_stop_id: int
    line_id: int
    line_label: str
    distance: float  # km
    time: float  # minutes
    origin_name: str = ''
    target_name: str = ''

    @property
    def is_walk(self) -> bool:
        return self.line_id == WALK_LINE_ID

    @property
    def key(self):
        """(from, to, line) triple used to exclude this edge from a search"""
        return (self.origin_stop_id, self.target_stop_id, self.line_id)


@dataclass(frozen=True)
class SearchState:
    """Shortest-path state: a stop plus the line the traveller arrived on"""
    stop_id: int
    line_id: Optional[int] = None


@dataclass(frozen=True)
class StopSnapshot:
    id: int
    name: str
    latitude: float
    longitude: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'latitude': self.latitude,
            'longitude': self.longitude,
        }


@dataclass
class RouteSegment:
    """Maximal run of an itinerary served by one bus line or one walking leg"""
    line_id: int
    line_label: str
    stops: List[StopSnapshot] = field(default_factory=list)
    distance: float = 0.0
    time: float = 0.0

    @property
    def is_walk(self) -> bool:
        return self.line_id == WALK_LINE_ID

    def to_dict(self) -> Dict[str, Any]:
        return {
            'lineId': self.line_id,
            'lineLabel': self.line_label,
            'isWalk': self.is_walk,
            'stops': [s.to_dict() for s in self.stops],
            'distance': self.distance,
            'time': self.time,
        }


@dataclass
class Itinerary:
    """Complete itinerary with all segments"""
    segments: List[RouteSegment]
    total_distance: float
    total_time: float
    total_transfers: int
    total_stops: int
    cost: float = 0.0

    def signature(self):
        """Line id and ordered stop ids of every segment"""
        return tuple(
            (seg.line_id, tuple(s.id for s in seg.stops)) for seg in self.segments
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'segments': [s.to_dict() for s in self.segments],
            'totalDistance': self.total_distance,
            'totalTime': self.total_time,
            'totalTransfers': self.total_transfers,
            'totalStops': self.total_stops,
            'cost': round(self.cost, 4),
        }

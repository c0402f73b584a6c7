from .records import BusLine, Stop, TimetableEntry
from .route_segments import (
    WALK_LINE_ID,
    WALK_LINE_LABEL,
    Edge,
    Itinerary,
    RouteSegment,
    SearchState,
    StopSnapshot,
)

__all__ = [
    'BusLine', 'Stop', 'TimetableEntry',
    'WALK_LINE_ID', 'WALK_LINE_LABEL',
    'Edge', 'Itinerary', 'RouteSegment', 'SearchState', 'StopSnapshot',
]

"""
Custom exceptions for the Ayna routing engine
"""


class AynaRoutingError(Exception):
    """Base exception for the Ayna routing engine"""
    pass


class DataSourceError(AynaRoutingError):
    """Raised when stops, bus lines or timetable entries cannot be retrieved"""
    pass


class GraphBuildError(AynaRoutingError):
    """Raised when graph building fails"""
    pass


class InvalidQueryError(AynaRoutingError, ValueError):
    """Raised when a route query is malformed (equal endpoints, bad k, ...)"""
    pass


class UnknownModeError(InvalidQueryError):
    """Raised when an optimization mode is not one of shortest/fastest/balanced"""
    pass


class StopNotFoundError(InvalidQueryError):
    """Raised when a stop identifier is not present in the graph"""

    def __init__(self, stop_id, role: str = 'Stop'):
        self.stop_id = stop_id
        self.role = role
        super().__init__(f"{role} stop {stop_id} not found")

# Cost functions for the state-space search, one per optimization mode

from typing import Callable, Iterable, Optional

from ..config import OPTIMIZATION_MODES
from ..exceptions import UnknownModeError
from ..models import Edge

TRANSFER_PENALTY_DISTANCE = 0.5  # km equivalent
TRANSFER_PENALTY_TIME = 5.0  # minutes

# Balanced mode blends distance and time; transfers weigh 0.2 of a 10-unit penalty
BALANCED_DISTANCE_WEIGHT = 0.3
BALANCED_TIME_WEIGHT = 0.5
BALANCED_TRANSFER_WEIGHT = 0.2
BALANCED_TRANSFER_UNITS = 10.0

CostFunction = Callable[[Edge, bool], float]


def is_transfer(current_line: Optional[int], edge: Edge) -> bool:
    """A change of line; walking counts as its own line"""
    return current_line is not None and current_line != edge.line_id


def make_cost_function(mode: str) -> CostFunction:
    """Create the edge cost function for an optimization mode"""
    if mode not in OPTIMIZATION_MODES:
        raise UnknownModeError(f"Unknown optimization mode: {mode!r}")

    if mode == 'shortest':
        def cost(edge: Edge, transfer: bool) -> float:
            return edge.distance + (TRANSFER_PENALTY_DISTANCE if transfer else 0.0)
    elif mode == 'fastest':
        def cost(edge: Edge, transfer: bool) -> float:
            return edge.time + (TRANSFER_PENALTY_TIME if transfer else 0.0)
    else:
        def cost(edge: Edge, transfer: bool) -> float:
            penalty = BALANCED_TRANSFER_WEIGHT * BALANCED_TRANSFER_UNITS if transfer else 0.0
            return (BALANCED_DISTANCE_WEIGHT * edge.distance
                    + BALANCED_TIME_WEIGHT * edge.time
                    + penalty)

    return cost


def path_cost(edges: Iterable[Edge], cost_func: CostFunction,
              start_line: Optional[int] = None) -> float:
    """Total cost of an edge sequence, charging transfers the way the search does"""
    total = 0.0
    current_line = start_line
    for edge in edges:
        total += cost_func(edge, is_transfer(current_line, edge))
        current_line = edge.line_id
    return total

from .algorithms import find_routes, reconstruct_itinerary, shortest_path, yen_k_shortest_paths
from .cost_functions import make_cost_function, path_cost

__all__ = [
    'find_routes', 'reconstruct_itinerary', 'shortest_path', 'yen_k_shortest_paths',
    'make_cost_function', 'path_cost',
]

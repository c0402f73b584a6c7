from .geo_utils import bounding_box_deltas, haversine_distance, nearby_stops, vectorized_haversine

__all__ = ['bounding_box_deltas', 'haversine_distance', 'nearby_stops', 'vectorized_haversine']

import math
from typing import Iterable, List, Tuple

import numpy as np

EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE_LAT = EARTH_RADIUS_KM * math.pi / 180.0


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate haversine distance between two points in kilometers"""
    lat1_rad = math.radians(lat1)
    lon1_rad = math.radians(lon1)
    lat2_rad = math.radians(lat2)
    lon2_rad = math.radians(lon2)
    dlat = lat2_rad - lat1_rad
    dlon = lon2_rad - lon1_rad
    a = (math.sin(dlat/2)**2 +
         math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon/2)**2)
    c = 2 * math.asin(math.sqrt(a))
    return EARTH_RADIUS_KM * c


def vectorized_haversine(lat1, lon1, lat2, lon2):
    """Vectorized haversine distance in kilometers using numpy"""
    lat1, lon1, lat2, lon2 = map(np.radians, [lat1, lon1, lat2, lon2])

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = np.sin(dlat/2)**2 + np.cos(lat1) * np.cos(lat2) * np.sin(dlon/2)**2
    c = 2 * np.arcsin(np.sqrt(a))

    return EARTH_RADIUS_KM * c


def bounding_box_deltas(lat: float, radius_km: float) -> Tuple[float, float]:
    """Degree deltas (lat, lon) of a box that contains every point within radius_km of lat.

    The longitude delta uses the latitude farthest from the equator inside the box,
    where a degree of longitude is shortest.
    """
    dlat = radius_km / KM_PER_DEGREE_LAT
    widest_lat = min(abs(lat) + dlat, 89.9)
    dlon = radius_km / (KM_PER_DEGREE_LAT * math.cos(math.radians(widest_lat)))
    # 1% slack so pairs sitting exactly on the radius are not cut by rounding
    return dlat * 1.01, dlon * 1.01


def nearby_stops(lat: float, lon: float, stops: Iterable, radius_km: float = 1.0,
                 limit: int = 20) -> List[Tuple[object, float]]:
    """Return (stop, distance_km) pairs within radius_km, closest first.

    Ties keep the order in which the stops were given. Stops without
    coordinates are ignored.
    """
    within = []
    for stop in stops:
        if not stop.has_coordinates:
            continue
        d = haversine_distance(lat, lon, stop.latitude, stop.longitude)
        if d <= radius_km:
            within.append((stop, d))
    within.sort(key=lambda item: item[1])
    return within[:max(limit, 0)]

"""Input records supplied by the data source."""

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Stop:
    """A physical bus stop"""
    id: int
    code: str
    name: str
    latitude: Optional[float]
    longitude: Optional[float]
    is_transport_hub: bool = False

    @property
    def has_coordinates(self) -> bool:
        return (
            self.latitude is not None and self.longitude is not None
            and math.isfinite(self.latitude) and math.isfinite(self.longitude)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'code': self.code,
            'name': self.name,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'is_transport_hub': self.is_transport_hub,
        }


@dataclass(frozen=True)
class BusLine:
    """A carrier-operated bus line; only id, number and duration matter for routing"""
    id: int
    carrier: str
    number: str
    duration_minutes: Optional[float] = None
    first_point: str = ''
    last_point: str = ''
    route_length: Optional[float] = None
    tariff: Optional[int] = None
    tariff_str: str = ''
    region_id: Optional[int] = None
    working_zone_type_id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'carrier': self.carrier,
            'number': self.number,
            'first_point': self.first_point,
            'last_point': self.last_point,
            'route_length': self.route_length,
            'tariff': self.tariff,
            'tariff_str': self.tariff_str,
            'region_id': self.region_id,
            'working_zone_type_id': self.working_zone_type_id,
            'duration_minutes': self.duration_minutes,
        }


@dataclass(frozen=True)
class TimetableEntry:
    """One stop visited by one bus line in one direction"""
    line_id: int
    direction_id: int
    position: int  # ordinal position along the direction
    stop_id: int
    stop_name: str = ''
    stop_code: str = ''

"""
Data sources for the transit graph.

A data source supplies three independent record sets: stops, bus lines and
timetable entries. ``fetch_records`` retrieves them concurrently.
"""

import logging
import os
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import List, Sequence, Tuple

import pandas as pd

from .exceptions import DataSourceError
from .models import BusLine, Stop, TimetableEntry

logger = logging.getLogger(__name__)

STOPS_FILE = 'stops.csv'
LINES_FILE = 'buses.csv'
TIMETABLE_FILE = 'bus_stops.csv'


class DataSource(ABC):
    """Interface for anything that can supply the three record sets"""

    @abstractmethod
    def load_stops(self) -> List[Stop]:
        ...

    @abstractmethod
    def load_lines(self) -> List[BusLine]:
        ...

    @abstractmethod
    def load_timetable(self) -> List[TimetableEntry]:
        ...


class InMemoryDataSource(DataSource):
    """Records already held in memory"""

    def __init__(self, stops: Sequence[Stop], lines: Sequence[BusLine],
                 timetable: Sequence[TimetableEntry]):
        self.stops = list(stops)
        self.lines = list(lines)
        self.timetable = list(timetable)

    def load_stops(self) -> List[Stop]:
        return list(self.stops)

    def load_lines(self) -> List[BusLine]:
        return list(self.lines)

    def load_timetable(self) -> List[TimetableEntry]:
        return list(self.timetable)


def _optional(value, cast):
    if pd.isnull(value):
        return None
    return cast(value)


def _text(value) -> str:
    return '' if pd.isnull(value) else str(value)


def _flag(value) -> bool:
    if pd.isnull(value):
        return False
    if isinstance(value, str):
        return value.strip().lower() in ('true', 't', '1', 'yes')
    return bool(value)


class CsvDataSource(DataSource):
    """Reads stops.csv, buses.csv and bus_stops.csv from a data directory"""

    def __init__(self, data_dir: str = 'data'):
        self.data_dir = data_dir

    def _read(self, filename: str, required: Sequence[str]) -> pd.DataFrame:
        path = os.path.join(self.data_dir, filename)
        try:
            df = pd.read_csv(path)
        except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise DataSourceError(f"Failed to load {path}: {e}") from e
        missing = [col for col in required if col not in df.columns]
        if missing:
            raise DataSourceError(f"{path} is missing columns: {', '.join(missing)}")
        return df

    def load_stops(self) -> List[Stop]:
        df = self._read(STOPS_FILE, ['id', 'name', 'latitude', 'longitude'])
        stops = []
        for _, row in df.iterrows():
            if pd.isnull(row['id']):
                logger.warning(f"Invalid stop row: {row.to_dict()}")
                continue
            stops.append(Stop(
                id=int(row['id']),
                code=_text(row.get('code')),
                name=_text(row['name']),
                latitude=_optional(row['latitude'], float),
                longitude=_optional(row['longitude'], float),
                is_transport_hub=_flag(row.get('is_transport_hub')),
            ))
        logger.info(f"Loaded {len(stops)} stops from {self.data_dir}")
        return stops

    def load_lines(self) -> List[BusLine]:
        df = self._read(LINES_FILE, ['id', 'number'])
        lines = []
        for _, row in df.iterrows():
            if pd.isnull(row['id']):
                logger.warning(f"Invalid bus row: {row.to_dict()}")
                continue
            lines.append(BusLine(
                id=int(row['id']),
                carrier=_text(row.get('carrier')),
                number=_text(row['number']),
                duration_minutes=_optional(row.get('duration_minuts'), float),
                first_point=_text(row.get('first_point')),
                last_point=_text(row.get('last_point')),
                route_length=_optional(row.get('route_length'), float),
                tariff=_optional(row.get('tariff'), int),
                tariff_str=_text(row.get('tariff_str')),
                region_id=_optional(row.get('region_id'), int),
                working_zone_type_id=_optional(row.get('working_zone_type_id'), int),
            ))
        logger.info(f"Loaded {len(lines)} bus lines from {self.data_dir}")
        return lines

    def load_timetable(self) -> List[TimetableEntry]:
        df = self._read(TIMETABLE_FILE, ['bus_stop_id', 'bus_id', 'stop_id', 'direction_type_id'])
        entries = []
        for _, row in df.iterrows():
            if pd.isnull(row['bus_id']) or pd.isnull(row['stop_id']) or pd.isnull(row['bus_stop_id']):
                logger.warning(f"Invalid bus_stops row: {row.to_dict()}")
                continue
            entries.append(TimetableEntry(
                line_id=int(row['bus_id']),
                direction_id=int(row['direction_type_id']) if not pd.isnull(row['direction_type_id']) else 0,
                position=int(row['bus_stop_id']),
                stop_id=int(row['stop_id']),
                stop_name=_text(row.get('stop_name')),
                stop_code=_text(row.get('stop_code')),
            ))
        logger.info(f"Loaded {len(entries)} timetable entries from {self.data_dir}")
        return entries


def fetch_records(source: DataSource) -> Tuple[List[Stop], List[BusLine], List[TimetableEntry]]:
    """Fetch stops, lines and timetable entries concurrently.

    Any failure is fatal and surfaces as DataSourceError.
    """
    with ThreadPoolExecutor(max_workers=3) as executor:
        futures = (
            executor.submit(source.load_stops),
            executor.submit(source.load_lines),
            executor.submit(source.load_timetable),
        )
        try:
            stops, lines, timetable = (future.result() for future in futures)
        except DataSourceError:
            raise
        except Exception as e:
            raise DataSourceError(f"Failed to fetch transit records: {e}") from e
    return stops, lines, timetable

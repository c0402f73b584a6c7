"""
Configuration management for the Ayna routing engine
"""

import os
from typing import Optional


OPTIMIZATION_MODES = ('shortest', 'fastest', 'balanced')


class Config:
    """Configuration class for the Ayna routing engine"""

    def __init__(self):
        # Data directory for the CSV data source
        self.data_dir: str = os.getenv('DATA_DIR', 'data')

        # Graph building parameters
        self.walk_radius_km: float = float(os.getenv('WALK_RADIUS_KM', '0.3'))
        self.walking_speed_kmh: float = float(os.getenv('WALKING_SPEED_KMH', '4.5'))
        self.default_line_duration_min: float = float(os.getenv('DEFAULT_LINE_DURATION_MIN', '30'))

        # Routing parameters
        self.default_route_count: int = int(os.getenv('DEFAULT_ROUTE_COUNT', '3'))
        self.max_route_count: int = int(os.getenv('MAX_ROUTE_COUNT', '10'))
        self.default_mode: str = os.getenv('DEFAULT_OPTIMIZATION_MODE', 'balanced')

        # Nearby stop search
        self.nearby_radius_km: float = float(os.getenv('NEARBY_RADIUS_KM', '1.0'))
        self.nearby_limit: int = int(os.getenv('NEARBY_LIMIT', '20'))

        # API configuration
        self.host: str = os.getenv('HOST', '0.0.0.0')
        self.port: int = int(os.getenv('PORT', '5000'))
        self.debug: bool = os.getenv('DEBUG', 'False').lower() == 'true'

        # Logging
        self.log_level: str = os.getenv('LOG_LEVEL', 'INFO')
        self.log_file: Optional[str] = os.getenv('LOG_FILE')

    def validate(self):
        """Validate configuration"""
        if self.walk_radius_km <= 0:
            raise ValueError("Walk radius must be positive")

        if self.walking_speed_kmh <= 0:
            raise ValueError("Walking speed must be positive")

        if self.default_line_duration_min <= 0:
            raise ValueError("Default line duration must be positive")

        if not 1 <= self.default_route_count <= self.max_route_count:
            raise ValueError(
                f"Default route count must be between 1 and {self.max_route_count}"
            )

        if self.default_mode not in OPTIMIZATION_MODES:
            raise ValueError(f"Unknown default optimization mode: {self.default_mode}")

    def get_graph_builder_config(self) -> dict:
        """Get keyword arguments for TransitGraph.from_records"""
        return {
            'walk_radius_km': self.walk_radius_km,
            'walking_speed_kmh': self.walking_speed_kmh,
            'default_duration_min': self.default_line_duration_min,
        }

    def get_router_config(self) -> dict:
        """Get defaults for RouteService.find_routes"""
        return {
            'default_mode': self.default_mode,
            'default_route_count': self.default_route_count,
            'max_route_count': self.max_route_count,
        }

    def get_api_config(self) -> dict:
        """Get configuration for Flask API"""
        return {
            'host': self.host,
            'port': self.port,
            'debug': self.debug
        }


# Global configuration instance
config = Config()

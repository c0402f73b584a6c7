__title__ = 'aynarouting'
__version__ = '1.0.0'
__author__ = 'Ayna Routing Team'
__license__ = 'MIT'

__all__ = ['config', 'logger', 'exceptions', 'core_route_service', 'data_loader', 'RouteService', 'find_routes']

# Set default logging handler to avoid "No handler found" warnings.
import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

from .core_route_service import RouteService  # noqa: E402
from .routing.algorithms import find_routes  # noqa: E402

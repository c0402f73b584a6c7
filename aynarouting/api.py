"""
Ayna Routing Engine - Flask Web API Blueprint
Multi-criteria bus route planning between stops
"""

import math
import time
from typing import Any, Dict, Optional

from flask import Blueprint, Flask, current_app, jsonify, request
from flask_cors import CORS

from .config import OPTIMIZATION_MODES
from .config import config as default_config
from .core_route_service import RouteService
from .data_loader import CsvDataSource
from .exceptions import AynaRoutingError, InvalidQueryError, StopNotFoundError
from .logger import logger

routing_bp = Blueprint('routing_bp', __name__)

SEARCH_SUGGESTION_LIMIT = 10


def get_route_service() -> RouteService:
    return current_app.extensions['route_service']


def validate_coordinates(lat: float, lon: float) -> bool:
    """Validate coordinate bounds"""
    return -90 <= lat <= 90 and -180 <= lon <= 180


def clean_nan_values(obj):
    """Recursively clean NaN values from objects to make them JSON serializable"""
    if isinstance(obj, dict):
        return {k: clean_nan_values(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [clean_nan_values(item) for item in obj]
    elif isinstance(obj, float) and (math.isnan(obj) or math.isinf(obj)):
        return None
    else:
        return obj


def generate_instruction(segment: Dict[str, Any]) -> str:
    """Generate instruction text for a serialized route segment"""
    stops = segment.get('stops') or []
    from_name = stops[0]['name'] if stops else 'Unknown'
    to_name = stops[-1]['name'] if stops else 'Unknown'
    if segment.get('isWalk'):
        return f"Walk from {from_name} to {to_name}"
    hops = max(len(stops) - 1, 0)
    plural = "" if hops == 1 else "s"
    return f"Take bus {segment.get('lineLabel')} from {from_name} to {to_name} ({hops} stop{plural})"


def format_itinerary(itinerary) -> Dict[str, Any]:
    out = itinerary.to_dict()
    for segment in out['segments']:
        segment['instruction'] = generate_instruction(segment)
    return clean_nan_values(out)


def _parse_float(value: Optional[str], default: Optional[float] = None) -> Optional[float]:
    if value is None or value == '':
        return default
    try:
        return float(value)
    except ValueError:
        return None


def _is_stop_id(value) -> bool:
    return isinstance(value, (int, str)) and not isinstance(value, bool)


@routing_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint"""
    service = get_route_service()
    return jsonify({
        'status': 'healthy',
        'message': 'Ayna Routing Engine is running',
        'graph_built': service.is_built(),
        'timestamp': time.time()
    })


@routing_bp.route('/', methods=['GET'])
def index():
    """Root endpoint"""
    return jsonify({
        'name': 'Ayna Routing Engine',
        'version': '1.0.0',
        'description': 'Multi-criteria bus route planning',
        'modes': list(OPTIMIZATION_MODES),
        'endpoints': {
            'health': '/routing/health',
            'stops': '/routing/stops',
            'nearby_stops': '/routing/stops/nearby',
            'search_stops': '/routing/search-stops',
            'buses': '/routing/buses',
            'find_routes': '/routing/routes/find',
            'data_status': '/routing/data-status',
        }
    })


@routing_bp.route('/stops', methods=['GET'])
def list_stops():
    try:
        stops = [stop.to_dict() for stop in get_route_service().list_stops()]
        return jsonify({'stops': clean_nan_values(stops)})
    except AynaRoutingError as e:
        logger.error(f"Failed to fetch stops: {e}")
        return jsonify({'error': 'Failed to fetch stops'}), 500


@routing_bp.route('/stops/nearby', methods=['GET'])
def stops_nearby():
    service = get_route_service()
    lat = _parse_float(request.args.get('lat'))
    lng = _parse_float(request.args.get('lng'))
    if lat is None or lng is None or not validate_coordinates(lat, lng):
        return jsonify({'error': 'lat and lng query parameters are required'}), 400

    radius = _parse_float(request.args.get('radius'), service.config.nearby_radius_km)
    if radius is None or radius <= 0:
        return jsonify({'error': 'radius must be a positive number'}), 400
    try:
        limit = int(request.args.get('limit', service.config.nearby_limit))
    except ValueError:
        return jsonify({'error': 'limit must be an integer'}), 400

    try:
        nearby = service.nearby_stops(lat, lng, radius, limit)
        return jsonify({'stops': clean_nan_values(nearby)})
    except AynaRoutingError as e:
        logger.error(f"Failed to fetch nearby stops: {e}")
        return jsonify({'error': 'Failed to fetch nearby stops'}), 500


@routing_bp.route('/search-stops', methods=['GET'])
def search_stops():
    """Search for stops by name or code"""
    query = request.args.get('q', '').strip().lower()
    if not query:
        return jsonify({'suggestions': []})
    try:
        suggestions = []
        for stop in get_route_service().list_stops():
            if query in stop.name.lower() or query == stop.code.lower():
                suggestions.append(stop.to_dict())
                if len(suggestions) >= SEARCH_SUGGESTION_LIMIT:
                    break
        return jsonify({'suggestions': clean_nan_values(suggestions)})
    except AynaRoutingError as e:
        logger.error(f"Error in search stops: {e}")
        return jsonify({'error': 'Internal server error'}), 500


@routing_bp.route('/buses', methods=['GET'])
def list_buses():
    try:
        buses = [line.to_dict() for line in get_route_service().list_lines()]
        return jsonify({'buses': clean_nan_values(buses)})
    except AynaRoutingError as e:
        logger.error(f"Failed to fetch buses: {e}")
        return jsonify({'error': 'Failed to fetch buses'}), 500


@routing_bp.route('/routes/find', methods=['POST'])
def find_routes():
    """Ranked itineraries between two stops"""
    data = request.get_json(silent=True)
    if not data:
        return jsonify({'error': 'No data provided'}), 400
    if not isinstance(data, dict):
        return jsonify({'error': 'Request body must be a JSON object'}), 400

    from_stop_id = data.get('fromStopId')
    to_stop_id = data.get('toStopId')
    if from_stop_id is None or to_stop_id is None:
        return jsonify({'error': 'fromStopId and toStopId are required'}), 400
    if not (_is_stop_id(from_stop_id) and _is_stop_id(to_stop_id)):
        return jsonify({'error': 'fromStopId and toStopId must be integers or strings'}), 400

    service = get_route_service()
    try:
        routes = service.find_routes(from_stop_id, to_stop_id, mode=data.get('mode'), k=data.get('k'))
    except StopNotFoundError as e:
        return jsonify({'error': str(e)}), 404
    except InvalidQueryError as e:
        return jsonify({'error': str(e)}), 400
    except AynaRoutingError as e:
        logger.error(f"Route finding failed: {e}")
        return jsonify({'error': 'Route computation failed'}), 500

    if not routes:
        return jsonify({'error': 'No route found between these stops'}), 404

    from_stop = service.get_stop(from_stop_id)
    to_stop = service.get_stop(to_stop_id)
    return jsonify({
        'from': {'id': from_stop.id, 'name': from_stop.name},
        'to': {'id': to_stop.id, 'name': to_stop.name},
        'mode': data.get('mode') or service.config.default_mode,
        'routes': [format_itinerary(route) for route in routes],
    })


@routing_bp.route('/data-status', methods=['GET'])
def data_status():
    return jsonify(get_route_service().status())


@routing_bp.route('/admin/reload', methods=['POST'])
def reload_graph():
    try:
        graph = get_route_service().reload()
    except AynaRoutingError as e:
        logger.error(f"Graph reload failed: {e}")
        return jsonify({'error': 'Graph reload failed'}), 500
    return jsonify({'message': 'Transit graph reloaded', 'stats': graph.stats()})


def create_app(route_service: Optional[RouteService] = None) -> Flask:
    """Create the Flask app with the routing blueprint under /routing"""
    app = Flask(__name__)
    CORS(app)
    if route_service is None:
        route_service = RouteService(CsvDataSource(default_config.data_dir))
    app.extensions['route_service'] = route_service
    app.register_blueprint(routing_bp, url_prefix='/routing')
    return app


if __name__ == '__main__':
    create_app().run(**default_config.get_api_config())

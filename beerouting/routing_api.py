"""
BeeRoute Recommendation Engine - Flask Web API Blueprint
Multi-criteria itinerary recommendations between two named places
"""

import math
import time
from typing import Optional

from flask import Blueprint, jsonify, request

from .config import config
from .core_route_service import RouteService
from .exceptions import BeeRoutingError, InputError
from .logger import logger
from .models.route_segments import PreferenceProfile, Priority, Sensitivity

routing_bp = Blueprint('routing_bp', __name__)

# Global route service instance, created on first use
route_service: Optional[RouteService] = None

_TRUE = {'true', '1', 'yes', 'on'}
_FALSE = {'false', '0', 'no', 'off', ''}


def initialize_route_service(service: Optional[RouteService] = None) -> RouteService:
    global route_service
    try:
        if service is None:
            config.validate()
            service = RouteService(config.data_dir)
        route_service = service
        logger.info("Route service initialized successfully")
        return route_service
    except Exception as e:
        logger.error(f"Failed to initialize route service: {e}")
        raise


def get_route_service() -> RouteService:
    if route_service is None:
        return initialize_route_service()
    return route_service


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


def _enum_arg(name: str, enum_cls, default):
    raw = request.args.get(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return enum_cls(raw.strip().lower())
    except ValueError:
        allowed = ', '.join(member.value for member in enum_cls)
        raise InputError(f"Invalid {name} {raw!r}; expected one of: {allowed}")


def _bags_arg() -> int:
    raw = request.args.get('bags', '0').strip() or '0'
    try:
        bags = int(raw)
    except ValueError:
        raise InputError(f"Invalid bags {raw!r}; expected a non-negative integer")
    if bags < 0:
        raise InputError(f"Invalid bags {raw!r}; expected a non-negative integer")
    return bags


def _bool_arg(name: str) -> bool:
    raw = request.args.get(name, '').strip().lower()
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise InputError(f"Invalid {name} {raw!r}; expected true or false")


def parse_preference() -> PreferenceProfile:
    return PreferenceProfile(
        priority=_enum_arg('priority', Priority, Priority.BALANCED),
        noise=_enum_arg('noise', Sensitivity, Sensitivity.MODERATE),
        safety=_enum_arg('safety', Sensitivity, Sensitivity.MODERATE),
        bags=_bags_arg(),
        wheelchair=_bool_arg('wheelchair'),
    )


def _error_response(error: BeeRoutingError):
    return jsonify({'error': error.public_message}), error.http_status


@routing_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint"""
    try:
        service = get_route_service()
        return jsonify({
            'status': 'healthy',
            'message': 'BeeRoute engine is running',
            'provider': service.provider.name,
            'timestamp': time.time()
        })
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return jsonify({'status': 'error', 'message': 'Route service unavailable'}), 500


@routing_bp.route('/routes', methods=['GET'])
def routes():
    """
    Ranked itineraries between two places.

    Query: from, to (required); priority, noise, safety, bags, wheelchair (optional).
    """
    start = time.time()
    origin = request.args.get('from', '').strip()
    destination = request.args.get('to', '').strip()
    priority = request.args.get('priority', Priority.BALANCED.value)

    try:
        if not origin or not destination:
            raise InputError()
        preference = parse_preference()
        result = get_route_service().find_routes(origin, destination, preference)
        if result['routes']:
            logger.debug(f"Top route {route_summary(result['routes'][0])}")
        logger.log_route_request(origin, destination, priority, (time.time() - start) * 1000,
                                 True, len(result['routes']))
        return jsonify(clean_nan_values(result))

    except BeeRoutingError as e:
        if e.http_status >= 500:
            logger.exception(f"Route calculation failed: {e}")
        else:
            logger.warning(f"Route request rejected ({e.http_status}): {e}")
        logger.log_route_request(origin, destination, priority, (time.time() - start) * 1000, False)
        return _error_response(e)

    except Exception as e:
        logger.exception(f"Unexpected error calculating routes: {e}")
        logger.log_route_request(origin, destination, priority, (time.time() - start) * 1000, False)
        return _error_response(BeeRoutingError())


def route_summary(route: dict) -> str:
    """One-line description of a route dict, used in debug logs"""
    modes = ' -> '.join(seg['mode'] for seg in route.get('segments', []))
    return f"{route.get('name')}: {route.get('duration')} min, ${route.get('cost')}, {modes}"

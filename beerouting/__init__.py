__title__ = 'beerouting'
__version__ = '1.0.0'
__author__ = 'BeeRoute Team'
__contact__ = 'beeroute@example.com'
__license__ = 'MIT'
__copyright__ = 'Copyright 2024 BeeRoute Team'

__all__ = [
    'core_route_service',
    'core_shape_generator',
    'CoreShapeGenerator',
    'candidate_generator',
    'location_resolver',
    'ranking',
    'scoring',
    'transit_context',
    'config',
    'logger',
    'exceptions',
]

# Set default logging handler to avoid "No handler found" warnings.
import logging
from logging import NullHandler

logging.getLogger(__name__).addHandler(NullHandler())

from .core_shape_generator import CoreShapeGenerator  # noqa: E402

"""
Configuration management for the BeeRoute engine
"""

import os
from typing import Optional


DEFAULT_DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'data')


def _optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or value.strip() == '':
        return None
    return int(value)


class Config:
    """Configuration class for the BeeRoute engine"""

    def __init__(self):
        # Reference data (locations, line shapes, street lines, borough facts)
        self.data_dir: str = os.getenv('DATA_DIR', DEFAULT_DATA_DIR)

        # Transit context provider; empty URL means the bundled static provider
        self.transit_api_url: str = os.getenv('TRANSIT_API_URL', '')
        self.transit_api_timeout: float = float(os.getenv('TRANSIT_API_TIMEOUT', '2.0'))

        # Ranking parameters
        self.max_routes: int = int(os.getenv('MAX_ROUTES', '6'))
        self.min_routes: int = int(os.getenv('MIN_ROUTES', '3'))

        # Seed for the per-request random source (jitter, fallback coordinates, path noise)
        self.random_seed: Optional[int] = _optional_int(os.getenv('RANDOM_SEED'))

        # Scoring ceilings and penalties (hand-tuned defaults, see scoring.ScoringParameters)
        self.scoring_t_max: float = float(os.getenv('SCORING_T_MAX', '120'))
        self.scoring_c_max: float = float(os.getenv('SCORING_C_MAX', '30'))
        self.scoring_transfer_penalty: float = float(os.getenv('SCORING_TRANSFER_PENALTY', '0.15'))
        self.scoring_bag_penalty: float = float(os.getenv('SCORING_BAG_PENALTY', '0.1'))
        self.scoring_accessibility_penalty: float = float(os.getenv('SCORING_ACCESSIBILITY_PENALTY', '0.5'))

        # API configuration
        self.host: str = os.getenv('HOST', '0.0.0.0')
        self.port: int = int(os.getenv('PORT', '5000'))
        self.debug: bool = os.getenv('DEBUG', 'False').lower() == 'true'

        # Logging
        self.log_level: str = os.getenv('LOG_LEVEL', 'INFO')
        self.log_file: Optional[str] = os.getenv('LOG_FILE')

    def validate(self):
        """Validate configuration"""
        if not os.path.exists(self.data_dir):
            raise ValueError(f"Data directory does not exist: {self.data_dir}")

        if self.transit_api_timeout <= 0:
            raise ValueError("Transit API timeout must be positive")

        if self.min_routes < 1 or self.max_routes < self.min_routes:
            raise ValueError("Route limits must satisfy 1 <= MIN_ROUTES <= MAX_ROUTES")

        if self.scoring_t_max <= 0 or self.scoring_c_max <= 0:
            raise ValueError("Scoring ceilings must be positive")

    def get_provider_config(self) -> dict:
        """Get configuration for the transit context provider"""
        return {
            'base_url': self.transit_api_url,
            'timeout': self.transit_api_timeout,
        }

    def get_ranking_config(self) -> dict:
        """Get configuration for ranking and assembly"""
        return {
            'max_routes': self.max_routes,
            'min_routes': self.min_routes,
        }

    def get_scoring_config(self) -> dict:
        """Get keyword overrides for scoring.ScoringParameters"""
        return {
            't_max': self.scoring_t_max,
            'c_max': self.scoring_c_max,
            'transfer_penalty': self.scoring_transfer_penalty,
            'bag_penalty': self.scoring_bag_penalty,
            'accessibility_penalty': self.scoring_accessibility_penalty,
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

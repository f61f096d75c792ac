"""
Logging configuration for the BeeRoute engine
"""

import logging
import os
import sys
from datetime import datetime
from typing import Optional

from .config import config


class BeeLogger:
    """Centralized logging for the BeeRoute engine"""

    def __init__(self, name: str = "beeroute", level: int = logging.INFO, log_file: Optional[str] = None):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)

        # Prevent duplicate handlers
        if not self.logger.handlers:
            self._setup_handlers(log_file)

    def _setup_handlers(self, log_file: Optional[str]):
        """Setup console and (optionally) file handlers"""
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.INFO)
        console_format = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        console_handler.setFormatter(console_format)
        self.logger.addHandler(console_handler)

        if log_file:
            log_dir = os.path.dirname(log_file) or 'logs'
            os.makedirs(log_dir, exist_ok=True)
            base, ext = os.path.splitext(os.path.basename(log_file))
            dated = os.path.join(log_dir, f'{base}_{datetime.now().strftime("%Y%m%d")}{ext or ".log"}')
            file_handler = logging.FileHandler(dated)
            file_handler.setLevel(logging.DEBUG)
            file_format = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
            )
            file_handler.setFormatter(file_format)
            self.logger.addHandler(file_handler)

    def info(self, message: str):
        """Log info message"""
        self.logger.info(message)

    def debug(self, message: str):
        """Log debug message"""
        self.logger.debug(message)

    def warning(self, message: str):
        """Log warning message"""
        self.logger.warning(message)

    def error(self, message: str):
        """Log error message"""
        self.logger.error(message)

    def exception(self, message: str):
        """Log error message with the active traceback"""
        self.logger.exception(message)

    def critical(self, message: str):
        """Log critical message"""
        self.logger.critical(message)

    def log_route_request(self, origin: str, destination: str, priority: str,
                          duration_ms: float, success: bool, route_count: int = 0):
        """Log route request metrics"""
        self.info(f"Route request: {origin!r} -> {destination!r}, priority={priority}, "
                  f"routes={route_count}, duration={duration_ms:.2f}ms, success={success}")

    def log_provider_call(self, provider_name: str, duration_ms: float, success: bool):
        """Log transit context provider call metrics"""
        self.info(f"Provider call: {provider_name}, duration={duration_ms:.2f}ms, success={success}")


# Global logger instance
logger = BeeLogger(level=getattr(logging, config.log_level.upper(), logging.INFO), log_file=config.log_file)

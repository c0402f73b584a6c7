"""
Logging configuration for the Ayna routing engine
"""

import logging
import sys
from typing import Optional

from .config import config


class AynaLogger:
    """Centralized logging for the Ayna routing engine"""

    def __init__(self, name: str = "aynarouting", level: Optional[str] = None,
                 log_file: Optional[str] = None):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, (level or config.log_level).upper(), logging.INFO))
        self.log_file = log_file if log_file is not None else config.log_file

        # Prevent duplicate handlers (the package only installs a NullHandler)
        if not any(not isinstance(h, logging.NullHandler) for h in self.logger.handlers):
            self._setup_handlers()

    def _setup_handlers(self):
        """Setup console and optional file handlers"""
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        self.logger.addHandler(console_handler)

        if self.log_file:
            file_handler = logging.FileHandler(self.log_file)
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
            ))
            self.logger.addHandler(file_handler)

    def info(self, message: str):
        self.logger.info(message)

    def debug(self, message: str):
        self.logger.debug(message)

    def warning(self, message: str):
        self.logger.warning(message)

    def error(self, message: str):
        self.logger.error(message)

    def exception(self, message: str):
        self.logger.exception(message)

    def log_route_request(self, source, target, mode: str, k: int,
                          duration_ms: float, found: int):
        """Log route request metrics"""
        self.info(f"Route request: {source} -> {target}, mode={mode}, k={k}, "
                  f"duration={duration_ms:.2f}ms, found={found}")

    def log_graph_build(self, nodes: int, edges: int, walking_edges: int, duration_ms: float):
        """Log graph build metrics"""
        self.info(f"Graph build: {nodes} nodes, {edges} edges "
                  f"({walking_edges} walking), duration={duration_ms:.2f}ms")


# Global logger instance
logger = AynaLogger()

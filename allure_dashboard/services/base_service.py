"""
Base Service - common base class for storage-backed services
"""
import logging


class BaseService:
    """
    Base class for services that work against the report bucket.
    Provides a named logger and logging helpers.
    """

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(f"service.{name}")

    def log_info(self, message: str):
        self.logger.info(f"[{self.name}] {message}")

    def log_warning(self, message: str):
        self.logger.warning(f"[{self.name}] {message}")

    def log_error(self, message: str):
        self.logger.error(f"[{self.name}] {message}")

    def log_debug(self, message: str):
        self.logger.debug(f"[{self.name}] {message}")

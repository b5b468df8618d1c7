"""HTTP server for the GreenBot relay and insight endpoints."""

from .app import create_app
from .log_config import configure_logging

__all__ = ["create_app", "configure_logging"]

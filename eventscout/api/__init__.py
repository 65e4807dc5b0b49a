"""HTTP API for Event Scout"""

from .main import create_app

__all__ = ["create_app"]

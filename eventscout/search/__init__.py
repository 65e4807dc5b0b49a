"""Search services"""

from .orchestrator import SearchOrchestrator

__all__ = ["SearchOrchestrator"]

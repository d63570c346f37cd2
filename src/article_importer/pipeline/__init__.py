"""Import run orchestration."""

from .orchestrator import Orchestrator

__all__ = ["Orchestrator"]

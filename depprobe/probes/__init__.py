"""
Probe components for locating dependencies
"""

from .dependency_probe import DependencyProbe
from .orchestrator import ProbeOrchestrator
from .search import expand_library_names, find_first

__all__ = [
    "DependencyProbe",
    "ProbeOrchestrator",
    "expand_library_names",
    "find_first",
]

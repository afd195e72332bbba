"""Holds exceptions used by depprobe"""

from typing import Dict, List, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from .probe import ProbeResult


class DependencyProbeError(RuntimeError):
    """Base exception for probe errors"""


class DependencyNotFoundError(DependencyProbeError):
    """Raised when a required dependency could not be located"""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Could NOT find {name}")


class MissingDependenciesError(DependencyNotFoundError):
    """
    Raised at the end of a multi-dependency run with required misses

    Carries the outcomes that were resolved before or alongside the misses,
    so callers can still report them.
    """

    def __init__(self,
                 names: List[str],
                 outcomes: Optional[Dict[str, Tuple[str, "ProbeResult"]]] = None):
        super().__init__(names[0])
        self.names = list(names)
        self.outcomes = dict(outcomes or {})
        if len(self.names) > 1:
            self.args = (f"Could NOT find {', '.join(self.names)}",)


class ConfigError(DependencyProbeError):
    """Raised when the dependency or platform configuration is invalid"""

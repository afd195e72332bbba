"""Contains models used by the dependency probe"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class FoundPolicy(str, Enum):
    """Which of the header and library searches must succeed"""

    REQUESTED = "requested"
    """Every search that has candidate names must succeed"""
    LIBRARY = "library"
    """Only the library has to be located"""
    HEADER = "header"
    """Only the header has to be located"""
    BOTH = "both"
    """Header and library both have to be located"""


class ProbeRequest(BaseModel):
    """Describes where and what to look for when probing a dependency"""
    model_config = ConfigDict(from_attributes=True)

    candidate_header_names: List[str] = Field(default_factory=list)
    """Header file names or glob patterns, in priority order"""
    candidate_header_dirs: List[str] = Field(default_factory=list)
    """Directories searched for headers, in priority order"""
    candidate_library_names: List[str] = Field(default_factory=list)
    """Library names or glob patterns, in priority order"""
    candidate_library_dirs: List[str] = Field(default_factory=list)
    """Directories searched for the library, in priority order"""
    required: bool = False
    """Absence of the dependency is fatal"""
    quiet: bool = False
    """Suppress the informational success message"""
    policy: FoundPolicy = FoundPolicy.REQUESTED
    """Rule combining the header and library outcomes"""
    header_override: Optional[str] = None
    """Explicit include directory, trusted without searching"""
    library_override: Optional[str] = None
    """Explicit library file, trusted without searching"""

    @property
    def header_requested(self) -> bool:
        """True if the caller asked for a header at all"""
        return bool(self.header_override) or bool(self.candidate_header_names)

    @property
    def library_requested(self) -> bool:
        """True if the caller asked for a library at all"""
        return bool(self.library_override) or bool(self.candidate_library_names)


class ProbeResult(BaseModel):
    """Outcome of probing a single dependency"""
    model_config = ConfigDict(from_attributes=True)

    found: bool = False
    header_path: str = ""
    """Directory holding the matching header, empty if none"""
    library_path: str = ""
    """Path of the matching library file, empty if none"""
    from_cache: bool = False
    """Set when the result was replayed from the probe cache"""

    @model_validator(mode="after")
    def _clear_paths_when_missing(self) -> "ProbeResult":
        """A not-found result never carries paths"""
        if not self.found:
            self.header_path = ""
            self.library_path = ""
        return self

    def variables(self, prefix: str) -> Dict[str, str]:
        """Returns the <PREFIX>_FOUND/_INCLUDE_DIR/_LIBRARIES variables"""
        return {
            f"{prefix}_FOUND": "TRUE" if self.found else "FALSE",
            f"{prefix}_INCLUDE_DIR": self.header_path,
            f"{prefix}_LIBRARIES": self.library_path,
        }

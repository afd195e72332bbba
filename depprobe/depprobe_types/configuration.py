"""Contains models used by the configuration loader"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from depprobe.depprobe_types.probe import FoundPolicy


class DependencyDescription(BaseModel):
    """One entry under ``dependencies:`` in dependencies.yaml"""
    model_config = ConfigDict(extra="forbid")

    prefix: Optional[str] = None
    """Variable prefix, defaults to the upper-cased dependency name"""
    headers: List[str] = Field(default_factory=list)
    """Header names or patterns to look for"""
    include_dirs: List[str] = Field(default_factory=list)
    """Directories searched for headers, may reference ${ENV_VARS}"""
    include_suffixes: List[str] = Field(default_factory=list)
    """Subdirectories also checked below every include dir"""
    libraries: List[str] = Field(default_factory=list)
    """Library names or patterns to look for"""
    library_dirs: List[str] = Field(default_factory=list)
    """Directories searched for the library, may reference ${ENV_VARS}"""
    library_suffixes: List[str] = Field(default_factory=list)
    """Subdirectories also checked below every library dir"""
    required: bool = False
    quiet: bool = False
    policy: FoundPolicy = FoundPolicy.REQUESTED
    system_paths: bool = True
    """Append the platform's default search dirs after the declared ones"""

    @field_validator("prefix")
    @classmethod
    def _prefix_is_identifier(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.replace("_", "a").isalnum():
            raise ValueError(f"prefix must be a variable name, got {value!r}")
        return value


class ProbeOptions(BaseModel):
    """The ``options:`` block of dependencies.yaml"""
    model_config = ConfigDict(extra="forbid")

    cache_file: Optional[str] = "build/.cache/probe_cache.json"
    """Where outcomes are kept between sessions, relative to the root dir"""
    parallel: bool = False
    max_workers: int = Field(default=4, ge=1)
    continue_on_error: bool = False
    """Keep probing after a required dependency is missing"""


class DependencyFile(BaseModel):
    """Root of dependencies.yaml"""
    model_config = ConfigDict(extra="forbid")

    dependencies: Dict[str, DependencyDescription] = Field(default_factory=dict)
    probe_order: Optional[List[str]] = None
    options: ProbeOptions = Field(default_factory=ProbeOptions)

"""
Configuration management for depprobe
"""

import os
import re
import yaml
from pathlib import Path
from typing import Dict, List, Any, Mapping, Optional

from pydantic import ValidationError

from ..depprobe_types.configuration import DependencyDescription, DependencyFile, ProbeOptions
from ..depprobe_types.exceptions import ConfigError
from ..depprobe_types.probe import ProbeRequest
from ..platform import PlatformConventions

_ENV_REFERENCE = re.compile(r"\$\{(\w+)\}")

DEFAULT_CONFIG_DIR = Path(__file__).parent


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Config not found: {path}")
    try:
        with open(path, 'r', encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return data


class ConfigLoader:
    """Loads and manages probe configuration"""

    def __init__(self, config_dir: Path, dependencies_file: Optional[Path] = None):
        """
        Initialize configuration loader

        Args:
            config_dir: Directory containing configuration files
            dependencies_file: Dependency file to use instead of
                config_dir/dependencies.yaml
        """
        self.config_dir = Path(config_dir)

        deps_file = Path(dependencies_file) if dependencies_file else self.config_dir / "dependencies.yaml"
        raw_deps = _load_yaml(deps_file)
        # An entry with no keys is valid YAML ("zlib:") and means "all defaults"
        declared = raw_deps.get("dependencies")
        if isinstance(declared, dict):
            for name, entry in declared.items():
                if entry is None:
                    declared[name] = {}
        elif declared is None:
            raw_deps.pop("dependencies", None)
        try:
            self.deps_config = DependencyFile.model_validate(raw_deps)
        except ValidationError as exc:
            raise ConfigError(f"Invalid {deps_file.name}: {exc}") from exc

        # Platform tables fall back to the packaged copy
        platforms_file = self.config_dir / "platforms.yaml"
        if not platforms_file.exists():
            platforms_file = DEFAULT_CONFIG_DIR / "platforms.yaml"
        self.platforms_config = _load_yaml(platforms_file)

        for name in self.get_probe_order():
            if not self.has_dependency(name):
                raise ConfigError(f"probe_order names unknown dependency: {name}")

    def get_dependencies(self) -> List[str]:
        """Get list of all dependencies"""
        return list(self.deps_config.dependencies.keys())

    def get_dependency_config(self, name: str) -> DependencyDescription:
        """
        Get configuration for a specific dependency

        Args:
            name: Dependency name

        Returns:
            Dependency description
        """
        deps = self.deps_config.dependencies
        if name not in deps:
            raise ConfigError(f"Unknown dependency: {name}")
        return deps[name]

    def has_dependency(self, name: str) -> bool:
        """Check if dependency exists"""
        return name in self.deps_config.dependencies

    def get_probe_order(self) -> List[str]:
        """Get probe order for dependencies"""
        return self.deps_config.probe_order or self.get_dependencies()

    def get_prefix(self, name: str) -> str:
        """Variable prefix used for <PREFIX>_FOUND and friends"""
        prefix = self.get_dependency_config(name).prefix
        return prefix or re.sub(r"\W", "_", name).upper()

    @property
    def options(self) -> ProbeOptions:
        return self.deps_config.options

    def get_platform_config(self, platform: str) -> Dict[str, Any]:
        """
        Get configuration for a specific platform

        Args:
            platform: Platform name (linux, macos, windows)

        Returns:
            Platform configuration dictionary
        """
        platforms = self.platforms_config.get("platforms", {})
        if platform not in platforms:
            raise ConfigError(f"Unknown platform: {platform}")
        return platforms[platform]

    def get_architecture_config(self, arch: str) -> Dict[str, Any]:
        """
        Get configuration for a specific architecture

        Args:
            arch: Architecture name

        Returns:
            Architecture configuration dictionary
        """
        architectures = self.platforms_config.get("architectures", {})

        # Check direct match
        if arch in architectures:
            return architectures[arch]

        # Check aliases
        for arch_config in architectures.values():
            if arch in arch_config.get("aliases", []):
                return arch_config

        # Default
        return {"bits": 64 if "64" in arch else 32}

    def get_supported_platforms(self) -> List[str]:
        return list(self.platforms_config.get("platforms", {}).keys())

    def build_request(self,
                      name: str,
                      conventions: PlatformConventions,
                      overrides: Optional[Mapping[str, str]] = None,
                      environ: Optional[Mapping[str, str]] = None) -> ProbeRequest:
        """
        Turn a dependency entry into a ProbeRequest

        Args:
            name: Dependency name
            conventions: Platform conventions supplying default search dirs
            overrides: User supplied variables, e.g. from -D on the command line
            environ: Environment for ${VAR} expansion and override variables

        Returns:
            ProbeRequest for the dependency
        """
        environ = os.environ if environ is None else environ
        overrides = overrides or {}
        dep = self.get_dependency_config(name)
        prefix = self.get_prefix(name)

        include_dirs = self._expand_dirs(dep.include_dirs, dep.include_suffixes, conventions, environ)
        library_dirs = self._expand_dirs(dep.library_dirs, dep.library_suffixes, conventions, environ)
        if dep.system_paths:
            include_dirs += self._expand_dirs(conventions.include_dirs, dep.include_suffixes,
                                              conventions, environ)
            library_dirs += self._expand_dirs(conventions.library_dirs, dep.library_suffixes,
                                              conventions, environ)

        def lookup(*variables: str) -> Optional[str]:
            for var in variables:
                value = overrides.get(var) or environ.get(var)
                if value:
                    return value
            return None

        return ProbeRequest(
            candidate_header_names=list(dep.headers),
            candidate_header_dirs=_unique(include_dirs),
            candidate_library_names=list(dep.libraries),
            candidate_library_dirs=_unique(library_dirs),
            required=dep.required,
            quiet=dep.quiet,
            policy=dep.policy,
            header_override=lookup(f"{prefix}_INCLUDE_DIR"),
            library_override=lookup(f"{prefix}_LIBRARY", f"{prefix}_LIBRARIES"),
        )

    @staticmethod
    def _expand_dirs(dirs: List[str],
                     suffixes: List[str],
                     conventions: PlatformConventions,
                     environ: Mapping[str, str]) -> List[str]:
        expanded = []
        for raw in dirs:
            path = expand_env_references(raw, environ)
            if not path:
                continue
            path = os.path.expanduser(path)
            expanded.append(path)
            for suffix in suffixes:
                expanded.append(conventions.join(path, suffix))
        return expanded


def expand_env_references(value: str, environ: Mapping[str, str]) -> Optional[str]:
    """
    Substitute ${VAR} references

    Returns None when a referenced variable is unset or empty, so the
    entry can be dropped instead of degrading into a root-relative path.
    """
    missing = False

    def substitute(match: "re.Match[str]") -> str:
        nonlocal missing
        replacement = environ.get(match.group(1), "")
        if not replacement:
            missing = True
        return replacement

    result = _ENV_REFERENCE.sub(substitute, value)
    if missing or not result:
        return None
    return result


def _unique(items: List[str]) -> List[str]:
    return list(dict.fromkeys(items))


__all__ = ["ConfigLoader", "expand_env_references", "DEFAULT_CONFIG_DIR"]

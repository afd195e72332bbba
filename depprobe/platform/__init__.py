"""
Platform detection and library naming conventions
"""

import os
import sys
import platform
from dataclasses import dataclass, field
from pathlib import PurePosixPath, PureWindowsPath
from typing import Any, Dict, List, Mapping, Optional


@dataclass
class PlatformConventions:
    """How libraries are named and where they live on a platform"""

    platform: str
    arch: str
    library_prefixes: List[str] = field(default_factory=lambda: ["lib"])
    library_suffixes: List[str] = field(default_factory=lambda: [".so", ".a"])
    include_dirs: List[str] = field(default_factory=list)
    library_dirs: List[str] = field(default_factory=list)

    @property
    def path_separator(self) -> str:
        return ";" if self.platform == "windows" else ":"

    def join(self, base: str, *parts: str) -> str:
        """Join path parts using the target platform's flavour"""
        flavour = PureWindowsPath if self.platform == "windows" else PurePosixPath
        return str(flavour(base, *parts))


class PlatformDetector:
    """Detects and provides information about the current platform"""

    def detect(self) -> Dict[str, Any]:
        """
        Detect current platform and architecture

        Returns:
            Dictionary with platform information
        """
        python_bits = 64 if sys.maxsize > 2**32 else 32
        return {
            "os": platform.system(),
            "platform": self._get_platform_name(),
            "arch": self._get_architecture(),
            "machine": platform.machine(),
            "python_version": sys.version,
            "python_bits": python_bits
        }

    def _get_platform_name(self) -> str:
        """Get normalized platform name"""
        system = platform.system().lower()

        if system == "linux":
            return "linux"
        elif system == "windows":
            return "windows"
        elif system == "darwin":
            return "macos"
        else:
            return system

    def _get_architecture(self) -> str:
        """Get normalized architecture based on Python interpreter"""
        # A 32-bit interpreter on a 64-bit OS links against 32-bit libraries
        python_bits = 64 if sys.maxsize > 2**32 else 32
        if python_bits == 32:
            return "x86"

        machine = platform.machine().lower()
        if machine in ["aarch64", "arm64"]:
            return "aarch64"
        return "x64"

    def conventions(self,
                    platform_name: str,
                    arch: str,
                    platform_config: Mapping[str, Any],
                    arch_config: Optional[Mapping[str, Any]] = None,
                    environ: Optional[Mapping[str, str]] = None) -> PlatformConventions:
        """
        Build the naming conventions and default search dirs for a platform

        Args:
            platform_name: Normalized platform name
            arch: Normalized architecture
            platform_config: Entry from platforms.yaml
            arch_config: Architecture entry from platforms.yaml
            environ: Environment to read search path variables from

        Returns:
            PlatformConventions instance
        """
        environ = os.environ if environ is None else environ
        arch_config = arch_config or {}
        conv = PlatformConventions(
            platform=platform_name,
            arch=arch,
            library_prefixes=list(platform_config.get("library_prefixes", ["lib"])),
            library_suffixes=list(platform_config.get("library_suffixes", [".so", ".a"])),
        )

        include_dirs: List[str] = []
        library_dirs: List[str] = []

        # Install prefixes first, then plain path lists, then system dirs
        for prefix in self._env_paths(platform_config.get("prefix_env", []), environ, conv):
            include_dirs.append(conv.join(prefix, "include"))
            if arch_config.get("bits") == 64 and platform_name == "linux":
                library_dirs.append(conv.join(prefix, "lib64"))
            library_dirs.append(conv.join(prefix, "lib"))

        include_dirs.extend(self._env_paths(platform_config.get("include_env", []), environ, conv))
        library_dirs.extend(self._env_paths(platform_config.get("library_env", []), environ, conv))

        include_dirs.extend(platform_config.get("include_dirs", []))

        multiarch = arch_config.get("multiarch")
        for lib_dir in platform_config.get("library_dirs", []):
            if multiarch and platform_name == "linux":
                library_dirs.append(conv.join(lib_dir, multiarch))
            library_dirs.append(lib_dir)
        if arch_config.get("bits") == 64:
            library_dirs.extend(platform_config.get("lib64_dirs", []))

        conv.include_dirs = _unique(include_dirs)
        conv.library_dirs = _unique(library_dirs)
        return conv

    @staticmethod
    def _env_paths(var_names, environ: Mapping[str, str], conv: PlatformConventions) -> List[str]:
        paths = []
        for var in var_names:
            value = environ.get(var, "")
            paths.extend(p for p in value.split(conv.path_separator) if p)
        return paths


def _unique(items: List[str]) -> List[str]:
    seen = set()
    out = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out


__all__ = ["PlatformDetector", "PlatformConventions"]

"""
depprobe
Cached discovery of third-party C/C++ headers and libraries
Supports Linux, macOS and Windows
"""

__version__ = "1.0.0"
__supported_platforms__ = ["linux", "macos", "windows"]

from .main import ProbeSystem

__all__ = ["ProbeSystem", "__version__", "__supported_platforms__"]

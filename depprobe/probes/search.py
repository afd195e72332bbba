"""Candidate name expansion and first-match search."""

from __future__ import annotations

import glob
import os
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from ..platform import PlatformConventions

PathExists = Callable[[str], bool]
Globber = Callable[[str], List[str]]

_GLOB_CHARS = frozenset("*?[")


def is_pattern(name: str) -> bool:
    return any(ch in _GLOB_CHARS for ch in name)


def _default_globber(pattern: str) -> List[str]:
    return sorted(glob.glob(pattern))


def expand_library_names(name: str, conventions: PlatformConventions) -> List[str]:
    """
    Spell out the file names a library name may take on disk

    ``tiff`` becomes ``libtiff.so``, ``libtiff.a``, ``tiff.so``... in
    prefix-major order, followed by the bare name. Names that already
    carry a known suffix, or are glob patterns, are kept as given.
    """
    if is_pattern(name):
        return [name]
    if any(name.endswith(suffix) for suffix in conventions.library_suffixes):
        return [name]
    # Versioned shared objects such as libfoo.so.1
    if ".so." in name:
        return [name]

    names = []
    for prefix in conventions.library_prefixes:
        if prefix and name.startswith(prefix):
            continue
        for suffix in conventions.library_suffixes:
            names.append(f"{prefix}{name}{suffix}")
    names.append(name)
    return list(dict.fromkeys(names))


def find_first(dirs: Sequence[str],
               names: Iterable[str],
               path_exists: PathExists = os.path.exists,
               globber: Optional[Globber] = None,
               join: Callable[..., str] = os.path.join) -> Optional[Tuple[str, str]]:
    """
    Search directories in order, names in order within each directory

    Args:
        dirs: Directories in priority order
        names: File names or glob patterns in priority order
        path_exists: Existence check, injectable for tests
        globber: Pattern matcher returning sorted matches
        join: Path join for the target platform

    Returns:
        (directory, matched file path) of the first hit, or None
    """
    globber = globber or _default_globber
    names = list(names)
    for directory in dirs:
        for name in names:
            candidate = join(directory, name)
            if is_pattern(name):
                matches = globber(candidate)
                if matches:
                    return directory, matches[0]
            elif path_exists(candidate):
                return directory, candidate
    return None


__all__ = ["expand_library_names", "find_first", "is_pattern", "PathExists", "Globber"]

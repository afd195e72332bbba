"""
Dependency probe: locate a library's headers and binary, once per session
"""

import os
from typing import Any, Optional

from ..depprobe_types.exceptions import DependencyNotFoundError
from ..depprobe_types.probe import FoundPolicy, ProbeRequest, ProbeResult
from ..platform import PlatformConventions
from ..utils import Logger, ProbeCache
from .search import Globber, PathExists, expand_library_names, find_first


class DependencyProbe:
    """Resolves whether a dependency is installed and where"""

    def __init__(self,
                 cache: ProbeCache,
                 conventions: PlatformConventions,
                 logger: Optional[Any] = None,
                 path_exists: PathExists = os.path.exists,
                 globber: Optional[Globber] = None):
        """
        Initialize the probe

        Args:
            cache: Session cache, owned by the caller
            conventions: Library naming conventions of the target platform
            logger: Logger instance
            path_exists: Filesystem existence check
            globber: Pattern matcher for glob candidate names
        """
        self.cache = cache
        self.conventions = conventions
        self.logger = logger or Logger()
        self.path_exists = path_exists
        self.globber = globber

    def probe(self, request: ProbeRequest, cache_key: str) -> ProbeResult:
        """
        Probe a dependency, or replay the cached outcome

        Args:
            request: What to look for and where
            cache_key: Dependency identifier in the cache

        Returns:
            ProbeResult

        Raises:
            DependencyNotFoundError: if the dependency is required and missing
        """
        with self.cache.key_lock(cache_key):
            cached = self.cache.get(cache_key)
            if cached is not None and self._honours_overrides(request, cached):
                self.logger.debug(f"{cache_key}: using cached result (found={cached.found})")
                result = cached
            else:
                result = self._search(request, cache_key)
                self.cache.store(cache_key, result)
                if result.found and not request.quiet:
                    self._report_found(cache_key, result)

        if not result.found:
            if request.required:
                self.logger.error(f"Could NOT find {cache_key}")
                raise DependencyNotFoundError(cache_key)
            if not result.from_cache and not request.quiet:
                self.logger.warning(f"Could NOT find {cache_key} (optional)")
        return result

    @staticmethod
    def _honours_overrides(request: ProbeRequest, cached: ProbeResult) -> bool:
        """A cached entry only stands if it agrees with explicit overrides"""
        if request.header_override and cached.header_path != request.header_override:
            return False
        if request.library_override and cached.library_path != request.library_override:
            return False
        return True

    def _search(self, request: ProbeRequest, cache_key: str) -> ProbeResult:
        """Run the filesystem search for one request"""
        header_path = ""
        if request.header_override:
            header_path = request.header_override
            self.logger.debug(f"{cache_key}: header dir overridden to {header_path}")
        elif request.candidate_header_names:
            hit = find_first(request.candidate_header_dirs,
                             request.candidate_header_names,
                             path_exists=self.path_exists,
                             globber=self.globber,
                             join=self.conventions.join)
            if hit:
                header_path = hit[0]

        library_path = ""
        if request.library_override:
            library_path = request.library_override
            self.logger.debug(f"{cache_key}: library overridden to {library_path}")
        elif request.candidate_library_names:
            names = []
            for name in request.candidate_library_names:
                names.extend(expand_library_names(name, self.conventions))
            hit = find_first(request.candidate_library_dirs,
                             list(dict.fromkeys(names)),
                             path_exists=self.path_exists,
                             globber=self.globber,
                             join=self.conventions.join)
            if hit:
                library_path = hit[1]

        found = self._is_found(request, bool(header_path), bool(library_path))
        self.logger.debug(f"{cache_key}: header='{header_path}' library='{library_path}' found={found}")
        if not found:
            return ProbeResult(found=False)
        return ProbeResult(found=True, header_path=header_path, library_path=library_path)

    @staticmethod
    def _is_found(request: ProbeRequest, have_header: bool, have_library: bool) -> bool:
        policy = request.policy
        if policy == FoundPolicy.LIBRARY:
            return have_library
        if policy == FoundPolicy.HEADER:
            return have_header
        if policy == FoundPolicy.BOTH:
            return have_header and have_library

        # REQUESTED: whatever was asked for must be there, and something must be asked
        if not (request.header_requested or request.library_requested):
            return False
        if request.header_requested and not have_header:
            return False
        if request.library_requested and not have_library:
            return False
        return True

    def _report_found(self, cache_key: str, result: ProbeResult):
        located = [p for p in (result.library_path, result.header_path) if p]
        self.logger.success(f"Found {cache_key}: {', '.join(located)}")


__all__ = ["DependencyProbe"]

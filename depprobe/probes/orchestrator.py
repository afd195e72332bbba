"""
Probe orchestrator that runs every configured dependency probe
"""

import os
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..depprobe_types.exceptions import DependencyNotFoundError, MissingDependenciesError
from ..depprobe_types.probe import ProbeResult
from ..platform import PlatformConventions
from .dependency_probe import DependencyProbe


class ProbeOrchestrator:
    """Probes dependencies in configured order"""

    def __init__(self,
                 config: Any,
                 conventions: PlatformConventions,
                 probe: DependencyProbe,
                 logger: Any,
                 overrides: Optional[Mapping[str, str]] = None,
                 environ: Optional[Mapping[str, str]] = None):
        """
        Initialize probe orchestrator

        Args:
            config: Configuration loader
            conventions: Target platform conventions
            probe: Probe used for every dependency
            logger: Logger instance
            overrides: User supplied override variables
            environ: Environment used for path expansion
        """
        self.config = config
        self.conventions = conventions
        self.probe = probe
        self.logger = logger
        self.overrides = dict(overrides or {})
        self.environ = os.environ if environ is None else environ

    def probe_dependency(self, name: str) -> ProbeResult:
        """
        Probe one dependency by name

        Args:
            name: Dependency name

        Returns:
            ProbeResult
        """
        request = self.config.build_request(name, self.conventions,
                                            overrides=self.overrides, environ=self.environ)
        self.logger.debug(f"{name}: header dirs {request.candidate_header_dirs}")
        self.logger.debug(f"{name}: library dirs {request.candidate_library_dirs}")
        return self.probe.probe(request, name)

    def probe_all(self,
                  names: Optional[List[str]] = None,
                  parallel: bool = False,
                  max_workers: int = 4,
                  continue_on_error: bool = False) -> Dict[str, Tuple[str, ProbeResult]]:
        """
        Probe several dependencies

        Args:
            names: Dependencies to probe, default the configured probe order
            parallel: Probe independent dependencies on a thread pool
            max_workers: Thread pool size in parallel mode
            continue_on_error: Keep going after a required dependency is missing

        Returns:
            Ordered mapping name -> (variable prefix, result)

        Raises:
            MissingDependenciesError: naming the missing required dependencies,
                with the outcomes resolved so far attached
        """
        names = list(names) if names is not None else self.config.get_probe_order()
        for name in names:
            # Surfaces unknown names before any probing starts
            self.config.get_dependency_config(name)

        outcomes: Dict[str, Tuple[str, ProbeResult]] = {}
        missing: List[DependencyNotFoundError] = []

        if parallel and len(names) > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                futures = {name: executor.submit(self.probe_dependency, name) for name in names}
                for name in names:
                    try:
                        result = futures[name].result()
                    except DependencyNotFoundError as exc:
                        missing.append(exc)
                        continue
                    outcomes[name] = (self.config.get_prefix(name), result)
        else:
            for index, name in enumerate(names, start=1):
                self.logger.info(f"[{index}/{len(names)}] Probing {name}...")
                try:
                    result = self.probe_dependency(name)
                except DependencyNotFoundError as exc:
                    missing.append(exc)
                    if not continue_on_error:
                        break
                    self.logger.warning(f"{name} is required but missing, continuing...")
                    continue
                outcomes[name] = (self.config.get_prefix(name), result)

        if missing:
            names_missing = list(dict.fromkeys(exc.name for exc in missing))
            self.logger.error(f"Missing required dependencies: {', '.join(names_missing)}")
            raise MissingDependenciesError(names_missing, outcomes)
        return outcomes


__all__ = ["ProbeOrchestrator"]

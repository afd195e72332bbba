#!/usr/bin/env python3
"""
Main entry point for depprobe
Supports Linux, macOS and Windows
"""

import argparse
import sys
import os
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

from .config import ConfigLoader, DEFAULT_CONFIG_DIR
from .depprobe_types.exceptions import (DependencyNotFoundError, DependencyProbeError,
                                        MissingDependenciesError)
from .depprobe_types.probe import ProbeResult
from .platform import PlatformDetector
from .probes import DependencyProbe, ProbeOrchestrator
from .utils import Logger, ProbeCache
from .utils.exporters import RENDERERS, render


class ProbeSystem:
    """Main probe system class"""

    def __init__(self,
                 root_dir: Optional[Path] = None,
                 config_dir: Optional[Path] = None,
                 dependencies_file: Optional[Path] = None,
                 cache_file: Optional[Path] = None,
                 platform: str = "auto",
                 arch: str = "auto",
                 verbose: bool = False,
                 use_cache: bool = True,
                 overrides: Optional[Mapping[str, str]] = None,
                 environ: Optional[Mapping[str, str]] = None,
                 log_file: Optional[str] = None,
                 logger: Optional[Logger] = None):
        """
        Initialize the probe system

        Args:
            root_dir: Project root directory, relative cache paths resolve here
            config_dir: Directory with dependencies.yaml and platforms.yaml
            dependencies_file: Dependency file overriding config_dir's
            cache_file: Persistent cache file overriding the configured one
            platform: Target platform (auto, linux, macos, windows)
            arch: Target architecture (auto, x64, x86, aarch64)
            verbose: Enable verbose output
            use_cache: Keep outcomes between sessions
            overrides: <PREFIX>_INCLUDE_DIR / <PREFIX>_LIBRARY style overrides
            environ: Environment, os.environ by default
            log_file: Optional log file path
            logger: Preconfigured logger, replaces verbose/log_file
        """
        self.root_dir = Path(root_dir) if root_dir else Path.cwd()
        self.verbose = verbose
        self.environ = os.environ if environ is None else environ

        # Setup logging
        self.logger = logger or Logger(verbose=verbose, log_file=log_file)

        # Load configuration
        config_dir = Path(config_dir) if config_dir else self.root_dir
        if not (config_dir / "dependencies.yaml").exists() and dependencies_file is None:
            # Fallback to package directory
            config_dir = DEFAULT_CONFIG_DIR
        self.config = ConfigLoader(config_dir, dependencies_file=dependencies_file)

        # Detect platform
        detector = PlatformDetector()
        self.platform_info = detector.detect()
        if platform == "auto":
            self.platform = self.platform_info["platform"]
        else:
            self.platform = platform
        supported = self.config.get_supported_platforms()
        if self.platform not in supported:
            raise DependencyProbeError(f"Unsupported platform: {self.platform}. "
                                       f"Supported: {', '.join(supported)}")

        # Detect architecture
        self.arch = self.platform_info["arch"] if arch == "auto" else arch
        self.logger.debug(f"Platform: {self.platform} ({self.arch})")

        self.conventions = detector.conventions(
            self.platform,
            self.arch,
            self.config.get_platform_config(self.platform),
            self.config.get_architecture_config(self.arch),
            environ=self.environ,
        )

        # Initialize cache
        if use_cache:
            configured = cache_file or self.config.options.cache_file
            resolved = Path(configured) if configured else None
            if resolved is not None and not resolved.is_absolute():
                resolved = self.root_dir / resolved
            self.cache = ProbeCache(resolved)
        else:
            self.cache = ProbeCache(None)

        self.probe = DependencyProbe(cache=self.cache,
                                     conventions=self.conventions,
                                     logger=self.logger)

        self.orchestrator = ProbeOrchestrator(
            config=self.config,
            conventions=self.conventions,
            probe=self.probe,
            logger=self.logger,
            overrides=overrides,
            environ=self.environ,
        )

    def probe_dependencies(self,
                           deps: Optional[List[str]] = None,
                           parallel: Optional[bool] = None) -> Dict[str, Tuple[str, ProbeResult]]:
        """
        Probe dependencies and persist the outcomes

        Args:
            deps: Specific dependencies to probe (None for the probe order)
            parallel: Override the configured parallel option

        Returns:
            Ordered mapping name -> (variable prefix, result)

        Raises:
            MissingDependenciesError: if a required dependency is missing
        """
        options = self.config.options
        try:
            outcomes = self.orchestrator.probe_all(
                names=deps,
                parallel=options.parallel if parallel is None else parallel,
                max_workers=options.max_workers,
                continue_on_error=options.continue_on_error,
            )
        except MissingDependenciesError:
            # Only a run told to keep going writes what it resolved
            if options.continue_on_error:
                self.cache.persist()
            raise
        self.cache.persist()

        found = sum(1 for _, result in outcomes.values() if result.found)
        self.logger.info(f"{found}/{len(outcomes)} dependencies found")
        return outcomes

    def export(self, outcomes: Mapping[str, Tuple[str, ProbeResult]], fmt: str = "cmake") -> str:
        """Render outcomes as cmake, json or env text"""
        return render(fmt, outcomes)

    def clean(self, deps: Optional[List[str]] = None) -> None:
        """
        Forget cached outcomes

        Args:
            deps: Specific dependencies to forget (None for all)
        """
        if deps is None:
            self.logger.info("Clearing probe cache...")
            self.cache.clear()
        else:
            for dep in deps:
                if self.cache.clear_entry(dep):
                    self.logger.info(f"Cleared cached result for {dep}")
                else:
                    self.logger.debug(f"No cached result for {dep}")
        self.cache.persist()

    def show_info(self) -> None:
        """Show probe system information"""
        from . import __version__

        print(f"\ndepprobe v{__version__}")
        print(f"{'='*50}")
        print(f"Platform: {self.platform} ({self.arch})")
        print(f"Root Directory: {self.root_dir}")
        print(f"Config Directory: {self.config.config_dir}")
        print(f"Cache File: {self.cache.cache_file or '(session only)'}")
        print(f"Library prefixes: {self.conventions.library_prefixes}")
        print(f"Library suffixes: {self.conventions.library_suffixes}")
        print(f"\nDependencies ({len(self.config.get_dependencies())}):")

        for dep in self.config.get_probe_order():
            cached = self.cache.get(dep)
            # ASCII only, Windows consoles choke on anything else
            if cached is None:
                status = "[?] Not probed"
            elif cached.found:
                status = f"[OK] {cached.library_path or cached.header_path}"
            else:
                status = "[X] Not found"
            print(f"  - {dep:20} {status}")

        print(f"\nSupported platforms: {', '.join(self.config.get_supported_platforms())}")


def _parse_definitions(parser: argparse.ArgumentParser, definitions: Optional[List[str]]) -> Dict[str, str]:
    overrides = {}
    for definition in definitions or []:
        name, sep, value = definition.partition("=")
        if not sep or not name:
            parser.error(f"-D expects VAR=VALUE, got {definition!r}")
        # Accept CMake style typed definitions: VAR:PATH=value
        overrides[name.split(":", 1)[0]] = value
    return overrides


def _write_results(ps: ProbeSystem,
                   outcomes: Mapping[str, Tuple[str, ProbeResult]],
                   fmt: str,
                   output: Optional[Path]) -> None:
    text = ps.export(outcomes, fmt)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text, encoding="utf-8")
        ps.logger.info(f"Wrote {fmt} results to {output}")
    else:
        sys.stdout.write(text)


def main(argv: Optional[List[str]] = None):
    """Command-line interface"""
    parser = argparse.ArgumentParser(
        prog="depprobe",
        description="depprobe - cached discovery of C/C++ dependencies",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s probe                       # Probe every configured dependency
  %(prog)s probe --dep tiff -f json    # Probe one dependency, print JSON
  %(prog)s probe -D TIFF_INCLUDE_DIR=/opt/tiff/include
  %(prog)s clean --all                 # Forget cached outcomes
  %(prog)s info                        # Show system information
        """
    )

    parser.add_argument(
        "command",
        choices=["probe", "clean", "info"],
        help="Command to execute"
    )

    parser.add_argument(
        "--dep",
        action="append",
        help="Specific dependency to process (can be used multiple times)"
    )

    parser.add_argument(
        "--all",
        action="store_true",
        help="Process all dependencies"
    )

    parser.add_argument(
        "--format", "-f",
        choices=sorted(RENDERERS),
        default="cmake",
        help="Output format for probe results (default: cmake)"
    )

    parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Write probe results to a file instead of stdout"
    )

    parser.add_argument(
        "-D",
        dest="definitions",
        action="append",
        metavar="VAR=VALUE",
        help="Override a variable such as TIFF_INCLUDE_DIR or TIFF_LIBRARY"
    )

    parser.add_argument(
        "--parallel",
        action="store_true",
        default=None,
        help="Probe dependencies in parallel"
    )

    parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Do not read or write the persistent probe cache"
    )

    parser.add_argument(
        "--config-dir",
        type=Path,
        help="Directory holding dependencies.yaml and platforms.yaml"
    )

    parser.add_argument(
        "--dependencies",
        type=Path,
        help="Dependency file to use"
    )

    parser.add_argument(
        "--cache-file",
        type=Path,
        help="Persistent probe cache file"
    )

    parser.add_argument(
        "--platform",
        choices=["auto", "linux", "macos", "windows"],
        default="auto",
        help="Target platform (default: auto-detect)"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--log-file",
        help="Also write the log to this file"
    )

    args = parser.parse_args(argv)

    # Validate arguments
    if args.command == "clean" and not args.all and not args.dep:
        parser.error("Either --all or --dep must be specified for clean")

    overrides = _parse_definitions(parser, args.definitions)

    # Initialize probe system
    try:
        ps = ProbeSystem(
            config_dir=args.config_dir,
            dependencies_file=args.dependencies,
            cache_file=args.cache_file,
            platform=args.platform,
            verbose=args.verbose,
            use_cache=not args.no_cache,
            overrides=overrides,
            log_file=args.log_file,
        )
    except DependencyProbeError as e:
        print(f"Error initializing depprobe: {e}", file=sys.stderr)
        sys.exit(1)

    deps = None if args.all else args.dep

    # Execute command
    try:
        if args.command == "probe":
            try:
                outcomes = ps.probe_dependencies(deps=deps, parallel=args.parallel)
            except MissingDependenciesError as e:
                # continue_on_error still reports what was found, then fails
                if ps.config.options.continue_on_error and e.outcomes:
                    _write_results(ps, e.outcomes, args.format, args.output)
                raise
            _write_results(ps, outcomes, args.format, args.output)

        elif args.command == "clean":
            ps.clean(deps=deps)

        elif args.command == "info":
            ps.show_info()

    except KeyboardInterrupt:
        print("\nProbe interrupted by user", file=sys.stderr)
        sys.exit(130)
    except DependencyNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except DependencyProbeError as e:
        ps.logger.error(f"depprobe error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()

"""Renders probe outcomes for the build configuration that consumes them."""

from __future__ import annotations

import json
import shlex
from typing import Callable, Dict, Mapping, Tuple

from ..depprobe_types.exceptions import ConfigError
from ..depprobe_types.probe import ProbeResult

# name -> (variable prefix, result)
Outcomes = Mapping[str, Tuple[str, ProbeResult]]


def _cmake_quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("$", "\\$")
    return f'"{escaped}"'


def render_cmake(outcomes: Outcomes) -> str:
    """Initial-cache script loadable with ``cmake -C``."""
    lines = ["# Generated by depprobe"]
    for name, (prefix, result) in outcomes.items():
        found = "TRUE" if result.found else "FALSE"
        lines.append(f'set({prefix}_FOUND {found} CACHE INTERNAL "If {name} was found")')
        lines.append(
            f"set({prefix}_INCLUDE_DIR {_cmake_quote(result.header_path)} "
            f'CACHE PATH "Include directory of {name}")'
        )
        lines.append(
            f"set({prefix}_LIBRARIES {_cmake_quote(result.library_path)} "
            f'CACHE FILEPATH "Library of {name}")'
        )
        lines.append(f"mark_as_advanced({prefix}_INCLUDE_DIR {prefix}_LIBRARIES)")
    return "\n".join(lines) + "\n"


def render_json(outcomes: Outcomes) -> str:
    payload: Dict[str, Dict[str, object]] = {}
    for name, (prefix, result) in outcomes.items():
        entry: Dict[str, object] = result.model_dump(mode="json")
        entry["prefix"] = prefix
        entry["variables"] = result.variables(prefix)
        payload[name] = entry
    return json.dumps(payload, indent=2) + "\n"


def render_env(outcomes: Outcomes) -> str:
    lines = []
    for _name, (prefix, result) in outcomes.items():
        lines.append(f"export {prefix}_FOUND={1 if result.found else 0}")
        lines.append(f"export {prefix}_INCLUDE_DIR={shlex.quote(result.header_path)}")
        lines.append(f"export {prefix}_LIBRARIES={shlex.quote(result.library_path)}")
    return "\n".join(lines) + ("\n" if lines else "")


RENDERERS: Dict[str, Callable[[Outcomes], str]] = {
    "cmake": render_cmake,
    "json": render_json,
    "env": render_env,
}


def render(fmt: str, outcomes: Outcomes) -> str:
    """
    Render outcomes in the requested format

    Args:
        fmt: One of cmake, json, env
        outcomes: Mapping of dependency name to (prefix, result)

    Returns:
        Rendered text
    """
    renderer = RENDERERS.get(fmt)
    if renderer is None:
        raise ConfigError(f"Unknown output format: {fmt}. Supported: {', '.join(RENDERERS)}")
    return renderer(outcomes)


__all__ = ["render", "render_cmake", "render_json", "render_env", "RENDERERS"]

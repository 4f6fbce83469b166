#!/usr/bin/env python3
"""
Path Normalization
==================
Reconciles paths authored for the static-site tool with the host's own
filesystem root.

KalaStatic usually lives one directory above the host install (a
Composer-style project with the CMS in ``web/`` or ``docroot/``). Paths in
``kalastatic.yaml`` are then written relative to the project, so they carry
the install directory as an extra leading segment. The host resolves paths
relative to its own root and needs that segment removed.

Usage:
    from kalastatic.paths import normalize_path

    normalize_path("webroot/sites/default", "/srv/project/webroot")
    # -> "sites/default"
"""

import copy
import os
from typing import Any, Dict, Iterator, Tuple

# Top-level root config keys holding paths
PATH_FIELDS = ("source", "destination")

# Where the Twig namespaces live inside the root config
NAMESPACES_PATH = (
    "pluginOpts",
    "metalsmith-jstransformer",
    "engineOptions",
    "twig",
    "namespaces",
)

SEPARATOR = "/"


def _segments(path: str) -> list:
    return path.replace(os.sep, SEPARATOR).split(SEPARATOR)


def install_marker(host_root: str) -> str:
    """Name of the host's install directory (last segment of its root)."""
    return _segments(str(host_root).rstrip("/" + os.sep))[-1]


def normalize_path(path: str, host_root: str) -> str:
    """
    Strip the host install directory from the front of a path.

    Args:
        path: Path as written in the root config
        host_root: Filesystem root of the host application

    Returns:
        path without its first segment when that segment names the host
        install directory, otherwise path unchanged
    """
    marker = install_marker(host_root)
    if not marker:
        return path
    prefix = _segments(path)[0]
    if prefix != marker:
        return path
    return path[len(marker) + 1:]


def _namespace_container(config: Dict[str, Any]) -> Any:
    current: Any = config
    for key in NAMESPACES_PATH:
        if not isinstance(current, dict) or key not in current:
            return None
        current = current[key]
    return current


def iter_namespaces(config: Dict[str, Any]) -> Iterator[Tuple[str, str]]:
    """
    Yield (name, path) pairs of the Twig namespaces in a root config.

    Namespaces may be written as a mapping or as a list of single-entry
    mappings; both are accepted.
    """
    namespaces = _namespace_container(config)
    if isinstance(namespaces, dict):
        yield from namespaces.items()
    elif isinstance(namespaces, list):
        for entry in namespaces:
            if isinstance(entry, dict):
                yield from entry.items()


def normalize_root_config(config: Dict[str, Any], host_root: str) -> Dict[str, Any]:
    """
    Apply normalize_path to every path in a root config.

    Covers PATH_FIELDS and each namespace directory. Returns a new mapping;
    the input is left untouched.
    """
    result = copy.deepcopy(config)

    for field in PATH_FIELDS:
        value = result.get(field)
        if isinstance(value, str):
            result[field] = normalize_path(value, host_root)

    namespaces = _namespace_container(result)
    if isinstance(namespaces, dict):
        for name, path in namespaces.items():
            if isinstance(path, str):
                namespaces[name] = normalize_path(path, host_root)
    elif isinstance(namespaces, list):
        for entry in namespaces:
            if not isinstance(entry, dict):
                continue
            for name, path in entry.items():
                if isinstance(path, str):
                    entry[name] = normalize_path(path, host_root)

    return result


__all__ = [
    "PATH_FIELDS",
    "NAMESPACES_PATH",
    "install_marker",
    "normalize_path",
    "iter_namespaces",
    "normalize_root_config",
]

#!/usr/bin/env python3
"""
Settings Loaders
================
Discovers and parses the two files KalaStatic settings are built from:

- ``kalastatic.yaml``: the root build configuration, found anywhere below
  the directory above the host install
- ``kalastatic.md``: a markdown file with a YAML preamble, found below the
  configured ``source`` directory

A missing file is not an error: the root config falls back to defaults
derived from the default theme, and metadata falls back to ``{}``. Broken
YAML in either file raises MalformedYamlError.

Usage:
    from kalastatic.loader import SettingsLoader

    loader = SettingsLoader(host_root="/srv/project/web",
                            default_theme_path="themes/custom/mytheme")
    settings = loader.load()
    print(settings.yaml["destination"])
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from kalastatic.errors import MalformedYamlError
from kalastatic.paths import normalize_root_config
from kalastatic.settings import get_setting, require_setting

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

DELIMITER = "---"


# =============================================================================
# Data Model
# =============================================================================

@dataclass(frozen=True)
class ComposedSettings:
    """Normalized root config plus parsed metadata."""
    yaml: Dict[str, Any] = field(default_factory=dict)
    config: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {'yaml': self.yaml, 'config': self.config}

    @classmethod
    def from_dict(cls, data: dict) -> 'ComposedSettings':
        return cls(yaml=dict(data.get('yaml') or {}),
                   config=dict(data.get('config') or {}))


# =============================================================================
# File Discovery
# =============================================================================

def find_files(root: PathLike, filename: str) -> List[Path]:
    """
    Recursively find files named filename below root.

    Excluded and (optionally) hidden directories are not descended into.
    Results are sorted by path so repeated scans agree on order.
    """
    exclude = set(get_setting("scan.exclude_dirs", []) or [])
    skip_hidden = bool(get_setting("scan.skip_hidden", True))

    matches = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = [
            d for d in dirnames
            if d not in exclude and not (skip_hidden and d.startswith('.'))
        ]
        if filename in filenames:
            matches.append(Path(dirpath) / filename)
    return sorted(matches)


def _pick_last(matches: List[Path], what: str, log: logging.Logger) -> Optional[Path]:
    if not matches:
        return None
    if len(matches) > 1:
        log.warning(
            "Found %d %s files, using the last one (%s): %s",
            len(matches), what, matches[-1], ", ".join(str(m) for m in matches),
        )
    return matches[-1]


# =============================================================================
# Parsing
# =============================================================================

def parse_yaml(text: str, path: PathLike) -> Dict[str, Any]:
    """Parse a YAML document that must be a mapping (or empty)."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise MalformedYamlError(path, str(e)) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise MalformedYamlError(path, f"expected a mapping, got {type(data).__name__}")
    return data


def strip_delimiters(text: str) -> str:
    """Remove every line that consists only of the preamble delimiter."""
    return "\n".join(
        line for line in text.splitlines()
        if line.strip() != DELIMITER
    )


def parse_metadata(text: str, path: PathLike) -> Dict[str, Any]:
    """
    Parse a metadata file.

    Delimiter lines are dropped and everything left is read as a single YAML
    document, so text around and between the delimiters must be YAML too.
    """
    return parse_yaml(strip_delimiters(text), path)


# =============================================================================
# Loaders
# =============================================================================

def default_root_config(default_theme_path: str) -> Dict[str, str]:
    """Source/destination derived from the default theme."""
    theme = str(default_theme_path).rstrip('/')
    return {
        'source': f"{theme}/{require_setting('defaults.source_suffix')}",
        'destination': f"{theme}/{require_setting('defaults.destination_suffix')}",
    }


def load_root_config(host_root: PathLike, default_theme_path: str,
                     log: Optional[logging.Logger] = None) -> Dict[str, Any]:
    """
    Load kalastatic.yaml, searching from the directory above host_root.

    Args:
        host_root: Filesystem root of the host application
        default_theme_path: Path of the default theme, relative to host_root
        log: Logger for discovery diagnostics

    Returns:
        Root config with source/destination filled in independently when
        absent. Paths are not normalized here.
    """
    log = log or logger
    filename = require_setting("files.root_config")
    search_root = Path(host_root).resolve().parent

    config: Dict[str, Any] = {}
    path = _pick_last(find_files(search_root, filename), filename, log)
    if path is None:
        log.debug("No %s found below %s, using defaults", filename, search_root)
    else:
        log.debug("Loading root config from %s", path)
        config = parse_yaml(path.read_text(encoding='utf-8'), path)

    for key, value in default_root_config(default_theme_path).items():
        if config.get(key) is None:
            config[key] = value
    return config


def load_metadata(root_config: Dict[str, Any], base_dir: PathLike,
                  log: Optional[logging.Logger] = None) -> Dict[str, Any]:
    """
    Load the metadata file found below root_config['source'].

    Args:
        root_config: Normalized root config
        base_dir: Directory a relative source is resolved against
        log: Logger receiving the missing-directory diagnostic

    Returns:
        Parsed metadata, or {} when the source directory or file is absent
    """
    log = log or logger
    filename = require_setting("files.metadata")

    source = root_config.get('source')
    # Non-string values (source: 3) count as no source at all
    source_dir = Path(base_dir) / source if isinstance(source, str) and source else None
    if source_dir is None or not source_dir.is_dir():
        log.error("KalaStatic source directory not found: %s",
                  source_dir if source_dir is not None else source,
                  extra={'source': source})
        return {}

    path = _pick_last(find_files(source_dir, filename), filename, log)
    if path is None:
        log.debug("No %s found below %s", filename, source_dir)
        return {}

    log.debug("Loading metadata from %s", path)
    return parse_metadata(path.read_text(encoding='utf-8'), path)


class SettingsLoader:
    """
    Runs the full load chain: root config, path normalization, metadata.

    Usage:
        loader = SettingsLoader("/srv/project/web", "themes/custom/mytheme")
        settings = loader.load()
    """

    def __init__(self, host_root: PathLike, default_theme_path: str,
                 log: Optional[logging.Logger] = None):
        self.host_root = Path(host_root)
        self.default_theme_path = default_theme_path
        self.log = log or logger

    def load_root_config(self) -> Dict[str, Any]:
        raw = load_root_config(self.host_root, self.default_theme_path, self.log)
        return normalize_root_config(raw, str(self.host_root.resolve()))

    def load(self) -> ComposedSettings:
        root_config = self.load_root_config()
        metadata = load_metadata(root_config, self.host_root, self.log)
        return ComposedSettings(yaml=root_config, config=metadata)


__all__ = [
    "ComposedSettings",
    "SettingsLoader",
    "find_files",
    "parse_yaml",
    "parse_metadata",
    "strip_delimiters",
    "default_root_config",
    "load_root_config",
    "load_metadata",
]

#!/usr/bin/env python3
"""
Library Descriptor
==================
Builds the front-end asset bundle the host attaches to pages.

Stylesheets and footer scripts are listed in the metadata file relative to
the build destination; they are turned into absolute URLs here.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from kalastatic.errors import MissingRequiredFieldError
from kalastatic.loader import ComposedSettings
from kalastatic.settings import require_setting


@dataclass(frozen=True)
class LibraryLicense:
    name: str
    url: str
    gpl_compatible: bool

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'url': self.url,
            'gpl-compatible': self.gpl_compatible,
        }


@dataclass(frozen=True)
class LibraryDescriptor:
    """Asset bundle with absolute stylesheet and script URLs."""
    name: str
    license: LibraryLicense
    dependencies: List[str] = field(default_factory=list)
    stylesheets: List[str] = field(default_factory=list)
    scripts: List[str] = field(default_factory=list)

    def to_definition(self) -> Dict[str, Any]:
        """Render in the host's library definition shape."""
        return {
            'dependencies': list(self.dependencies),
            'license': self.license.to_dict(),
            'css': {'theme': {url: {} for url in self.stylesheets}},
            'js': {url: {} for url in self.scripts},
        }


def _require_list(data: Dict[str, Any], dotted: str) -> Sequence[str]:
    current: Any = data
    for part in dotted.split('.'):
        if not isinstance(current, dict) or part not in current:
            raise MissingRequiredFieldError(dotted)
        current = current[part]
    if not isinstance(current, list):
        raise MissingRequiredFieldError(
            dotted, f"expected a list, got {type(current).__name__}"
        )
    return current


def asset_url(base_path: str, destination: str, relative: str) -> str:
    return f"{base_path}{destination}/{relative}"


def build_library(settings: ComposedSettings, base_path: str) -> LibraryDescriptor:
    """
    Build the library descriptor from composed settings.

    Args:
        settings: Cached, normalized settings
        base_path: Host base path prefix, e.g. "/"

    Raises:
        MissingRequiredFieldError: stylesheets or scripts.footer.all is
            absent from the metadata
    """
    stylesheets = _require_list(settings.config, 'stylesheets')
    scripts = _require_list(settings.config, 'scripts.footer.all')
    destination = settings.yaml.get('destination', '')

    license_cfg = require_setting('library.license')
    return LibraryDescriptor(
        name=require_setting('library.name'),
        license=LibraryLicense(
            name=license_cfg['name'],
            url=license_cfg['url'],
            gpl_compatible=bool(license_cfg.get('gpl_compatible', False)),
        ),
        dependencies=list(require_setting('library.dependencies')),
        stylesheets=[asset_url(base_path, destination, s) for s in stylesheets],
        scripts=[asset_url(base_path, destination, s) for s in scripts],
    )


__all__ = [
    "LibraryLicense",
    "LibraryDescriptor",
    "asset_url",
    "build_library",
]

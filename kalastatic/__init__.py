#!/usr/bin/env python3
"""
KalaStatic - Static Site Settings for Host CMS Integrations
===========================================================

Resolves, normalizes and caches the build configuration of a KalaStatic
static site living next to a host CMS install, and derives the asset
library and page-attachment decision from it.

Quick Start
-----------
    from kalastatic import KalaStatic

    ks = KalaStatic(host_root="/srv/project/web",
                    default_theme_path="themes/custom/mytheme")

    settings = ks.settings          # cached ComposedSettings
    library = ks.library()          # absolute stylesheet/script URLs
    ks.rebuild()                    # host rebuild event

Modules
-------
    kalastatic.paths      - Path normalization for nested installs
    kalastatic.loader     - Root config and metadata discovery/parsing
    kalastatic.cache      - Settings cache and cache backends
    kalastatic.library    - Library descriptor builder
    kalastatic.attachment - Page attachment decision

CLI Usage
---------
    python -m kalastatic --default-theme themes/custom/mytheme settings
    python -m kalastatic --default-theme themes/custom/mytheme library
"""

__version__ = "0.1.0"
__author__ = "KalaStatic"

from .errors import KalaStaticError, MalformedYamlError, MissingRequiredFieldError
from .paths import normalize_path, normalize_root_config
from .loader import ComposedSettings, SettingsLoader, load_metadata, load_root_config
from .cache import CacheBackend, FileCache, MemoryCache, SettingsCache
from .library import LibraryDescriptor, build_library
from .attachment import AttachmentResult, attach_library, should_attach
from .site import KalaStatic

__all__ = [
    "__version__",
    # Errors
    "KalaStaticError",
    "MalformedYamlError",
    "MissingRequiredFieldError",
    # Settings engine
    "normalize_path",
    "normalize_root_config",
    "ComposedSettings",
    "SettingsLoader",
    "load_root_config",
    "load_metadata",
    "CacheBackend",
    "MemoryCache",
    "FileCache",
    "SettingsCache",
    # Consumers
    "LibraryDescriptor",
    "build_library",
    "AttachmentResult",
    "should_attach",
    "attach_library",
    "KalaStatic",
]

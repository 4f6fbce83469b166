#!/usr/bin/env python3
"""
KalaStatic Host Integration
===========================
Wires the settings cache, library builder and attachment decision to a host
application.

Usage:
    from kalastatic import KalaStatic

    ks = KalaStatic(host_root="/srv/project/web",
                    default_theme_path="themes/custom/mytheme")

    # Host rebuild / cache clear event
    ks.rebuild()

    # Page render
    attachments = ks.page_attachments({}, active_theme="mytheme",
                                      allow_list={"mytheme": True})
"""

import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from kalastatic.attachment import AttachmentResult, Messenger, attach_library, should_attach
from kalastatic.cache import CacheBackend, SettingsCache
from kalastatic.library import LibraryDescriptor, build_library
from kalastatic.loader import ComposedSettings, SettingsLoader
from kalastatic.paths import iter_namespaces
from kalastatic.settings import require_setting

logger = logging.getLogger(__name__)


class KalaStatic:
    """
    KalaStatic integration for one host install.

    Args:
        host_root: Filesystem root of the host application
        default_theme_path: Default theme path, used when kalastatic.yaml
            does not define source/destination
        base_path: Host base path prefix for asset URLs
        backend: Cache store (default: in-process MemoryCache)
        log: Logger for load diagnostics
        messenger: User-facing message sink
    """

    def __init__(self,
                 host_root: Union[str, Path],
                 default_theme_path: str,
                 base_path: str = "/",
                 backend: Optional[CacheBackend] = None,
                 log: Optional[logging.Logger] = None,
                 messenger: Optional[Messenger] = None):
        self.host_root = Path(host_root)
        self.base_path = base_path
        self.messenger = messenger
        self.loader = SettingsLoader(self.host_root, default_theme_path, log=log)
        self.cache = SettingsCache(self.loader, backend)

    # -------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------

    @property
    def settings(self) -> ComposedSettings:
        return self.cache.get_composed_settings()

    def rebuild(self) -> ComposedSettings:
        """Host rebuild hook: reload settings so the next read is warm."""
        return self.cache.rebuild()

    def twig_namespaces(self) -> Dict[str, str]:
        """Normalized Twig namespace name -> directory."""
        return dict(iter_namespaces(self.cache.get_root_config()))

    # -------------------------------------------------------------------------
    # Library
    # -------------------------------------------------------------------------

    def library(self) -> LibraryDescriptor:
        return build_library(self.settings, self.base_path)

    def library_info_build(self) -> Dict[str, Dict[str, Any]]:
        """Library definitions keyed by library name."""
        library = self.library()
        return {library.name: library.to_definition()}

    # -------------------------------------------------------------------------
    # Page attachments
    # -------------------------------------------------------------------------

    def decide(self, active_theme: str,
               allow_list: Optional[Mapping[str, bool]]) -> AttachmentResult:
        return should_attach(active_theme, allow_list)

    def page_attachments(self, attachments: Dict[str, Any], active_theme: str,
                         allow_list: Optional[Mapping[str, bool]]) -> Dict[str, Any]:
        """Attach the library to a page when the active theme allows it."""
        result = self.decide(active_theme, allow_list)
        logger.debug("Attachment decision for theme %r: %s", active_theme, result.value)
        library_name = require_setting("library.name")
        if result is AttachmentResult.ATTACH:
            # Broken metadata must surface here, not as an empty bundle
            library_name = self.library().name
        return attach_library(attachments, result, library_name, self.messenger)

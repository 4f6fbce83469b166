#!/usr/bin/env python3
"""
Attachment Decision
===================
Decides whether the KalaStatic library is attached to the current page.

The decision is pure. attach_library() performs the side effects a host
would perform with it: adding the library to the page attachments or
reporting the missing policy.
"""

from enum import Enum
from typing import Any, Dict, Mapping, Optional, Protocol


class AttachmentResult(Enum):
    """Outcome of should_attach()."""
    NO_POLICY_CONFIGURED = "no_policy_configured"
    THEME_NOT_ENABLED = "theme_not_enabled"
    ATTACH = "attach"


class Messenger(Protocol):
    """User-facing message sink provided by the host."""

    def error(self, message: str) -> None:
        ...


NO_POLICY_MESSAGE = (
    "KalaStatic has no theme configuration. "
    "Enable KalaStatic for at least one theme."
)


def should_attach(active_theme: str,
                  allow_list: Optional[Mapping[str, bool]]) -> AttachmentResult:
    if allow_list is None:
        return AttachmentResult.NO_POLICY_CONFIGURED
    if allow_list.get(active_theme):
        return AttachmentResult.ATTACH
    return AttachmentResult.THEME_NOT_ENABLED


def attach_library(attachments: Dict[str, Any], result: AttachmentResult,
                   library_name: str, messenger: Optional[Messenger] = None) -> Dict[str, Any]:
    """
    Apply a decision to a page attachments mapping (modified in place).

    On ATTACH, library_name is appended to attachments['#attached']['library']
    unless already present. On NO_POLICY_CONFIGURED the messenger receives
    an error. THEME_NOT_ENABLED does nothing.
    """
    if result is AttachmentResult.NO_POLICY_CONFIGURED:
        if messenger is not None:
            messenger.error(NO_POLICY_MESSAGE)
    elif result is AttachmentResult.ATTACH:
        libraries = attachments.setdefault('#attached', {}).setdefault('library', [])
        if library_name not in libraries:
            libraries.append(library_name)
    return attachments


__all__ = [
    "AttachmentResult",
    "Messenger",
    "NO_POLICY_MESSAGE",
    "should_attach",
    "attach_library",
]

#!/usr/bin/env python3
"""
Errors
======
Exceptions raised while resolving KalaStatic settings.

Filesystem absence (no root config, no source directory) is not an error:
those cases degrade to defaults or empty metadata. Only broken input that a
human has to fix is raised.
"""

from pathlib import Path
from typing import Optional


class KalaStaticError(Exception):
    """Base class for all KalaStatic errors."""


class MalformedYamlError(KalaStaticError, ValueError):
    """A root config or metadata file could not be parsed."""

    def __init__(self, path: Path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Malformed YAML in {self.path}: {reason}")


class MissingRequiredFieldError(KalaStaticError, ValueError):
    """Metadata lacks a field the library descriptor needs."""

    def __init__(self, field: str, detail: Optional[str] = None):
        self.field = field
        message = f"Missing required metadata field '{field}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


__all__ = [
    "KalaStaticError",
    "MalformedYamlError",
    "MissingRequiredFieldError",
]

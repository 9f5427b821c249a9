#!/usr/bin/env python3
"""
KUBESHAPE ERRORS
----------------
Error taxonomy shared by the deriver, the path matcher and the codec.
Every error is fatal for the operation that raised it and propagates to
the immediate caller; nothing in the codec retries.

Author: KubeShape Team
Date: 2026-01-16
"""

from typing import Any, Optional


class KubeShapeError(Exception):
    """Base class for all codec diagnostics."""


class SchemaError(KubeShapeError):
    """Unsupported or malformed schema shape. No partial type is produced."""


class PathError(KubeShapeError):
    """Malformed path expression or path step."""


class ConfigError(KubeShapeError):
    """Invalid codec settings file."""


class _PathBoundError(KubeShapeError):
    """An error tied to a concrete location inside a value tree."""

    def __init__(self, message: str, path: Optional[Any] = None):
        self.path = path
        if path is not None and len(path) > 0:
            message = f"{message} (at {path})"
        super().__init__(message)


class DecodeError(_PathBoundError):
    """The untyped kind conflicts with the expected structural type."""


class EncodeError(_PathBoundError):
    """An Unknown node was handed to the encoder."""

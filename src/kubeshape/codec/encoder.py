#!/usr/bin/env python3
"""
KUBESHAPE ENCODER - Typed to Untyped
------------------------------------
Turns a fully known typed value tree back into the plain wire form handed
to the resource store. The schema is not consulted: the typed tree carries
everything needed. Unknown nodes cannot be encoded; callers check
`is_fully_known` first.

Author: KubeShape Team
Date: 2026-01-16
"""

from typing import Any, Dict, Optional

from kubeshape.codec.context import DEFAULT_MAX_DEPTH
from kubeshape.core.errors import EncodeError
from kubeshape.core.models import MappingType, Tag, TypedValue
from kubeshape.core.paths import Path


def encode(value: TypedValue, path: Optional[Path] = None, max_depth: int = DEFAULT_MAX_DEPTH) -> Any:
    return _encode(value, path or Path.root(), 0, max_depth)


def encode_object(value: TypedValue, max_depth: int = DEFAULT_MAX_DEPTH) -> Dict[str, Any]:
    """Encodes a typed value whose root must be a known mapping."""
    if not isinstance(value, TypedValue) or not value.is_known or not isinstance(value.value, dict):
        got = value.tag.value if isinstance(value, TypedValue) else type(value).__name__
        raise EncodeError(f"Expected a known object value, got {got}")
    return _encode(value, Path.root(), 0, max_depth)


def _encode(node: TypedValue, path: Path, depth: int, max_depth: int) -> Any:
    if not isinstance(node, TypedValue):
        raise EncodeError(f"Unexpected node of type {type(node).__name__}", path)

    if node.tag is Tag.UNKNOWN:
        raise EncodeError("Cannot encode an unknown value", path)
    if node.tag is Tag.NULL:
        return None
    if depth > max_depth:
        raise EncodeError(f"Value nesting exceeds the maximum depth of {max_depth}", path)

    payload = node.value
    if isinstance(payload, list):
        return [_encode(child, path.at_index(i), depth + 1, max_depth) for i, child in enumerate(payload)]
    if isinstance(payload, dict):
        by_key = isinstance(node.type, MappingType)
        result = {}
        for name, child in payload.items():
            child_path = path.at_key(name) if by_key else path.at_name(name)
            result[name] = _encode(child, child_path, depth + 1, max_depth)
        return result
    return payload

#!/usr/bin/env python3
"""
KUBESHAPE NARROWER - Re-typing Typed Values
-------------------------------------------
Re-expresses an already typed value (typically decoded against a loose or
dynamic type) under a stricter declared type, forcing selected sub-paths to
Unknown. Used to mark attributes that are only resolvable once a remote
write has completed (generated names, uids, computed annotations).

Author: KubeShape Team
Date: 2026-01-16
"""

import logging
from typing import Optional

from kubeshape.codec.context import DEFAULT_MAX_DEPTH
from kubeshape.codec.decoder import mapping_type, sequence_type
from kubeshape.core.errors import DecodeError
from kubeshape.core.models import (
    DYNAMIC,
    DynamicType,
    MappingType,
    ScalarType,
    SequenceType,
    StructuralType,
    StructuredType,
    TupleType,
    TypedValue,
)
from kubeshape.core.paths import ExpressionSet, ExpressionsLike, Path, as_expression_set

logger = logging.getLogger("kubeshape.narrower")


def narrow(type_: StructuralType, force_unknown: ExpressionsLike, value: TypedValue,
           path: Optional[Path] = None, max_depth: int = DEFAULT_MAX_DEPTH) -> TypedValue:
    return _narrow(type_, as_expression_set(force_unknown), value, path or Path.root(), 0, max_depth)


def _own_type(value: TypedValue) -> StructuralType:
    if not isinstance(value.type, DynamicType):
        return value.type
    if isinstance(value.value, list):
        return SequenceType(DYNAMIC)
    if isinstance(value.value, dict):
        return StructuredType({})
    return value.type


def _narrow(type_: StructuralType, force: ExpressionSet, value: TypedValue, path: Path,
            depth: int, max_depth: int) -> TypedValue:
    if force.matches(path):
        logger.debug(f"Forcing {path} to unknown")
        return TypedValue.unknown(type_)

    # Null and Unknown inputs both become Unknown.
    if value.is_unknown or value.is_null:
        return TypedValue.unknown(type_)

    if value.type == type_ and not force.covers_below(path):
        return value

    if depth > max_depth:
        raise DecodeError(f"Value nesting exceeds the maximum depth of {max_depth}", path)

    if isinstance(type_, DynamicType):
        if isinstance(value.value, (list, dict)) and force.covers_below(path):
            return _narrow(_own_type(value), force, value, path, depth, max_depth)
        return value

    if isinstance(type_, ScalarType):
        if value.type == type_:
            return value
        return TypedValue.unknown(type_)

    payload = value.value

    if isinstance(type_, SequenceType):
        if not isinstance(payload, list):
            raise DecodeError(f"Cannot narrow a {value.type} value to a sequence", path)
        children = [
            _narrow(type_.element, force, child, path.at_index(i), depth + 1, max_depth)
            for i, child in enumerate(payload)
        ]
        return TypedValue.known(sequence_type(type_.element, children), children)

    if isinstance(type_, TupleType):
        if not isinstance(payload, list):
            raise DecodeError(f"Cannot narrow a {value.type} value to a sequence", path)
        if len(payload) != len(type_.elements):
            raise DecodeError(
                f"Cannot narrow a sequence of {len(payload)} elements to {len(type_.elements)} positions", path)
        children = [
            _narrow(element, force, child, path.at_index(i), depth + 1, max_depth)
            for i, (element, child) in enumerate(zip(type_.elements, payload))
        ]
        return TypedValue.known(sequence_type(DYNAMIC, children), children)

    if isinstance(type_, MappingType):
        if not isinstance(payload, dict):
            raise DecodeError(f"Cannot narrow a {value.type} value to a mapping", path)
        children = {
            key: _narrow(type_.element, force, child, path.at_key(key), depth + 1, max_depth)
            for key, child in payload.items()
        }
        return TypedValue.known(mapping_type(type_.element, children), children)

    if isinstance(type_, StructuredType):
        if not isinstance(payload, dict):
            raise DecodeError(f"Cannot narrow a {value.type} value to an object", path)
        children = {
            name: _narrow(type_.fields.get(name, DYNAMIC), force, child, path.at_name(name),
                          depth + 1, max_depth)
            for name, child in payload.items()
        }
        fields = {name: child.type for name, child in children.items()}
        return TypedValue.known(StructuredType(fields), children)

    raise DecodeError(f"Unsupported target type {type_!r}", path)

#!/usr/bin/env python3
"""
KUBESHAPE DECODER - Untyped to Typed
------------------------------------
Walks an untyped tree (as returned by the API server) alongside a
structural type and produces a typed value tree.

Order of checks at every node:
    1. ignore set matches  -> the node is absent from the result
    2. unknown set matches -> Unknown, the data is not inspected
    3. dispatch on (data kind, declared type)

The walk is a pure function of its inputs.

Author: KubeShape Team
Date: 2026-01-16
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Dict, List, Optional

from kubeshape.codec.context import DEFAULT_MAX_DEPTH, DecodeContext
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
    scalar_kind_of,
)
from kubeshape.core.paths import ExpressionsLike, Path, as_expression_set

logger = logging.getLogger("kubeshape.decoder")


def decode(ignore: ExpressionsLike, unknown: ExpressionsLike, type_: StructuralType,
           value: Any, path: Optional[Path] = None, complete: bool = False,
           max_depth: int = DEFAULT_MAX_DEPTH) -> Optional[TypedValue]:
    """
    Decodes `value` against `type_`.

    Returns None when `path` itself is ignored. Raises DecodeError when the
    data conflicts with the declared type.
    """
    context = DecodeContext(
        ignore=as_expression_set(ignore),
        unknown=as_expression_set(unknown),
        complete=complete,
        max_depth=max_depth,
    )
    return decode_with_context(context, type_, value, path or Path.root())


def decode_with_context(context: DecodeContext, type_: StructuralType, value: Any,
                        path: Path) -> Optional[TypedValue]:
    return _decode(context, type_, value, path, 0)


def kind_name(value: Any) -> str:
    """Human readable wire kind of an untyped value."""
    if value is None:
        return "null"
    kind = scalar_kind_of(value)
    if kind is not None:
        return kind.value
    if isinstance(value, Mapping):
        return "mapping"
    if isinstance(value, Sequence):
        return "sequence"
    return type(value).__name__


def _decode(context: DecodeContext, type_: StructuralType, value: Any, path: Path,
            depth: int) -> Optional[TypedValue]:
    if context.ignore.matches(path):
        logger.debug(f"Ignoring {path}")
        return None

    if context.unknown.matches(path):
        logger.debug(f"Forcing {path} to unknown")
        return TypedValue.unknown(type_)

    if depth > context.max_depth:
        raise DecodeError(f"Value nesting exceeds the maximum depth of {context.max_depth}", path)

    if value is None:
        return TypedValue.null(type_)

    kind = scalar_kind_of(value)
    if kind is not None:
        if isinstance(type_, DynamicType):
            return TypedValue.known(ScalarType(kind), value)
        if isinstance(type_, ScalarType) and type_.kind is kind:
            return TypedValue.known(type_, value)
        raise _mismatch(type_, value, path)

    if isinstance(value, Mapping):
        if isinstance(type_, StructuredType):
            return _decode_structured(context, type_, value, path, depth)
        if isinstance(type_, MappingType):
            return _decode_mapping(context, type_, value, path, depth)
        if isinstance(type_, DynamicType):
            return _decode_structured(context, StructuredType({}), value, path, depth)
        raise _mismatch(type_, value, path)

    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        if isinstance(type_, SequenceType):
            return _decode_sequence(context, type_.element, value, path, depth)
        if isinstance(type_, TupleType):
            return _decode_tuple(context, type_, value, path, depth)
        if isinstance(type_, DynamicType):
            return _decode_sequence(context, DYNAMIC, value, path, depth)
        raise _mismatch(type_, value, path)

    raise DecodeError(f"Unsupported value of type {type(value).__name__}", path)


def _mismatch(type_: StructuralType, value: Any, path: Path) -> DecodeError:
    return DecodeError(f"Expected {_expected_name(type_)}, got {kind_name(value)}", path)


def _expected_name(type_: StructuralType) -> str:
    if isinstance(type_, ScalarType):
        return type_.kind.value
    if isinstance(type_, (SequenceType, TupleType)):
        return "sequence"
    if isinstance(type_, (MappingType, StructuredType)):
        return "mapping"
    return "dynamic"


def _shared_type(children: List[TypedValue]) -> Optional[StructuralType]:
    types = [child.type for child in children]
    if types and all(t == types[0] for t in types):
        return types[0]
    return None


def sequence_type(element: StructuralType, children: List[TypedValue]) -> StructuralType:
    """
    Type of a decoded sequence. Children sharing one type keep a homogeneous
    sequence; otherwise every position keeps its own type in a tuple, so
    decoding the encoded list against the result reproduces each child.
    """
    if not children:
        return SequenceType(element)
    shared = _shared_type(children)
    if shared is not None:
        return SequenceType(shared)
    return TupleType(tuple(child.type for child in children))


def mapping_type(element: StructuralType, children: Dict[str, TypedValue]) -> StructuralType:
    """Type of a decoded mapping; entries of differing types become named fields."""
    if all(child.type == element for child in children.values()):
        return MappingType(element)
    shared = _shared_type(list(children.values()))
    if shared is not None:
        return MappingType(shared)
    return StructuredType({key: child.type for key, child in children.items()})


def _string_keys(value: Mapping) -> Dict[str, Any]:
    return {str(key): item for key, item in value.items()}


def _decode_sequence(context: DecodeContext, element: StructuralType, value: Sequence,
                     path: Path, depth: int) -> TypedValue:
    children = []
    for i, item in enumerate(value):
        child = _decode(context, element, item, path.at_index(i), depth + 1)
        if child is not None:
            children.append(child)

    return TypedValue.known(sequence_type(element, children), children)


def _decode_tuple(context: DecodeContext, type_: TupleType, value: Sequence,
                  path: Path, depth: int) -> TypedValue:
    if len(value) != len(type_.elements):
        raise DecodeError(f"Expected a sequence of {len(type_.elements)} elements, got {len(value)}", path)

    children = []
    for i, (element, item) in enumerate(zip(type_.elements, value)):
        child = _decode(context, element, item, path.at_index(i), depth + 1)
        if child is not None:
            children.append(child)

    return TypedValue.known(sequence_type(DYNAMIC, children), children)


def _decode_mapping(context: DecodeContext, type_: MappingType, value: Mapping,
                    path: Path, depth: int) -> TypedValue:
    children = {}
    for key, item in _string_keys(value).items():
        child = _decode(context, type_.element, item, path.at_key(key), depth + 1)
        if child is not None:
            children[key] = child

    return TypedValue.known(mapping_type(type_.element, children), children)


def _decode_structured(context: DecodeContext, type_: StructuredType, value: Mapping,
                       path: Path, depth: int) -> TypedValue:
    declared = type_.fields
    value = _string_keys(value)
    children: Dict[str, TypedValue] = {}

    # Declared fields first, in schema order.
    for name, field_type in declared.items():
        if name in value:
            item = value[name]
        elif context.complete:
            item = None
        else:
            continue

        child = _decode(context, field_type, item, path.at_name(name), depth + 1)
        if child is not None:
            children[name] = child

    # Then keys the schema does not declare, in data order.
    for name, item in value.items():
        if name in declared:
            continue
        child = _decode(context, DYNAMIC, item, path.at_name(name), depth + 1)
        if child is not None:
            children[name] = child

    fields = {name: child.type for name, child in children.items()}
    return TypedValue.known(StructuredType(fields), children)

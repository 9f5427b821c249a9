#!/usr/bin/env python3
"""
KUBESHAPE DERIVER - Schema to Structural Type
---------------------------------------------
Maps an OpenAPI schema node onto a StructuralType. The schema is read-only
and the derived type is immutable. Any malformed nested node aborts the
whole derivation: no partial type is ever returned.

Author: KubeShape Team
Date: 2026-01-16
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Optional, Tuple

from kubeshape.core.errors import SchemaError
from kubeshape.core.models import (
    BOOL,
    DYNAMIC,
    NUMBER,
    STRING,
    MappingType,
    SequenceType,
    StructuralType,
    StructuredType,
)

logger = logging.getLogger("kubeshape.deriver")

INT_OR_STRING_FORMATS = ("int-or-string", "integer-or-string")
INT_OR_STRING_EXTENSION = "x-kubernetes-int-or-string"


def derive_type(node: Any, resolver: Optional[Any] = None) -> StructuralType:
    """
    Derives the structural type of `node`.

    Args:
        node: A schema node (mapping) as found in an OpenAPI document.
        resolver: Optional object exposing `resolve_ref(ref)`; required when
            the schema contains `$ref` nodes.
    """
    derived = _derive(node, resolver, "#", ())
    logger.debug(f"Derived structural type: {derived}")
    return derived


def _derive(node: Any, resolver: Optional[Any], location: str, refs: Tuple[str, ...]) -> StructuralType:
    if not isinstance(node, Mapping):
        raise SchemaError(f"Schema node at {location} must be a mapping, got {type(node).__name__}")

    if "$ref" in node:
        return _derive_reference(node["$ref"], resolver, location, refs)

    tag = _type_tag(node, location)

    if tag in ("integer", "number"):
        return NUMBER
    if tag == "boolean":
        return BOOL
    if tag == "string":
        return STRING
    if tag == "array":
        return _derive_array(node, resolver, location, refs)
    if tag == "object":
        return _derive_object(node, resolver, location, refs)
    if tag == "":
        if node.get("format") in INT_OR_STRING_FORMATS or node.get(INT_OR_STRING_EXTENSION) is True:
            return DYNAMIC

        for union_key in ("oneOf", "anyOf"):
            alternatives = _alternatives(node, union_key, location)
            if len(alternatives) > 1:
                return DYNAMIC

        all_of = _alternatives(node, "allOf", location)
        if len(all_of) == 1:
            return _derive(all_of[0], resolver, f"{location}/allOf/0", refs)

    raise SchemaError(f"Unexpected schema type {tag!r} at {location}")


def _derive_reference(ref: Any, resolver: Optional[Any], location: str, refs: Tuple[str, ...]) -> StructuralType:
    if not isinstance(ref, str):
        raise SchemaError(f"Reference at {location} must be a string")
    if resolver is None:
        raise SchemaError(f"Cannot follow reference {ref!r} at {location} without a schema catalog")
    if ref in refs:
        chain = " -> ".join(refs + (ref,))
        raise SchemaError(f"Circular schema reference: {chain}")

    target = resolver.resolve_ref(ref)
    return _derive(target, resolver, ref, refs + (ref,))


def _type_tag(node: Mapping, location: str) -> str:
    declared = node.get("type")
    if declared is None:
        return ""
    if isinstance(declared, str):
        return declared
    if isinstance(declared, Sequence) and all(isinstance(t, str) for t in declared):
        # Canonical order, so ["string", "integer"] and ["integer", "string"] agree.
        return "-".join(sorted(declared))
    raise SchemaError(f"Schema 'type' at {location} must be a string or a list of strings")


def _alternatives(node: Mapping, key: str, location: str) -> list:
    value = node.get(key)
    if value is None:
        return []
    if isinstance(value, str) or not isinstance(value, Sequence):
        raise SchemaError(f"Schema '{key}' at {location} must be a list")
    return list(value)


def _derive_array(node: Mapping, resolver: Optional[Any], location: str, refs: Tuple[str, ...]) -> SequenceType:
    items = node.get("items")
    if items is None:
        return SequenceType(DYNAMIC)
    return SequenceType(_derive(items, resolver, f"{location}/items", refs))


def _derive_object(node: Mapping, resolver: Optional[Any], location: str, refs: Tuple[str, ...]) -> StructuralType:
    properties = node.get("properties")
    if properties is not None:
        if not isinstance(properties, Mapping):
            raise SchemaError(f"Schema 'properties' at {location} must be a mapping")
        fields = {}
        for name, prop in properties.items():
            fields[name] = _derive(prop, resolver, f"{location}/properties/{name}", refs)
        return StructuredType(fields)

    additional = node.get("additionalProperties")
    if isinstance(additional, Mapping):
        element = _derive(additional, resolver, f"{location}/additionalProperties", refs)
        return MappingType(element)

    # Unshaped object: every key is typed from the data.
    return StructuredType({})

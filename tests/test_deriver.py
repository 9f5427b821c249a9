#!/usr/bin/env python3
"""
KUBESHAPE TEST SUITE - Schema Type Deriver
------------------------------------------
"""

import pytest

from kubeshape.codec.decoder import decode
from kubeshape.core.errors import SchemaError
from kubeshape.core.models import (
    BOOL,
    DYNAMIC,
    NUMBER,
    STRING,
    MappingType,
    SequenceType,
    StructuredType,
)
from kubeshape.schema.deriver import derive_type


@pytest.mark.parametrize("tag, expected", [
    ("integer", NUMBER),
    ("number", NUMBER),
    ("boolean", BOOL),
    ("string", STRING),
])
def test_scalar_tags(tag, expected):
    assert derive_type({"type": tag}) == expected


def test_array_with_and_without_items():
    assert derive_type({"type": "array", "items": {"type": "string"}}) == SequenceType(STRING)
    assert derive_type({"type": "array"}) == SequenceType(DYNAMIC)


def test_object_with_properties_keeps_schema_order():
    derived = derive_type({
        "type": "object",
        "properties": {
            "name": {"type": "string"},
            "replicas": {"type": "integer"},
            "tags": {"type": "array", "items": {"type": "string"}},
        },
    })
    assert derived == StructuredType({
        "name": STRING,
        "replicas": NUMBER,
        "tags": SequenceType(STRING),
    })
    assert list(derived.fields) == ["name", "replicas", "tags"]


def test_object_with_additional_properties_is_a_mapping():
    derived = derive_type({"type": "object", "additionalProperties": {"type": "string"}})
    assert derived == MappingType(STRING)


def test_unshaped_object():
    assert derive_type({"type": "object"}) == StructuredType({})
    assert derive_type({"type": "object", "additionalProperties": True}) == StructuredType({})


def test_properties_win_over_additional_properties():
    derived = derive_type({
        "type": "object",
        "properties": {"a": {"type": "boolean"}},
        "additionalProperties": {"type": "string"},
    })
    assert derived == StructuredType({"a": BOOL})


@pytest.mark.parametrize("node", [
    {"format": "int-or-string"},
    {"format": "integer-or-string"},
    {"x-kubernetes-int-or-string": True},
    {"oneOf": [{"type": "string"}, {"type": "integer"}]},
    {"anyOf": [{"type": "integer"}, {"type": "string"}]},
])
def test_untagged_nodes_that_derive_dynamic(node):
    assert derive_type(node) == DYNAMIC


def test_single_intersection_recurses():
    assert derive_type({"allOf": [{"type": "object", "properties": {"x": {"type": "string"}}}]}) == \
        StructuredType({"x": STRING})


@pytest.mark.parametrize("node", [
    {},
    {"oneOf": [{"type": "string"}]},
    {"allOf": [{"type": "string"}, {"type": "integer"}]},
    {"type": "null"},
    {"type": ["string", "integer"]},
    {"type": 7},
])
def test_unsupported_shapes_raise(node):
    with pytest.raises(SchemaError):
        derive_type(node)


def test_type_lists_are_sorted_before_matching():
    with pytest.raises(SchemaError, match="integer-string"):
        derive_type({"type": ["string", "integer"]})
    with pytest.raises(SchemaError, match="integer-string"):
        derive_type({"type": ["integer", "string"]})
    assert derive_type({"type": ["string"]}) == STRING


def test_malformed_nested_node_is_fatal():
    schema = {
        "type": "object",
        "properties": {
            "ok": {"type": "string"},
            "broken": "string",
        },
    }
    with pytest.raises(SchemaError, match="#/properties/broken"):
        derive_type(schema)


def test_reference_without_catalog_is_fatal():
    with pytest.raises(SchemaError, match="without a schema catalog"):
        derive_type({"type": "object", "properties": {"m": {"$ref": "#/components/schemas/Meta"}}})


def test_determinism_independent_of_property_order():
    forward = {"type": "object", "properties": {"a": {"type": "string"}, "b": {"type": "integer"}}}
    backward = {"type": "object", "properties": {"b": {"type": "integer"}, "a": {"type": "string"}}}

    assert derive_type(forward) == derive_type(forward)
    assert derive_type(forward) == derive_type(backward)


def test_two_alternative_union_decodes_anything():
    """Example C: a 2-alternative union accepts any scalar or mapping."""
    derived = derive_type({"oneOf": [{"type": "string"}, {"type": "integer"}]})
    assert derived == DYNAMIC
    for value in ("text", 42, 1.5, True, {"nested": {"deep": [1, "x"]}}):
        assert decode(None, None, derived, value) is not None

#!/usr/bin/env python3
"""
KUBESHAPE TEST SUITE - Encoder & Knowledge Classifier
-----------------------------------------------------
"""

import pytest

from kubeshape.codec.encoder import encode, encode_object
from kubeshape.codec.knowledge import is_fully_known
from kubeshape.core.errors import EncodeError
from kubeshape.core.models import (
    BOOL,
    DYNAMIC,
    NUMBER,
    STRING,
    MappingType,
    SequenceType,
    StructuredType,
    TypedValue,
)
from kubeshape.core.paths import Index, Key, Name, Path

K = TypedValue.known
LABELS = MappingType(STRING)


def deployment(labels_value=None, image=None):
    labels = labels_value or K(LABELS, {"app": K(STRING, "web")})
    container = K(StructuredType({"image": STRING}), {"image": image or K(STRING, "nginx")})
    return K(
        StructuredType({"metadata": StructuredType({"labels": LABELS}), "spec": SequenceType(DYNAMIC)}),
        {
            "metadata": K(StructuredType({"labels": LABELS}), {"labels": labels}),
            "spec": K(SequenceType(DYNAMIC), [container]),
        },
    )


def test_scalars_and_null():
    assert encode(K(NUMBER, 3)) == 3
    assert encode(K(BOOL, False)) is False
    assert encode(K(STRING, "")) == ""
    assert encode(TypedValue.null(STRING)) is None


def test_composites_keep_order():
    value = K(StructuredType({"b": NUMBER, "a": NUMBER}), {"b": K(NUMBER, 1), "a": K(NUMBER, 2)})
    assert list(encode(value)) == ["b", "a"]
    assert encode(K(SequenceType(STRING), [K(STRING, "x"), TypedValue.null(STRING)])) == ["x", None]


def test_nested_object():
    assert encode(deployment()) == {
        "metadata": {"labels": {"app": "web"}},
        "spec": [{"image": "nginx"}],
    }


def test_example_d_unknown_inside_sequence_names_its_path():
    tree = deployment(image=TypedValue.unknown(STRING))
    assert not is_fully_known(tree)

    with pytest.raises(EncodeError) as excinfo:
        encode(tree)
    assert excinfo.value.path == Path([Name("spec"), Index(0), Name("image")])
    assert "spec[0].image" in str(excinfo.value)


def test_example_d_unknown_mapping_entry_uses_key_step():
    labels = K(LABELS, {"app.kubernetes.io/name": TypedValue.unknown(STRING)})
    with pytest.raises(EncodeError) as excinfo:
        encode(deployment(labels_value=labels))
    assert excinfo.value.path == Path([Name("metadata"), Name("labels"), Key("app.kubernetes.io/name")])


def test_unknown_root_raises():
    with pytest.raises(EncodeError, match="Cannot encode an unknown value"):
        encode(TypedValue.unknown(DYNAMIC))


def test_encode_object_requires_known_mapping():
    assert encode_object(deployment())["spec"] == [{"image": "nginx"}]

    for bad in (K(NUMBER, 1), TypedValue.null(LABELS), K(SequenceType(NUMBER), [])):
        with pytest.raises(EncodeError, match="Expected a known object value"):
            encode_object(bad)


def test_classifier_ignores_null_and_accepts_missing_value():
    assert is_fully_known(None)
    assert is_fully_known(TypedValue.null(STRING))
    assert is_fully_known(deployment())


def test_classifier_finds_unknown_at_any_depth():
    assert not is_fully_known(TypedValue.unknown(NUMBER))
    assert not is_fully_known(deployment(image=TypedValue.unknown(STRING)))


def test_classifier_handles_very_deep_trees():
    node = K(STRING, "leaf")
    for _ in range(5000):
        node = K(SequenceType(DYNAMIC), [node])
    assert is_fully_known(node)

    node = TypedValue.unknown(STRING)
    for _ in range(5000):
        node = K(StructuredType({}), {"x": node})
    assert not is_fully_known(node)


def test_encoder_depth_guard_names_the_path():
    node = K(STRING, "leaf")
    for _ in range(20):
        node = K(SequenceType(DYNAMIC), [node])

    with pytest.raises(EncodeError, match="maximum depth of 5") as excinfo:
        encode(node, max_depth=5)
    assert len(excinfo.value.path) == 6
    assert encode(node) == [[[[[[[[[[[[[[[[[[[["leaf"]]]]]]]]]]]]]]]]]]]]

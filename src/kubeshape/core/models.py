#!/usr/bin/env python3
"""
KUBESHAPE CORE MODELS
---------------------
Defines the fundamental data structures used across the KubeShape codec:
the structural types derived from a schema and the typed value tree whose
nodes carry a knowledge tag (known, explicitly null, or unknown).

Author: KubeShape Team
Date: 2026-01-16
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


class ScalarKind(Enum):
    NUMBER = "number"
    BOOL = "bool"
    STRING = "string"


@dataclass(frozen=True)
class ScalarType:
    kind: ScalarKind

    def __str__(self) -> str:
        return self.kind.value


@dataclass(frozen=True)
class SequenceType:
    element: "StructuralType"

    def __str__(self) -> str:
        return f"sequence[{self.element}]"


@dataclass(frozen=True)
class TupleType:
    """
    A sequence whose positions carry their own types. Decoding produces it
    when the elements of a list do not share one type.
    """
    elements: Tuple["StructuralType", ...] = ()

    def __str__(self) -> str:
        return "tuple[" + ", ".join(str(t) for t in self.elements) + "]"


@dataclass(frozen=True)
class MappingType:
    element: "StructuralType"

    def __str__(self) -> str:
        return f"mapping[{self.element}]"


@dataclass(frozen=True)
class StructuredType:
    """
    A record with named fields. Field order is the declared (schema) order;
    equality ignores order.
    """
    fields: Dict[str, "StructuralType"] = field(default_factory=dict)

    def __str__(self) -> str:
        inner = ", ".join(f"{name}: {t}" for name, t in self.fields.items())
        return "{" + inner + "}"


@dataclass(frozen=True)
class DynamicType:
    """Placeholder for a slot whose shape is only known from the data."""

    def __str__(self) -> str:
        return "dynamic"


StructuralType = Union[ScalarType, SequenceType, TupleType, MappingType, StructuredType, DynamicType]

NUMBER = ScalarType(ScalarKind.NUMBER)
BOOL = ScalarType(ScalarKind.BOOL)
STRING = ScalarType(ScalarKind.STRING)
DYNAMIC = DynamicType()


class Tag(Enum):
    KNOWN = "known"
    NULL = "null"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class TypedValue:
    """
    A node of the typed value tree.

    `value` holds a Python scalar for known scalars, a list of TypedValue for
    known sequences and a dict of TypedValue for known mappings and
    structured values. Null and Unknown nodes never carry a payload.
    """
    type: Any
    tag: Tag = Tag.KNOWN
    value: Any = None

    def __post_init__(self):
        if self.tag is not Tag.KNOWN and self.value is not None:
            raise ValueError(f"{self.tag.value} values cannot carry a payload")

    @classmethod
    def known(cls, type_: Any, value: Any) -> "TypedValue":
        return cls(type_, Tag.KNOWN, value)

    @classmethod
    def null(cls, type_: Any) -> "TypedValue":
        return cls(type_, Tag.NULL)

    @classmethod
    def unknown(cls, type_: Any) -> "TypedValue":
        return cls(type_, Tag.UNKNOWN)

    @property
    def is_known(self) -> bool:
        return self.tag is Tag.KNOWN

    @property
    def is_null(self) -> bool:
        return self.tag is Tag.NULL

    @property
    def is_unknown(self) -> bool:
        return self.tag is Tag.UNKNOWN

    def children(self) -> List[Any]:
        """Returns (step_label, child) pairs of a known composite node."""
        if not self.is_known:
            return []
        if isinstance(self.value, list):
            return list(enumerate(self.value))
        if isinstance(self.value, dict):
            return list(self.value.items())
        return []


def scalar_kind_of(value: Any) -> Optional[ScalarKind]:
    """Classifies a wire scalar. bool must be tested before int."""
    if isinstance(value, bool):
        return ScalarKind.BOOL
    if isinstance(value, (int, float)):
        return ScalarKind.NUMBER
    if isinstance(value, str):
        return ScalarKind.STRING
    return None

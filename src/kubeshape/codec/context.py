#!/usr/bin/env python3
"""
KUBESHAPE DECODE CONTEXT
------------------------
The per-call settings of a decode walk. Built once by the caller and passed
down unchanged; it never accumulates state.

Author: KubeShape Team
Date: 2026-01-16
"""

from dataclasses import dataclass, field

from kubeshape.core.paths import ExpressionSet

DEFAULT_MAX_DEPTH = 256


@dataclass(frozen=True)
class DecodeContext:
    """
    Attributes:
        ignore: Paths dropped from the result entirely.
        unknown: Paths forced to Unknown without inspecting their content.
        complete: When True, every declared field of a structured type is
            present in the result (Null when absent from the data). When
            False, only keys present in the data are decoded.
        max_depth: Nesting limit; deeper input raises DecodeError.
    """
    ignore: ExpressionSet = field(default_factory=ExpressionSet)
    unknown: ExpressionSet = field(default_factory=ExpressionSet)
    complete: bool = False
    max_depth: int = DEFAULT_MAX_DEPTH

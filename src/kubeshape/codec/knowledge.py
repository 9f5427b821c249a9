#!/usr/bin/env python3
"""
KUBESHAPE KNOWLEDGE CLASSIFIER
------------------------------
Answers one question: does a typed tree still hold any Unknown node?

Author: KubeShape Team
Date: 2026-01-16
"""

from typing import Optional

from kubeshape.core.models import TypedValue


def is_fully_known(value: Optional[TypedValue]) -> bool:
    """False iff some node reachable from `value` is Unknown."""
    if value is None:
        return True

    # Explicit work-list: user manifests can nest deeper than the call stack.
    pending = [value]
    while pending:
        node = pending.pop()
        if node.is_unknown:
            return False
        pending.extend(child for _, child in node.children())
    return True

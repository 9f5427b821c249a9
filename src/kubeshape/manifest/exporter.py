#!/usr/bin/env python3
"""
KUBESHAPE EXPORTER
------------------
Dumps encoded objects back to YAML in the conventional Kubernetes layout.

Author: KubeShape Team
Date: 2026-01-16
"""

import io
from typing import Any, List, Union

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap, CommentedSeq


class ManifestExporter:
    """Converts untyped objects into a single YAML stream."""

    def __init__(self):
        self.yaml = YAML(typ='rt')
        # Standard K8s: 2 spaces, sequences indented 4 (offset 2)
        self.yaml.indent(mapping=2, sequence=4, offset=2)
        self.yaml.width = 4096
        self.preferred_order = ["apiVersion", "kind", "metadata", "spec", "data", "status"]

    def _ordered(self, data: Any) -> Any:
        """Recursively rebuilds mappings with the preferred top-level key order."""
        if isinstance(data, dict):
            keys = list(data.keys())

            def sort_logic(key):
                if key in self.preferred_order:
                    return self.preferred_order.index(key)
                # Other keys keep their relative original position
                return len(self.preferred_order) + keys.index(key)

            ordered = CommentedMap()
            for key in sorted(keys, key=sort_logic):
                ordered[key] = self._ordered(data[key])
            return ordered

        if isinstance(data, list):
            return CommentedSeq(self._ordered(item) for item in data)

        return data

    def export(self, objects: Union[dict, List[dict]]) -> str:
        """Exports one object or a list of objects, separated by '---'."""
        stream = io.StringIO()
        docs = objects if isinstance(objects, list) else [objects]

        for i, doc in enumerate(docs):
            if i > 0:
                stream.write("---\n")
            self.yaml.dump(self._ordered(doc), stream)

        return stream.getvalue()

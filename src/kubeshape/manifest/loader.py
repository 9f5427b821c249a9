#!/usr/bin/env python3
"""
KUBESHAPE MANIFEST LOADER
-------------------------
Parses (multi-document) YAML manifests into the untyped wire form: null,
bool, number, string, lists and string-keyed mappings. Timestamps stay
strings, exactly as the API server returns them in JSON.

Author: KubeShape Team
Date: 2026-01-16
"""

from pathlib import Path
from typing import Any, List, Union

from ruamel.yaml import YAML, YAMLError
from ruamel.yaml.constructor import SafeConstructor

from kubeshape.core.errors import DecodeError


class ManifestConstructor(SafeConstructor):
    """Safe constructor that keeps YAML timestamps as plain strings."""


ManifestConstructor.add_constructor("tag:yaml.org,2002:timestamp", SafeConstructor.construct_yaml_str)


def _parser() -> YAML:
    yaml = YAML(typ="safe", pure=True)
    yaml.Constructor = ManifestConstructor
    return yaml


def load_manifests(text: str) -> List[Any]:
    """Returns every non-empty document of `text`."""
    try:
        documents = list(_parser().load_all(text))
    except YAMLError as e:
        raise DecodeError(f"Manifest is not valid YAML: {e}") from e
    return [doc for doc in documents if doc is not None]


def load_manifest_file(path: Union[str, Path]) -> List[Any]:
    # utf-8-sig strips a BOM left behind by some editors
    return load_manifests(Path(path).read_text(encoding="utf-8-sig"))

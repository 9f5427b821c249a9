#!/usr/bin/env python3
"""
KUBESHAPE SCHEMA CATALOG
------------------------
Wraps an OpenAPI v3 document published by the API server for a single
group/version. Locates the schema of a resource kind through the
`x-kubernetes-group-version-kind` vendor extension and resolves local
`$ref` pointers for the deriver.

Author: KubeShape Team
Date: 2026-01-16
"""

import logging
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ruamel.yaml import YAML, YAMLError

from kubeshape.core.errors import SchemaError
from kubeshape.core.models import StructuralType
from kubeshape.schema.deriver import derive_type

logger = logging.getLogger("kubeshape.catalog")

GVK_EXTENSION = "x-kubernetes-group-version-kind"
REF_PREFIXES = ("#/components/schemas/", "#/definitions/")

# DNS-1123 style group, followed by a version such as v1, v1beta2, v2alpha1
GROUP_PATTERN = re.compile(r"^[a-z0-9]([-a-z0-9.]*[a-z0-9])?$")
VERSION_PATTERN = re.compile(r"^[a-z0-9]+$")


@dataclass(frozen=True)
class GroupVersionKind:
    group: str
    version: str
    kind: str

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}" if self.group else self.version

    def __str__(self) -> str:
        return f"{self.api_version}, Kind={self.kind}"


def parse_gvk(api_version: str, kind: str) -> GroupVersionKind:
    """Parses an apiVersion (`v1`, `apps/v1`) and kind into a GroupVersionKind."""
    if not isinstance(api_version, str) or not api_version:
        raise SchemaError(f"Invalid apiVersion: {api_version!r}")
    if not isinstance(kind, str) or not kind:
        raise SchemaError(f"Invalid kind: {kind!r}")

    parts = api_version.split("/")
    if len(parts) == 1:
        group, version = "", parts[0]
    elif len(parts) == 2:
        group, version = parts
        if not GROUP_PATTERN.match(group):
            raise SchemaError(f"Invalid API group in apiVersion {api_version!r}")
    else:
        raise SchemaError(f"Unexpected apiVersion {api_version!r}: expected 'version' or 'group/version'")

    if not VERSION_PATTERN.match(version):
        raise SchemaError(f"Invalid version in apiVersion {api_version!r}")

    return GroupVersionKind(group=group, version=version, kind=kind)


class SchemaCatalog:
    """
    Read-only view over an OpenAPI document.
    One catalog is built per document; it holds no state besides the document.
    """

    def __init__(self, document: Mapping):
        if not isinstance(document, Mapping):
            raise SchemaError("OpenAPI document root must be a mapping")
        self.document = document
        self.schemas = self._collect_schemas(document)

    def _collect_schemas(self, document: Mapping) -> Dict[str, Any]:
        components = document.get("components") or {}
        if not isinstance(components, Mapping):
            raise SchemaError("OpenAPI 'components' must be a mapping")
        schemas = components.get("schemas")
        if schemas is None:
            # Swagger 2.0 documents keep their schemas under 'definitions'
            schemas = document.get("definitions") or {}
        if not isinstance(schemas, Mapping):
            raise SchemaError("OpenAPI schema table must be a mapping")
        return dict(schemas)

    def resolve_ref(self, ref: str) -> Mapping:
        """Returns the schema a local `$ref` points at."""
        for prefix in REF_PREFIXES:
            if ref.startswith(prefix):
                name = ref[len(prefix):].replace("~1", "/").replace("~0", "~")
                break
        else:
            raise SchemaError(f"Unsupported schema reference {ref!r}: only local references are followed")

        schema = self.schemas.get(name)
        if schema is None:
            raise SchemaError(f"Schema reference {ref!r} can't be resolved")
        if not isinstance(schema, Mapping):
            raise SchemaError(f"Schema {name!r} can't be loaded")
        return schema

    def find_schema(self, gvk: GroupVersionKind) -> Mapping:
        """Returns the schema registered for `gvk` via the vendor extension."""
        for name, schema in self.schemas.items():
            if not isinstance(schema, Mapping):
                raise SchemaError(f"Schema {name!r} can't be loaded")

            entries = schema.get(GVK_EXTENSION)
            if entries is None:
                continue
            if isinstance(entries, str) or not isinstance(entries, Sequence):
                raise SchemaError(f"Schema {name!r} has a malformed {GVK_EXTENSION} extension")

            if len(entries) == 1 and self._entry_matches(entries[0], gvk):
                logger.debug(f"Resolved {gvk} to schema {name!r}")
                return schema

        raise SchemaError(f"Schema {gvk.kind!r} not found")

    def _entry_matches(self, entry: Any, gvk: GroupVersionKind) -> bool:
        if not isinstance(entry, Mapping):
            return False
        if entry.get("kind") != gvk.kind:
            return False
        # Group and version are optional in hand-written catalogs.
        if "version" in entry and entry["version"] != gvk.version:
            return False
        if "group" in entry and entry["group"] != gvk.group:
            return False
        return True

    def derive(self, gvk: GroupVersionKind) -> StructuralType:
        return derive_type(self.find_schema(gvk), resolver=self)


def load_catalog(source: Union[str, Path]) -> SchemaCatalog:
    """Loads a catalog from a JSON or YAML OpenAPI document on disk."""
    path = Path(source)
    yaml = YAML(typ="safe")
    try:
        with open(path, "r", encoding="utf-8") as f:
            document = yaml.load(f)
    except FileNotFoundError as e:
        raise SchemaError(f"Schema catalog not found: {path}") from e
    except (OSError, YAMLError) as e:
        raise SchemaError(f"Failed to load schema catalog {path}: {e}") from e

    if document is None:
        raise SchemaError(f"Schema catalog {path} is empty")
    return SchemaCatalog(document)

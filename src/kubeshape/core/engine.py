#!/usr/bin/env python3
"""
KUBESHAPE ENGINE - The Orchestrator
-----------------------------------
Ties the codec together for whole manifests: looks up the schema of the
manifest's kind in the catalog, derives its structural type and runs the
decoder, narrower, classifier and encoder with the configured path sets.

Author: KubeShape Team
Date: 2026-01-16
"""

import logging
import time
from dataclasses import replace
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from kubeshape.codec.decoder import decode, decode_with_context
from kubeshape.codec.encoder import encode_object
from kubeshape.codec.knowledge import is_fully_known
from kubeshape.codec.narrower import narrow
from kubeshape.core.config import CodecSettings
from kubeshape.core.errors import DecodeError, KubeShapeError
from kubeshape.core.models import DYNAMIC, StructuralType, TypedValue
from kubeshape.core.paths import ExpressionSet, Path as ValuePath
from kubeshape.manifest.loader import load_manifest_file
from kubeshape.schema.catalog import SchemaCatalog, load_catalog, parse_gvk

logger = logging.getLogger("kubeshape.engine")


class CodecEngine:
    """
    Principal entry point for manifest-level work.
    Holds the catalog and the settings; every call derives its own type and
    shares nothing with other calls.
    """

    def __init__(self, catalog: Union[SchemaCatalog, str, Path],
                 settings: Optional[CodecSettings] = None):
        if isinstance(catalog, SchemaCatalog):
            self.catalog = catalog
        else:
            try:
                self.catalog = load_catalog(catalog)
            except KubeShapeError:
                logger.error(f"Critical Failure: Unable to load catalog from {catalog}")
                raise
        self.settings = settings or CodecSettings()

    def type_for(self, obj: Any) -> StructuralType:
        """Derives the structural type of a manifest from its apiVersion and kind."""
        if not isinstance(obj, Mapping):
            raise DecodeError(f"Manifest must be a mapping, got {type(obj).__name__}")
        api_version, kind = obj.get("apiVersion"), obj.get("kind")
        for field_name, value in (("apiVersion", api_version), ("kind", kind)):
            if not isinstance(value, str) or not value:
                raise DecodeError(f"Manifest is missing required attribute {field_name!r}")
        return self.catalog.derive(parse_gvk(api_version, kind))

    def decode_manifest(self, obj: Any, with_unknowns: bool = False) -> TypedValue:
        """
        Decodes a manifest (or an object returned by the server) against its
        schema. Server-side fields are dropped; with `with_unknowns` the
        configured unknown fields are forced to Unknown.
        """
        context = self.settings.decode_context()
        if not with_unknowns:
            context = replace(context, unknown=ExpressionSet())

        return decode_with_context(context, self.type_for(obj), obj, ValuePath.root())

    def plan_manifest(self, obj: Any) -> TypedValue:
        """
        Types a user manifest loosely first (server-side fields dropped), then
        narrows it to the schema type with the configured unknown fields forced.
        """
        target = self.type_for(obj)
        loose = decode(self.settings.ignore_set(), None, DYNAMIC, obj, max_depth=self.settings.max_depth)
        return narrow(target, self.settings.unknown_set(), loose, max_depth=self.settings.max_depth)

    def round_trip(self, obj: Any) -> Dict[str, Any]:
        """Decodes and re-encodes a manifest; the result lacks server-side fields."""
        return encode_object(self.decode_manifest(obj), max_depth=self.settings.max_depth)

    def audit_file(self, file_path: Union[str, Path]) -> List[Dict[str, Any]]:
        """Decodes every document of a manifest file and reports per document."""
        try:
            documents = load_manifest_file(file_path)
        except (OSError, KubeShapeError) as e:
            logger.error(f"Error reading {file_path}: {e}")
            return [self._file_error(str(file_path), str(e))]

        reports = []
        for index, doc in enumerate(documents):
            kind = doc.get("kind", "Unknown") if isinstance(doc, Mapping) else "Unknown"
            api_version = doc.get("apiVersion", "Unknown") if isinstance(doc, Mapping) else "Unknown"
            try:
                typed = self.decode_manifest(doc, with_unknowns=True)
            except KubeShapeError as e:
                logger.error(f"Error decoding document {index} of {file_path}: {e}")
                report = self._file_error(str(file_path), str(e))
                report.update(document=index, kind=str(kind), api_version=str(api_version))
                reports.append(report)
                continue

            fully_known = is_fully_known(typed)
            reports.append({
                "file_path": str(file_path),
                "document": index,
                "kind": str(kind),
                "api_version": str(api_version),
                "status": "DECODED" if fully_known else "PENDING",
                "success": True,
                "fully_known": fully_known,
                "error": None,
                "value": typed,
            })
        return reports

    def generate_summary(self, reports: List[Dict[str, Any]]) -> Dict[str, Any]:
        total = len(reports)
        decoded = sum(1 for r in reports if r.get("status") == "DECODED")
        pending = sum(1 for r in reports if r.get("status") == "PENDING")
        errors = sum(1 for r in reports if r.get("status") == "ERROR")
        return {
            "total_documents": total,
            "decoded": decoded,
            "pending": pending,
            "errors": errors,
            "success_rate": ((decoded + pending) / total) if total > 0 else 0,
            "summary_timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
        }

    def _file_error(self, path: str, error: str) -> Dict[str, Any]:
        return {
            "file_path": path, "status": "ERROR", "error": error,
            "success": False, "fully_known": False, "kind": "Unknown",
            "api_version": "Unknown",
        }

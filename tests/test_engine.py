#!/usr/bin/env python3
"""
KUBESHAPE TEST SUITE - Engine & Manifest I/O
--------------------------------------------
Whole-manifest decoding against the fixture catalog, planning, audits and
the YAML loader/exporter.
"""

import pytest

from kubeshape.codec.knowledge import is_fully_known
from kubeshape.core.config import CodecSettings
from kubeshape.core.engine import CodecEngine
from kubeshape.core.errors import DecodeError, SchemaError
from kubeshape.core.models import STRING, MappingType, TypedValue
from kubeshape.manifest.exporter import ManifestExporter
from kubeshape.manifest.loader import load_manifest_file, load_manifests


@pytest.fixture
def engine(catalog):
    return CodecEngine(catalog)


@pytest.fixture
def documents(fixtures_dir):
    return load_manifest_file(fixtures_dir / "deployment.yaml")


def test_loader_keeps_timestamps_as_strings(documents):
    assert len(documents) == 2
    assert documents[0]["metadata"]["creationTimestamp"] == "2026-01-16T10:00:00Z"
    assert documents[1]["data"] == {"mode": "fast"}


def test_loader_skips_empty_documents_and_rejects_bad_yaml():
    assert load_manifests("---\n---\nkind: A\n---\n") == [{"kind": "A"}]
    with pytest.raises(DecodeError, match="not valid YAML"):
        load_manifests("kind: [unclosed\n")


def test_engine_accepts_a_catalog_path(catalog_path):
    assert CodecEngine(catalog_path).catalog.schemas


def test_engine_propagates_catalog_errors(tmp_path):
    with pytest.raises(SchemaError):
        CodecEngine(tmp_path / "missing.yaml")


def test_decode_manifest_drops_server_side_fields(engine, documents):
    typed = engine.decode_manifest(documents[0])

    assert is_fully_known(typed)
    assert "status" not in typed.value
    metadata = typed.value["metadata"].value
    assert "resourceVersion" not in metadata
    assert "creationTimestamp" not in metadata
    assert metadata["labels"].type == MappingType(STRING)

    container = typed.value["spec"].value["template"].value["spec"].value["containers"].value[0]
    assert container.value["ports"].value[0].value["targetPort"].type == STRING


def test_decode_manifest_forces_unknowns_on_request(engine, documents):
    doc = dict(documents[0], metadata=dict(documents[0]["metadata"], uid="0b6a-41"))

    assert is_fully_known(engine.decode_manifest(doc))
    typed = engine.decode_manifest(doc, with_unknowns=True)
    assert typed.value["metadata"].value["uid"] == TypedValue.unknown(STRING)
    assert not is_fully_known(typed)


def test_complete_mode_exposes_declared_fields(catalog, documents):
    engine = CodecEngine(catalog, CodecSettings(complete=True))
    typed = engine.decode_manifest(documents[1])

    assert typed.value["immutable"].is_null
    assert typed.value["metadata"].value["namespace"].is_null
    assert "resourceVersion" not in typed.value["metadata"].value


def test_round_trip_returns_manifest_without_server_fields(engine, documents):
    encoded = engine.round_trip(documents[0])

    expected = dict(documents[0])
    expected.pop("status")
    expected["metadata"] = {k: v for k, v in documents[0]["metadata"].items()
                            if k not in ("resourceVersion", "creationTimestamp")}
    assert encoded == expected
    assert engine.round_trip(documents[1]) == documents[1]


def test_plan_manifest_forces_create_time_fields(engine, documents):
    doc = dict(documents[0], metadata=dict(documents[0]["metadata"], uid="0b6a-41"))
    planned = engine.plan_manifest(doc)

    assert planned.value["metadata"].value["uid"] == TypedValue.unknown(STRING)
    assert planned.value["spec"].value["replicas"].value == 2
    assert not is_fully_known(planned)


def test_plan_manifest_with_custom_unknowns(catalog, documents):
    settings = CodecSettings().with_extra(unknown=("spec.template.spec.containers[*].image",))
    planned = CodecEngine(catalog, settings).plan_manifest(documents[0])

    container = planned.value["spec"].value["template"].value["spec"].value["containers"].value[0]
    assert container.value["image"] == TypedValue.unknown(STRING)
    assert container.value["ports"].value[0].value["targetPort"].type == STRING
    assert "status" not in planned.value


@pytest.mark.parametrize("obj, message", [
    ({"kind": "Deployment"}, "apiVersion"),
    ({"apiVersion": "apps/v1"}, "kind"),
    (["not", "a", "manifest"], "must be a mapping"),
])
def test_type_for_requires_api_version_and_kind(engine, obj, message):
    with pytest.raises(DecodeError, match=message):
        engine.type_for(obj)


def test_decode_mismatch_names_path(engine):
    doc = {"apiVersion": "apps/v1", "kind": "Deployment", "spec": {"replicas": "two"}}
    with pytest.raises(DecodeError, match=r"spec\.replicas"):
        engine.decode_manifest(doc)


def test_audit_file(engine, fixtures_dir):
    reports = engine.audit_file(fixtures_dir / "deployment.yaml")

    assert [r["kind"] for r in reports] == ["Deployment", "ConfigMap"]
    assert [r["status"] for r in reports] == ["DECODED", "DECODED"]
    assert all(r["success"] and r["error"] is None for r in reports)


def test_audit_reports_errors_per_document(engine, tmp_path):
    manifest = tmp_path / "mixed.yaml"
    manifest.write_text(
        "apiVersion: v1\nkind: ConfigMap\nmetadata:\n  name: a\n  uid: x\n"
        "---\n"
        "apiVersion: stable.example.com/v1\nkind: CronTab\n"
        "---\n"
        "apiVersion: v1\nkind: ConfigMap\ndata:\n  n: 1\n"
    )
    reports = engine.audit_file(manifest)

    assert [r["status"] for r in reports] == ["PENDING", "ERROR", "ERROR"]
    assert "CronTab" in reports[1]["error"]
    assert "data" in reports[2]["error"]

    summary = engine.generate_summary(reports)
    assert summary["total_documents"] == 3
    assert (summary["decoded"], summary["pending"], summary["errors"]) == (0, 1, 2)


def test_audit_missing_file(engine, tmp_path):
    reports = engine.audit_file(tmp_path / "missing.yaml")
    assert len(reports) == 1
    assert reports[0]["status"] == "ERROR"


def test_exporter_orders_keys_and_separates_documents(engine, documents):
    output = ManifestExporter().export([engine.round_trip(doc) for doc in documents])

    first, second = output.split("---\n")
    assert first.startswith("apiVersion: apps/v1\nkind: Deployment\nmetadata:")
    assert "status" not in first
    assert second.startswith("apiVersion: v1\nkind: ConfigMap\n")
    assert load_manifests(output)[1] == documents[1]

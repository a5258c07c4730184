#!/usr/bin/env python3
"""
KUBECENSUS SERIALIZER TESTS
---------------------------
Covers both output shapes, the section marker contract shared with the diff
engine and the importer, and the guarantee that rendering is reproducible.
"""

from datetime import datetime, timezone

import pytest
from ruamel.yaml import YAML

from conftest import pod
from kubecensus.core.models import Inventory
from kubecensus.ingest.parser import MustGatherParser
from kubecensus.output.exporter import KubeExporter, atomic_write, format_header
from kubecensus.output.importer import import_capture
from kubecensus.output.marker import extract_names, format_marker, parse_marker, split_sections

STAMP = datetime(2026, 10, 18, 12, 0, 0, tzinfo=timezone.utc)


def sample_inventory() -> Inventory:
    inv = Inventory()
    inv.add("v1", "Service", {"metadata": {"name": "web"}, "kind": "Service", "apiVersion": "v1"})
    inv.add("v1", "Pod", pod("web-0"))
    inv.add("v1", "Pod", pod("web-1"))
    inv.extend("apps/v1", "deployments", [])
    return inv


# --- Markers ---

def test_marker_format_and_parse():
    assert format_marker("v1-pods") == "--- # Resource: v1-pods"
    assert parse_marker("--- # Resource: v1-pods") == "v1-pods"
    assert parse_marker("---   #Resource:   v1-pods  ") == "v1-pods"
    assert parse_marker("---") is None
    assert parse_marker("# Resource: v1-pods") is None


def test_split_sections_discards_preamble():
    text = "junk\n--- # Resource: a\nx: 1\n--- # Resource: b\ny: 2\n"
    sections = split_sections(text)
    assert [s.name for s in sections] == ["a", "b"]
    assert sections[0].body == "x: 1\n"


# --- Single-file mode ---

def test_single_file_has_one_sorted_section_per_key():
    rendered = KubeExporter().render_single_file(sample_inventory())
    assert extract_names(rendered.splitlines()) == ["apps-v1-deployments", "v1-pods", "v1-services"]


def test_single_file_sections_are_lists_in_canonical_order():
    rendered = KubeExporter().render_single_file(sample_inventory())
    docs = [d for d in YAML(typ="safe").load_all(rendered) if d is not None]

    assert [d["kind"] for d in docs] == ["List", "List", "List"]
    assert docs[0]["items"] == []
    assert [i["metadata"]["name"] for i in docs[1]["items"]] == ["web-0", "web-1"]
    # Canonical key order puts apiVersion/kind before metadata
    assert "apiVersion: v1\n    kind: Service\n    metadata:" in rendered


def test_rendering_is_reproducible():
    exporter = KubeExporter()
    assert exporter.render_single_file(sample_inventory()) == exporter.render_single_file(sample_inventory())


def test_reingesting_a_capture_yields_the_same_keys(tmp_path):
    inv = sample_inventory()
    KubeExporter().write_single_file(inv, tmp_path / "bundle" / "all-resources.yaml")

    result = MustGatherParser().ingest(tmp_path / "bundle")
    # Empty Lists have nothing to key, so only the populated types come back
    assert result.inventory.keys() == ["v1-pods", "v1-services"]
    assert len(result.inventory.items("v1-pods")) == 2


def test_empty_inventory_renders_empty_file(tmp_path):
    target = KubeExporter().write_single_file(Inventory(), tmp_path / "out" / "empty.yaml")
    assert target.read_text() == ""


# --- Directory mode ---

def test_directory_mode_writes_one_file_per_type(tmp_path):
    result = KubeExporter().write_directory(sample_inventory(), tmp_path, generated_at=STAMP)

    assert sorted(p.name for p in result.written) == [
        "apps-v1-deployments.yaml", "v1-pods.yaml", "v1-services.yaml",
    ]
    text = (tmp_path / "apps-v1-deployments.yaml").read_text()
    assert text.startswith(
        "# Generated by kubecensus\n"
        "# Generated at: 2026-10-18T12:00:00+00:00\n"
        "# Resource: deployments\n"
        "# Group Version: apps/v1\n\n"
    )
    doc = YAML(typ="safe").load(text)
    assert doc == {"apiVersion": "v1", "kind": "List", "items": []}


def test_header_omits_empty_group_version():
    assert "Group Version" not in format_header("v1-pods", "", STAMP)


def test_failed_file_does_not_stop_the_rest(tmp_path):
    # A directory squatting on the target name makes that one write fail
    (tmp_path / "v1-pods.yaml").mkdir()
    result = KubeExporter().write_directory(sample_inventory(), tmp_path, generated_at=STAMP)

    assert [key for key, _ in result.errors] == ["v1-pods"]
    assert sorted(p.name for p in result.written) == ["apps-v1-deployments.yaml", "v1-services.yaml"]
    assert not list(tmp_path.glob("*.tmp"))


def test_atomic_write_replaces_content(tmp_path):
    target = tmp_path / "f.txt"
    atomic_write(target, "one")
    atomic_write(target, "two")
    assert target.read_text() == "two"


# --- Import ---

def test_import_splits_capture_into_files(tmp_path):
    capture = tmp_path / "all-resources.yaml"
    KubeExporter().write_single_file(sample_inventory(), capture)

    result = import_capture(capture, tmp_path / "split", generated_at=STAMP)
    assert sorted(p.name for p in result.written) == [
        "apps-v1-deployments.yaml", "v1-pods.yaml", "v1-services.yaml",
    ]

    text = (tmp_path / "split" / "v1-pods.yaml").read_text()
    assert text.startswith("# Generated by kubecensus\n# Generated at: 2026-10-18T12:00:00+00:00\n# Resource: v1-pods\n\n")
    doc = YAML(typ="safe").load(text)
    assert [i["metadata"]["name"] for i in doc["items"]] == ["web-0", "web-1"]


def test_import_of_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        import_capture(tmp_path / "missing.yaml", tmp_path / "out")

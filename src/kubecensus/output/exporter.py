#!/usr/bin/env python3
"""
KUBECENSUS EXPORTER - Inventory Serializer
------------------------------------------
Renders an Inventory either as one marker-delimited stream (single-file
mode) or as one file per resource type (directory mode). Both live and
offline captures go through here, so their on-disk forms are identical.

Keys are always visited in sorted order and item keys are laid out in a
fixed canonical order, so rendering the same Inventory twice is
byte-identical (directory-mode headers aside, which carry a timestamp).

Author: KubeCensus Team
Date: 2026-10-18
"""

import io
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional, Tuple

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from kubecensus.core.keys import resource_filename
from kubecensus.core.models import Inventory, InventoryEntry
from kubecensus.output.marker import format_marker

logger = logging.getLogger("kubecensus.exporter")

GENERATOR_NAME = "kubecensus"


@dataclass
class DirectoryWriteResult:
    written: List[Path] = field(default_factory=list)
    errors: List[Tuple[str, str]] = field(default_factory=list)


def format_header(resource: str, group_version: str, generated_at: datetime) -> str:
    """The descriptive comment block that opens every directory-mode file."""
    lines = [
        f"# Generated by {GENERATOR_NAME}",
        f"# Generated at: {generated_at.isoformat(timespec='seconds')}",
        f"# Resource: {resource}",
    ]
    if group_version:
        lines.append(f"# Group Version: {group_version}")
    return "\n".join(lines) + "\n\n"


def atomic_write(target_path: Path, content: str):
    """Writes through a temp file and renames it over the target."""
    if not os.access(target_path.parent, os.W_OK):
        raise PermissionError(f"No write access to {target_path.parent}")
    temp_file = target_path.with_name(target_path.name + ".kubecensus.tmp")
    try:
        temp_file.write_text(content, encoding="utf-8")
        os.replace(temp_file, target_path)
    except OSError as e:
        if temp_file.exists():
            temp_file.unlink()
        raise IOError(f"Atomic write failed: {str(e)}")


class KubeExporter:
    """
    The Reconstructor: converts inventories into YAML text and files.
    """

    def __init__(self):
        self.yaml = YAML(typ="rt")
        self.yaml.preserve_quotes = True
        # Standard K8s: 2 spaces, sequences indented 4 (offset 2)
        self.yaml.indent(mapping=2, sequence=4, offset=2)
        self.yaml.width = 4096
        self.preferred_order = ["apiVersion", "kind", "metadata", "spec", "data", "status"]

    def _get_sorted_map(self, data: Any) -> Any:
        """
        Recursively rebuilds mappings with the preferred keys first and all
        other keys in their original relative position. Source comments are
        not carried over.
        """
        if isinstance(data, list):
            return [self._get_sorted_map(item) for item in data]
        if not isinstance(data, Mapping):
            return data

        keys = list(data.keys())

        def sort_logic(key):
            if key in self.preferred_order:
                return self.preferred_order.index(key)
            return len(self.preferred_order) + keys.index(key)

        sorted_map = CommentedMap()
        for key in sorted(keys, key=sort_logic):
            sorted_map[key] = self._get_sorted_map(data[key])
        return sorted_map

    def _dump(self, data: Any) -> str:
        stream = io.StringIO()
        self.yaml.dump(data, stream)
        return stream.getvalue()

    def render_list(self, entry: InventoryEntry) -> str:
        """A `kind: List` document holding every item of one type."""
        wrapper = {"apiVersion": "v1", "kind": "List", "items": entry.items}
        return self._dump(self._get_sorted_map(wrapper))

    def render_section(self, entry: InventoryEntry) -> str:
        return f"{format_marker(entry.key)}\n{self.render_list(entry)}\n"

    def render_single_file(self, inventory: Inventory) -> str:
        """All sections in sorted key order, each followed by a blank line."""
        return "".join(self.render_section(entry) for entry in inventory.entries())

    def render_resource_file(self, entry: InventoryEntry, generated_at: datetime) -> str:
        return format_header(entry.resource, entry.group_version, generated_at) + self.render_list(entry)

    def write_single_file(self, inventory: Inventory, output_file: Path) -> Path:
        output_file = Path(output_file)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        atomic_write(output_file, self.render_single_file(inventory))
        logger.debug(f"Wrote {len(inventory)} sections to {output_file}")
        return output_file

    def write_directory(self, inventory: Inventory, output_dir: Path,
                        generated_at: Optional[datetime] = None) -> DirectoryWriteResult:
        """
        One file per resource type. A failed file is recorded and the
        remaining files are still written.
        """
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        stamp = generated_at or datetime.now(timezone.utc)
        result = DirectoryWriteResult()

        for entry in inventory.entries():
            target = output_dir / resource_filename(entry.key)
            try:
                atomic_write(target, self.render_resource_file(entry, stamp))
            except (IOError, PermissionError) as e:
                logger.debug(f"Error writing {target}: {e}")
                result.errors.append((entry.key, str(e)))
                continue
            logger.debug(f"  {entry.key}: SUCCESS - Saved {len(entry.items)} items to {target}")
            result.written.append(target)

        return result

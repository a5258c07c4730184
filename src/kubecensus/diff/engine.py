#!/usr/bin/env python3
"""
KUBECENSUS DIFF ENGINE
----------------------
Reconciles two captures at the resource-TYPE level: which types exist only
in the first, only in the second, or in both. Instances are never compared,
so "common" means "the type exists on both sides", nothing more.

Single-file captures are read through their section markers, which makes
the marker format (see output.marker) the contract between the serializer
and this module.

Author: KubeCensus Team
Date: 2026-10-18
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from kubecensus.core.models import DiffReport, Inventory
from kubecensus.output.exporter import atomic_write
from kubecensus.output.marker import extract_names

logger = logging.getLogger("kubecensus.diff")


def extract_resource_names(rendered: str) -> List[str]:
    """Section names of a single-file capture, in stream order."""
    return extract_names(rendered.splitlines())


def _unique(names: Iterable[str]) -> Tuple[str, ...]:
    seen = {}
    for name in names:
        seen.setdefault(name, None)
    return tuple(seen)


class DiffEngine:
    """
    Computes and renders type-level difference reports.
    """

    def __init__(self, title: str = "Cluster Comparison Report"):
        self.title = title

    def compare_names(self, first: Iterable[str], second: Iterable[str],
                      name_first: str, name_second: str) -> DiffReport:
        present_first = _unique(first)
        present_second = _unique(second)
        set_first, set_second = set(present_first), set(present_second)

        return DiffReport(
            name_first=name_first,
            name_second=name_second,
            present_in_first=present_first,
            present_in_second=present_second,
            only_in_first=tuple(sorted(set_first - set_second)),
            only_in_second=tuple(sorted(set_second - set_first)),
            common=tuple(sorted(set_first & set_second)),
        )

    def compare(self, rendered_first: str, rendered_second: str,
                name_first: str, name_second: str) -> DiffReport:
        """Diffs two rendered single-file captures."""
        return self.compare_names(
            extract_resource_names(rendered_first),
            extract_resource_names(rendered_second),
            name_first, name_second,
        )

    def compare_inventories(self, first: Inventory, second: Inventory,
                            name_first: str, name_second: str) -> DiffReport:
        """Diffs two in-memory inventories without rendering them."""
        return self.compare_names(first.keys(), second.keys(), name_first, name_second)

    def render(self, report: DiffReport, generated_at: Optional[datetime] = None) -> str:
        """
        Fixed text layout. The 'Generated at' line is the only part that
        depends on the wall clock.
        """
        stamp = generated_at or datetime.now(timezone.utc)
        a, b = report.name_first, report.name_second
        out = [
            f"=== {self.title} ===",
            f"Generated at: {stamp.isoformat(timespec='seconds')}",
            f"Source 1: {a} ({report.total_first} resource types)",
            f"Source 2: {b} ({report.total_second} resource types)",
        ]

        for label, names in ((a, report.only_in_first), (b, report.only_in_second)):
            out.append("")
            out.append(f"=== Resource types only in {label} ===")
            out.extend(f"- {name}" for name in names)
            if not names:
                out.append("(none)")

        out += [
            "",
            "=== Resource types present in both ===",
            f"Total: {len(report.common)} resource types (presence only; instances are not compared)",
            "",
            "=== Summary ===",
            f"Total resource types in {a}: {report.total_first}",
            f"Total resource types in {b}: {report.total_second}",
            f"Only in {a}: {len(report.only_in_first)}",
            f"Only in {b}: {len(report.only_in_second)}",
            f"Common to both: {len(report.common)}",
        ]
        return "\n".join(out) + "\n"

    def diff_files(self, file_first: Path, file_second: Path, output_file: Path,
                   name_first: str, name_second: str,
                   generated_at: Optional[datetime] = None) -> DiffReport:
        """Reads two captures, writes the rendered report and returns it."""
        rendered_first = Path(file_first).read_text(encoding="utf-8")
        rendered_second = Path(file_second).read_text(encoding="utf-8")

        report = self.compare(rendered_first, rendered_second, name_first, name_second)
        atomic_write(Path(output_file), self.render(report, generated_at))
        logger.debug(f"Diff written to {output_file}: {len(report.only_in_first)} only in {name_first}, "
                     f"{len(report.only_in_second)} only in {name_second}, {len(report.common)} common")
        return report

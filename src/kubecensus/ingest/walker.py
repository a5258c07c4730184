#!/usr/bin/env python3
"""
KUBECENSUS TREE WALKER
----------------------
Recursive, fault-tolerant directory traversal. Unreadable directories and
files do not raise: they are appended to a side list of (path, error)
pairs and the walk continues. Symlinks are never followed, which keeps
looping bundles finite.

Author: KubeCensus Team
Date: 2026-10-18
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Tuple

logger = logging.getLogger("kubecensus.ingest")

YAML_SUFFIXES = (".yaml", ".yml")


def is_yaml_file(path: Path) -> bool:
    return path.suffix.lower() in YAML_SUFFIXES


@dataclass
class WalkReport:
    files_visited: int = 0
    errors: List[Tuple[Path, str]] = field(default_factory=list)

    def record(self, path: Path, error: str):
        logger.debug(f"Warning: failed to access {path}: {error}")
        self.errors.append((path, error))


class TreeWalker:
    """
    Visits every YAML file below a root directory in sorted order.

    The visitor receives the file path and its decoded text. Any OSError
    raised while reading is captured in the WalkReport.
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    def walk(self, visitor: Callable[[Path, str], None]) -> WalkReport:
        report = WalkReport()

        def on_error(err: OSError):
            report.record(Path(err.filename or self.root), err.strerror or str(err))

        for dirpath, dirnames, filenames in os.walk(self.root, onerror=on_error, followlinks=False):
            # Sorted traversal keeps item order reproducible
            dirnames.sort()
            for name in sorted(filenames):
                path = Path(dirpath) / name
                if path.is_symlink() or not is_yaml_file(path):
                    continue
                try:
                    text = path.read_text(encoding="utf-8-sig", errors="replace")
                except OSError as e:
                    report.record(path, e.strerror or str(e))
                    continue
                report.files_visited += 1
                visitor(path, text)

        return report


def contains_yaml(root: Path) -> bool:
    """True as soon as one YAML file exists anywhere below root."""
    for dirpath, _, filenames in os.walk(root, followlinks=False):
        if any(is_yaml_file(Path(name)) for name in filenames):
            return True
    return False

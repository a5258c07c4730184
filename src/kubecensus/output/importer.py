#!/usr/bin/env python3
"""
KUBECENSUS IMPORTER
-------------------
Splits an existing single-file capture back into one file per resource
type, the same layout directory mode produces. Section bodies are copied
verbatim; only the descriptive header is added.

Author: KubeCensus Team
Date: 2026-10-18
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Tuple

from kubecensus.core.keys import resource_filename
from kubecensus.output.exporter import atomic_write, format_header
from kubecensus.output.marker import split_sections

logger = logging.getLogger("kubecensus.importer")


@dataclass
class ImportResult:
    written: List[Path] = field(default_factory=list)
    errors: List[Tuple[str, str]] = field(default_factory=list)


def import_capture(input_file: Path, output_dir: Path,
                   generated_at: Optional[datetime] = None) -> ImportResult:
    """
    Reads `input_file` and writes each of its sections to `output_dir`.

    Raises:
        FileNotFoundError: the capture does not exist.
    """
    input_file = Path(input_file)
    if not input_file.is_file():
        raise FileNotFoundError(f"input file does not exist: {input_file}")

    text = input_file.read_text(encoding="utf-8-sig")
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    stamp = generated_at or datetime.now(timezone.utc)
    result = ImportResult()

    for section in split_sections(text):
        logger.debug(f"Processing section: {section.name}")
        target = output_dir / resource_filename(section.name)
        try:
            atomic_write(target, format_header(section.name, "", stamp) + section.body)
        except (IOError, PermissionError) as e:
            logger.debug(f"  {section.name}: ERROR - {e}")
            result.errors.append((section.name, str(e)))
            continue
        result.written.append(target)

    return result

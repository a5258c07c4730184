#!/usr/bin/env python3
"""
KUBECENSUS MUST-GATHER PARSER
-----------------------------
Rebuilds a resource Inventory from an unstructured directory of YAML dumps.

Ingestion is best-effort over a heterogeneous bundle, not a validating
parser: malformed documents and documents without apiVersion/kind are
dropped (and counted), never fatal. `List` documents are unwrapped and
their entries keyed one by one.

Author: KubeCensus Team
Date: 2026-10-18
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Tuple

from ruamel.yaml import YAML, YAMLError

from kubecensus.core.models import Inventory
from kubecensus.ingest.document import StructuredDocument
from kubecensus.ingest.walker import TreeWalker

logger = logging.getLogger("kubecensus.ingest")

DOCUMENT_SEPARATOR = "\n---"


@dataclass
class IngestResult:
    inventory: Inventory
    files_scanned: int = 0
    documents_accepted: int = 0
    documents_dropped: int = 0
    errors: List[Tuple[Path, str]] = field(default_factory=list)
    duration: float = 0.0

    @property
    def error_count(self) -> int:
        return len(self.errors)


def split_documents(text: str) -> List[str]:
    """
    Splits a multi-document stream on '\\n---' and discards chunks that are
    empty or contain nothing but comments.
    """
    chunks = []
    for raw in text.replace("\r\n", "\n").split(DOCUMENT_SEPARATOR):
        chunk = raw.strip()
        if not chunk:
            continue
        # The separator's own trailing text (e.g. ' # Resource: x') stays on the chunk
        lines = [ln.strip() for ln in chunk.splitlines() if ln.strip()]
        if all(ln.startswith("#") for ln in lines):
            continue
        chunks.append(chunk)
    return chunks


class MustGatherParser:
    """
    Walks a must-gather tree and accumulates every keyable document.
    """

    def __init__(self):
        self.yaml = YAML(typ="rt")
        self.yaml.preserve_quotes = True

    def parse_document(self, chunk: str) -> Optional[StructuredDocument]:
        """Parses one chunk; returns None for malformed or non-mapping YAML."""
        try:
            data = self.yaml.load(chunk)
        except (YAMLError, ValueError) as e:
            logger.debug(f"  Dropping malformed document: {str(e).splitlines()[0] if str(e) else e}")
            return None
        return StructuredDocument.wrap(data)

    def ingest_text(self, text: str, inventory: Inventory, result: IngestResult):
        """Adds every keyable document found in `text` to `inventory`."""
        for chunk in split_documents(text):
            doc = self.parse_document(chunk)
            if doc is None or not doc.is_keyable:
                result.documents_dropped += 1
                continue

            if doc.is_list:
                self._ingest_list(doc, inventory, result)
                continue

            inventory.add(doc.api_version, doc.kind, doc.data)
            result.documents_accepted += 1

    def _ingest_list(self, doc: StructuredDocument, inventory: Inventory, result: IngestResult):
        raw_items = doc.data.get("items")
        entries = doc.items
        # Non-mapping entries cannot be keyed either
        if isinstance(raw_items, list):
            result.documents_dropped += len(raw_items) - len(entries)

        for entry in entries:
            if not entry.is_keyable:
                result.documents_dropped += 1
                continue
            inventory.add(entry.api_version, entry.kind, entry.data)
            result.documents_accepted += 1

    def ingest(self, root: Path) -> IngestResult:
        """
        Builds an Inventory from every .yaml/.yml file below `root`.
        Callers run pre-flight validation first; this method never raises
        for unreadable entries.
        """
        started = time.monotonic()
        inventory = Inventory()
        result = IngestResult(inventory=inventory)

        def visit(path: Path, text: Any):
            logger.debug(f"Processing file: {path}")
            self.ingest_text(text, inventory, result)

        report = TreeWalker(root).walk(visit)
        result.files_scanned = report.files_visited
        result.errors = report.errors
        result.duration = time.monotonic() - started

        logger.debug(f"Ingested {result.documents_accepted} documents into {len(inventory)} resource types "
                     f"({result.documents_dropped} dropped, {result.error_count} unreadable)")
        return result

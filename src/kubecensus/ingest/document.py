#!/usr/bin/env python3
"""
KUBECENSUS STRUCTURED DOCUMENT
------------------------------
A thin typed view over one parsed YAML mapping. Ingestion code asks the
document for its apiVersion, kind and items instead of poking at raw
dictionaries, and never has to care which mapping type the YAML loader
produced.

Author: KubeCensus Team
Date: 2026-10-18
"""

from collections.abc import Mapping
from typing import Any, List, Optional

LIST_KIND = "List"


class StructuredDocument:
    """
    Wraps an ordered key-value mapping (a Kubernetes object or a List).
    """

    def __init__(self, data: Mapping):
        self.data = data

    @classmethod
    def wrap(cls, value: Any) -> Optional["StructuredDocument"]:
        """Returns a document for mappings, None for scalars and sequences."""
        if isinstance(value, Mapping):
            return cls(value)
        return None

    def _text(self, field: str) -> str:
        value = self.data.get(field)
        return value if isinstance(value, str) else ""

    @property
    def api_version(self) -> str:
        return self._text("apiVersion")

    @property
    def kind(self) -> str:
        return self._text("kind")

    @property
    def is_keyable(self) -> bool:
        """Both apiVersion and kind must be non-empty strings."""
        return bool(self.api_version and self.kind)

    @property
    def is_list(self) -> bool:
        return self.kind == LIST_KIND

    @property
    def items(self) -> List["StructuredDocument"]:
        """Entries of a List's `items` that are mappings; anything else is ignored."""
        raw = self.data.get("items")
        if not isinstance(raw, list):
            return []
        return [doc for doc in (StructuredDocument.wrap(i) for i in raw) if doc is not None]

    def __repr__(self) -> str:
        return f"StructuredDocument({self.api_version or '?'}/{self.kind or '?'})"

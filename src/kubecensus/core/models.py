#!/usr/bin/env python3
"""
KUBECENSUS CORE MODELS
----------------------
Defines the fundamental data structures shared by the live collector,
the must-gather ingestion parser, the serializer and the diff engine.

Resource instances themselves stay schema-agnostic: an item is whatever
mapping the cluster (or the bundle) handed us. Only the containers around
them are typed here.

Author: KubeCensus Team
Date: 2026-10-18
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from kubecensus.core.keys import pluralize, resource_key


@dataclass(frozen=True)
class APIResource:
    """One entry of a discovery resource list (e.g. 'pods' or 'pods/status')."""
    name: str
    verbs: Tuple[str, ...] = ()
    kind: str = ""
    namespaced: bool = False

    @property
    def is_subresource(self) -> bool:
        return "/" in self.name

    def supports(self, *verbs: str) -> bool:
        return all(v in self.verbs for v in verbs)


@dataclass(frozen=True)
class APIResourceList:
    """The preferred resources advertised for a single group/version."""
    group_version: str
    resources: Tuple[APIResource, ...] = ()


@dataclass(frozen=True)
class ClusterVersionInfo:
    """Detected once per live run and never mutated afterwards."""
    major: int
    minor: int
    is_openshift: bool = False
    openshift_major: int = 0
    openshift_minor: int = 0

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}"
        if self.is_openshift:
            text += f" (OpenShift {self.openshift_major}.{self.openshift_minor})"
        return text


@dataclass(frozen=True)
class DeprecationRule:
    """
    Static policy entry: `resource` in `group_version` is superseded starting
    at `deprecated_from` ("major.minor"), measured against the Kubernetes
    version, or the OpenShift version when `openshift_only` is set.
    """
    group_version: str
    resource: str
    deprecated_from: str
    replacement_group_version: str = ""
    replacement_resource: str = ""
    openshift_only: bool = False

    @property
    def has_replacement(self) -> bool:
        return bool(self.replacement_group_version and self.replacement_resource)


@dataclass(frozen=True)
class DeprecationVerdict:
    skip: bool
    replacement_group_version: str = ""
    replacement_resource: str = ""
    message: str = ""


@dataclass
class InventoryEntry:
    """All items collected for one resource type."""
    key: str
    group_version: str
    resource: str
    items: List[Any] = field(default_factory=list)


class Inventory:
    """
    Mapping of ResourceKey -> InventoryEntry, built incrementally.

    Keys are added on first encounter and items are only ever appended.
    Iteration is always in sorted key order so that anything rendered from
    an inventory is reproducible.
    """

    def __init__(self):
        self._entries: Dict[str, InventoryEntry] = {}

    def add(self, group_version: str, name: str, item: Any, already_plural: bool = False) -> str:
        """Appends one item under the key derived from (group_version, name)."""
        key = resource_key(group_version, name, already_plural=already_plural)
        entry = self._entries.get(key)
        if entry is None:
            resource = name if already_plural else pluralize(name)
            entry = InventoryEntry(key=key, group_version=group_version, resource=resource)
            self._entries[key] = entry
        entry.items.append(item)
        return key

    def extend(self, group_version: str, resource: str, items: List[Any]) -> str:
        """Registers a discovered (already plural) type with all its items."""
        key = resource_key(group_version, resource, already_plural=True)
        entry = self._entries.setdefault(
            key, InventoryEntry(key=key, group_version=group_version, resource=resource)
        )
        entry.items.extend(items)
        return key

    def keys(self) -> List[str]:
        return sorted(self._entries)

    def get(self, key: str) -> Optional[InventoryEntry]:
        return self._entries.get(key)

    def items(self, key: str) -> List[Any]:
        entry = self._entries.get(key)
        return list(entry.items) if entry else []

    def entries(self) -> Iterator[InventoryEntry]:
        for key in self.keys():
            yield self._entries[key]

    @property
    def item_count(self) -> int:
        return sum(len(e.items) for e in self._entries.values())

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Inventory({len(self)} types, {self.item_count} items)"


@dataclass(frozen=True)
class DiffReport:
    """Type-level presence comparison of two captures."""
    name_first: str
    name_second: str
    present_in_first: Tuple[str, ...]
    present_in_second: Tuple[str, ...]
    only_in_first: Tuple[str, ...]
    only_in_second: Tuple[str, ...]
    common: Tuple[str, ...]

    @property
    def total_first(self) -> int:
        return len(self.present_in_first)

    @property
    def total_second(self) -> int:
        return len(self.present_in_second)

    @property
    def is_identical(self) -> bool:
        return not self.only_in_first and not self.only_in_second

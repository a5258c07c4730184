#!/usr/bin/env python3
"""
KUBECENSUS LIVE COLLECTOR
-------------------------
Enumerates the resource types a cluster advertises, filters them through
the deprecation policy and lists every instance of each surviving type.

One failing type never aborts the run: its error is recorded and the loop
moves on to the next type. The resulting Inventory only holds what was
listed successfully.

Author: KubeCensus Team
Date: 2026-10-18
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from kubecensus.core.config import DEFAULT_TIMEOUT_SECONDS
from kubecensus.core.errors import FetchError
from kubecensus.core.models import APIResource, ClusterVersionInfo, Inventory
from kubecensus.rules.deprecation import PolicyEngine

logger = logging.getLogger("kubecensus.collector")

REQUIRED_VERBS = ("list", "get")


@dataclass
class CollectionResult:
    inventory: Inventory
    cluster_version: Optional[ClusterVersionInfo] = None
    collected: int = 0
    skipped: List[str] = field(default_factory=list)
    errors: List[Tuple[str, str]] = field(default_factory=list)
    duration: float = 0.0

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    @property
    def error_count(self) -> int:
        return len(self.errors)


class LiveCollector:
    """
    Walks the preferred resource list of a cluster and fills an Inventory.

    `cluster` must provide preferred_resources() and
    list_items(group_version, resource, timeout); see KubeClusterClient.
    """

    def __init__(self, cluster: Any, policy: Optional[PolicyEngine] = None,
                 timeout: int = DEFAULT_TIMEOUT_SECONDS):
        self.cluster = cluster
        self.policy = policy or PolicyEngine()
        self.timeout = timeout

    @staticmethod
    def is_collectable(resource: APIResource) -> bool:
        """Subresources and types without list+get are never collected."""
        return not resource.is_subresource and resource.supports(*REQUIRED_VERBS)

    def collect(self, cluster_version: Optional[ClusterVersionInfo] = None) -> CollectionResult:
        """
        Collects every eligible resource type.

        Args:
            cluster_version: detected version, or None when detection failed.
                With None the deprecation policy is bypassed entirely.
        """
        started = time.monotonic()
        result = CollectionResult(inventory=Inventory(), cluster_version=cluster_version)

        if cluster_version is None:
            logger.warning("Cluster version unknown; continuing without deprecation checks")

        for resource_list in self.cluster.preferred_resources():
            group_version = resource_list.group_version
            for resource in resource_list.resources:
                if not self.is_collectable(resource):
                    continue

                if cluster_version is not None:
                    verdict = self.policy.evaluate(resource.name, group_version, cluster_version)
                    if verdict.skip:
                        logger.debug(verdict.message)
                        result.skipped.append(verdict.message)
                        continue

                logger.debug(f"Collecting resource: {resource.name} ({group_version})")
                try:
                    items = self.cluster.list_items(group_version, resource.name, self.timeout)
                except FetchError as e:
                    logger.debug(f"  {resource.name}: ERROR - {e}")
                    result.errors.append((f"{group_version}/{resource.name}", e.reason))
                    continue

                key = result.inventory.extend(group_version, resource.name, items)
                result.collected += 1
                logger.debug(f"  {resource.name}: SUCCESS - {len(items)} items under {key}")

        result.duration = time.monotonic() - started
        return result

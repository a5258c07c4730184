#!/usr/bin/env python3
"""
KUBECENSUS DEPRECATION POLICY
-----------------------------
The PolicyEngine acts as a 'Gatekeeper' between discovery and collection.
It checks every discovered (groupVersion, resource) pair against a fixed,
compiled-in set of deprecation rules and tells the collector whether the
type should be skipped, and what supersedes it.

Version comparison is (major, minor) integer ordering only. Patch levels
and pre-release qualifiers do not exist here.

Author: KubeCensus Team
Date: 2026-10-18
"""

import logging
from typing import Optional, Sequence, Tuple

from kubecensus.core.models import ClusterVersionInfo, DeprecationRule, DeprecationVerdict

logger = logging.getLogger("kubecensus.rules")

DEFAULT_RULES: Tuple[DeprecationRule, ...] = (
    # Component status is deprecated without a replacement
    DeprecationRule(
        group_version="v1",
        resource="componentstatuses",
        deprecated_from="1.19",
    ),
    DeprecationRule(
        group_version="v1",
        resource="endpoints",
        deprecated_from="1.33",
        replacement_group_version="discovery.k8s.io/v1",
        replacement_resource="endpointslices",
    ),
    # DeploymentConfigs are migrated to standard Deployments by hand
    DeprecationRule(
        group_version="apps.openshift.io/v1",
        resource="deploymentconfigs",
        deprecated_from="4.14",
        openshift_only=True,
    ),
)

NOT_DEPRECATED = DeprecationVerdict(skip=False)


def parse_version(value: str) -> Optional[Tuple[int, int]]:
    """'1.33' -> (1, 33). Returns None for anything without two integer parts."""
    parts = value.split(".")
    if len(parts) < 2:
        return None
    try:
        return int(parts[0]), int(parts[1])
    except ValueError:
        return None


class PolicyEngine:
    """
    Evaluates discovered resource types against the deprecation rule set.
    The first matching rule in iteration order wins.
    """

    def __init__(self, rules: Optional[Sequence[DeprecationRule]] = None):
        self.rules: Tuple[DeprecationRule, ...] = tuple(DEFAULT_RULES if rules is None else rules)

    def evaluate(self, resource: str, group_version: str,
                 cluster_version: ClusterVersionInfo) -> DeprecationVerdict:
        """
        Decides whether `resource` in `group_version` should be skipped on a
        cluster running `cluster_version`.
        """
        for rule in self.rules:
            if rule.group_version != group_version or rule.resource != resource:
                continue

            # Platform rules only ever apply to confirmed OpenShift clusters
            if rule.openshift_only and not cluster_version.is_openshift:
                continue

            threshold = parse_version(rule.deprecated_from)
            if threshold is None:
                logger.warning(f"Ignoring deprecation rule with malformed version '{rule.deprecated_from}'")
                continue

            if rule.openshift_only:
                current = (cluster_version.openshift_major, cluster_version.openshift_minor)
            else:
                current = (cluster_version.major, cluster_version.minor)

            if current >= threshold:
                return self._verdict(rule, resource, group_version)

        return NOT_DEPRECATED

    def _verdict(self, rule: DeprecationRule, resource: str, group_version: str) -> DeprecationVerdict:
        if rule.has_replacement:
            msg = (f"Using {rule.replacement_group_version}/{rule.replacement_resource} "
                   f"instead of deprecated {group_version}/{resource}")
        else:
            msg = f"Skipping deprecated {group_version}/{resource} (no replacement available)"
        return DeprecationVerdict(
            skip=True,
            replacement_group_version=rule.replacement_group_version,
            replacement_resource=rule.replacement_resource,
            message=msg,
        )

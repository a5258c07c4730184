#!/usr/bin/env python3
"""
KUBECENSUS RESOURCE KEYS
------------------------
Derives the canonical identifier of a resource type. Live discovery and
offline must-gather ingestion both key their inventories through this
module, so the two sides stay comparable.

Pluralization is deliberately naive: lower-case the kind and append 's'
unless it already ends in 's'. Irregular plurals (Ingress -> ingresses,
Proxy -> proxies) therefore do NOT match the names reported by live
discovery. That mismatch is a known limitation, not something to patch
around here.

Author: KubeCensus Team
Date: 2026-10-18
"""

import re

KEY_SEPARATOR = "-"

# Characters that cannot appear in a portable filename
_UNSAFE_CHARS = re.compile(r'[/\\:*?"<>| ]')
# Cluster names additionally lose dots (api.prod.example.com -> api-prod-example-com)
_UNSAFE_CLUSTER_CHARS = re.compile(r'[/\\:*?"<>| .]')


def sanitize(value: str) -> str:
    """Replaces filename-unsafe characters with '-'."""
    return _UNSAFE_CHARS.sub(KEY_SEPARATOR, value)


def sanitize_cluster_name(name: str) -> str:
    """Sanitizes a cluster or bundle name for use in comparison filenames."""
    return _UNSAFE_CLUSTER_CHARS.sub(KEY_SEPARATOR, name)


def pluralize(kind: str) -> str:
    """Lower-cases a kind and appends 's' unless it already ends in one."""
    resource = kind.lower()
    if resource and not resource.endswith("s"):
        resource += "s"
    return resource


def resource_key(group_version: str, name: str, already_plural: bool = False) -> str:
    """
    Builds the ResourceKey '{groupVersion}-{pluralResourceName}'.

    Args:
        group_version: 'v1', 'apps/v1', ... as found in apiVersion or discovery.
        name: a singular Kind from a document, or a plural discovery name.
        already_plural: True when `name` comes from discovery and must be
            used as-is.
    """
    resource = name if already_plural else pluralize(name)
    return f"{sanitize(group_version)}{KEY_SEPARATOR}{sanitize(resource)}"


def resource_filename(key: str) -> str:
    """Filename used for a ResourceKey in directory mode."""
    return f"{sanitize(key)}.yaml"

#!/usr/bin/env python3
"""
KUBECENSUS VERSION DETECTION
----------------------------
Works out which Kubernetes (and, when applicable, OpenShift) release a
cluster runs. The result only feeds the deprecation policy; callers treat a
VersionDetectionError as "run without deprecation checks".

Author: KubeCensus Team
Date: 2026-10-18
"""

import logging
from typing import Any

from kubecensus.core.errors import VersionDetectionError
from kubecensus.core.models import ClusterVersionInfo

logger = logging.getLogger("kubecensus.cluster")

OPENSHIFT_GROUP_MARKER = "openshift.io"

# Kubernetes 1.27 shipped with OpenShift 4.14; later minors track one-to-one
OPENSHIFT_MAJOR = 4
_OPENSHIFT_BASE_KUBE_MINOR = 27
_OPENSHIFT_BASE_MINOR = 14


def parse_version_part(value: Any, label: str) -> int:
    """Parses '1', '27+' or 27 into an int."""
    try:
        return int(str(value).strip().rstrip("+"))
    except (TypeError, ValueError):
        raise VersionDetectionError(f"failed to parse {label} version: {value!r}")


def estimate_openshift_minor(kube_minor: int) -> int:
    if kube_minor >= _OPENSHIFT_BASE_KUBE_MINOR:
        return _OPENSHIFT_BASE_MINOR + (kube_minor - _OPENSHIFT_BASE_KUBE_MINOR)
    return 0


def detect_cluster_version(cluster: Any) -> ClusterVersionInfo:
    """
    Queries the server version and API groups of `cluster` (anything with
    server_version() and server_groups()).

    Raises:
        VersionDetectionError: the version endpoint failed or returned
            something unparseable.
    """
    try:
        raw_major, raw_minor = cluster.server_version()
    except Exception as e:
        raise VersionDetectionError(f"failed to get server version: {e}")

    major = parse_version_part(raw_major, "major")
    minor = parse_version_part(raw_minor, "minor")

    # Group listing is best-effort: without it we simply assume vanilla Kubernetes
    is_openshift = False
    try:
        is_openshift = any(OPENSHIFT_GROUP_MARKER in name for name in cluster.server_groups())
    except Exception as e:
        logger.debug(f"API group listing failed, assuming non-OpenShift cluster: {e}")

    info = ClusterVersionInfo(
        major=major,
        minor=minor,
        is_openshift=is_openshift,
        openshift_major=OPENSHIFT_MAJOR if is_openshift else 0,
        openshift_minor=estimate_openshift_minor(minor) if is_openshift else 0,
    )
    logger.debug(f"Detected cluster version: {info}")
    return info

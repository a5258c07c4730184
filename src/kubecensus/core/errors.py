#!/usr/bin/env python3
"""
KUBECENSUS ERRORS
-----------------
Exception taxonomy for the collector. Fatal errors abort a run before any
output is produced; per-unit errors are caught by the component that owns
the unit and only ever show up as counts in a run summary.

Author: KubeCensus Team
Date: 2026-10-18
"""


class KubeCensusError(Exception):
    """Base class for every error raised by kubecensus."""


class ConfigError(KubeCensusError):
    """Invalid or contradictory run configuration (fatal)."""


class PreflightError(KubeCensusError):
    """A must-gather directory failed pre-flight validation (fatal)."""


class ClusterConnectionError(KubeCensusError):
    """The cluster could not be reached or discovery failed (fatal)."""


class VersionDetectionError(KubeCensusError):
    """Server version could not be determined. Deprecation checks are bypassed."""


class FetchError(KubeCensusError):
    """Listing a single resource type failed. Recorded per type."""

    def __init__(self, resource: str, group_version: str, reason: str):
        self.resource = resource
        self.group_version = group_version
        self.reason = reason
        super().__init__(f"failed to get resource instances for {resource} ({group_version}): {reason}")

"""
Shared fixtures: an in-memory stand-in for KubeClusterClient and a helper
that lays out must-gather style directory trees.
"""

from pathlib import Path
from typing import Dict, List, Tuple

import pytest

from kubecensus.core.errors import FetchError
from kubecensus.core.models import APIResource, APIResourceList

LIST_GET = ("create", "delete", "get", "list", "patch", "update", "watch")


def api_resource(name: str, verbs=LIST_GET, kind: str = "") -> APIResource:
    return APIResource(name=name, verbs=tuple(verbs), kind=kind, namespaced=True)


class FakeCluster:
    """Answers discovery and list calls from canned data."""

    def __init__(self, version=("1", "33"), groups=(), resources=(),
                 items: Dict[Tuple[str, str], List[dict]] = None,
                 failures: Dict[Tuple[str, str], str] = None,
                 version_error: Exception = None):
        self.version = version
        self.groups = list(groups)
        self.resources = list(resources)
        self.items = items or {}
        self.failures = failures or {}
        self.version_error = version_error
        self.list_calls: List[Tuple[str, str]] = []

    def server_version(self):
        if self.version_error is not None:
            raise self.version_error
        return self.version

    def server_groups(self):
        return list(self.groups)

    def preferred_resources(self):
        return list(self.resources)

    def list_items(self, group_version, resource, timeout):
        self.list_calls.append((group_version, resource))
        if (group_version, resource) in self.failures:
            raise FetchError(resource, group_version, self.failures[(group_version, resource)])
        return list(self.items.get((group_version, resource), []))


def pod(name: str, namespace: str = "default") -> dict:
    return {"apiVersion": "v1", "kind": "Pod", "metadata": {"name": name, "namespace": namespace}}


@pytest.fixture
def small_cluster():
    """Core pods/services plus an apps deployment, Kubernetes 1.33."""
    return FakeCluster(
        version=("1", "33+"),
        groups=["apps"],
        resources=[
            APIResourceList("v1", (
                api_resource("pods", kind="Pod"),
                api_resource("pods/status", verbs=("get", "patch"), kind="Pod"),
                api_resource("services", kind="Service"),
                api_resource("endpoints", kind="Endpoints"),
                api_resource("bindings", verbs=("create",), kind="Binding"),
            )),
            APIResourceList("apps/v1", (
                api_resource("deployments", kind="Deployment"),
            )),
        ],
        items={
            ("v1", "pods"): [pod("web-0"), pod("web-1")],
            ("v1", "services"): [{"apiVersion": "v1", "kind": "Service", "metadata": {"name": "web"}}],
            ("apps/v1", "deployments"): [],
        },
    )


@pytest.fixture
def make_bundle(tmp_path):
    """Writes {relative_path: text} into a fresh directory and returns it."""
    def _make(files: Dict[str, str], name: str = "must-gather.local.1") -> Path:
        root = tmp_path / name
        root.mkdir(parents=True, exist_ok=True)
        for rel, text in files.items():
            target = root / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(text, encoding="utf-8")
        return root
    return _make

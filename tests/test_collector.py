import pytest

from conftest import FakeCluster, api_resource
from kubecensus.cluster.collector import LiveCollector
from kubecensus.cluster.version import detect_cluster_version, estimate_openshift_minor, parse_version_part
from kubecensus.core.errors import VersionDetectionError
from kubecensus.core.models import APIResourceList, ClusterVersionInfo


# --- Version detection ---

def test_detects_plain_kubernetes(small_cluster):
    info = detect_cluster_version(small_cluster)
    assert (info.major, info.minor) == (1, 33)
    assert info.is_openshift is False
    assert str(info) == "1.33"


def test_detects_openshift_and_estimates_release():
    cluster = FakeCluster(version=("1", "29"), groups=["apps", "route.openshift.io"])
    info = detect_cluster_version(cluster)
    assert info.is_openshift is True
    assert (info.openshift_major, info.openshift_minor) == (4, 16)
    assert str(info) == "1.29 (OpenShift 4.16)"


@pytest.mark.parametrize("minor, expected", [(27, 14), (30, 17), (26, 0)])
def test_openshift_estimate(minor, expected):
    assert estimate_openshift_minor(minor) == expected


def test_version_errors_are_reported():
    with pytest.raises(VersionDetectionError):
        detect_cluster_version(FakeCluster(version_error=RuntimeError("connection refused")))
    with pytest.raises(VersionDetectionError):
        detect_cluster_version(FakeCluster(version=("1", "x")))
    assert parse_version_part("28+", "minor") == 28


# --- Collection ---

def test_collects_eligible_types_only(small_cluster):
    result = LiveCollector(small_cluster).collect(detect_cluster_version(small_cluster))

    # endpoints are deprecated at 1.33, bindings lack list/get, pods/status is a subresource
    assert result.inventory.keys() == ["apps-v1-deployments", "v1-pods", "v1-services"]
    assert ("v1", "endpoints") not in small_cluster.list_calls
    assert ("v1", "bindings") not in small_cluster.list_calls
    assert ("v1", "pods/status") not in small_cluster.list_calls
    assert result.collected == 3
    assert result.skipped_count == 1
    assert "instead of deprecated v1/endpoints" in result.skipped[0]
    assert len(result.inventory.items("v1-pods")) == 2


def test_empty_types_are_still_recorded(small_cluster):
    result = LiveCollector(small_cluster).collect(ClusterVersionInfo(1, 33))
    assert "apps-v1-deployments" in result.inventory
    assert result.inventory.items("apps-v1-deployments") == []


def test_unknown_version_bypasses_policy(small_cluster):
    result = LiveCollector(small_cluster).collect(None)
    assert "v1-endpoints" in result.inventory
    assert result.skipped_count == 0


def test_fetch_error_does_not_stop_collection():
    cluster = FakeCluster(
        resources=[APIResourceList("v1", (
            api_resource("configmaps"), api_resource("secrets"), api_resource("services"),
        ))],
        items={("v1", "configmaps"): [{"kind": "ConfigMap"}], ("v1", "services"): []},
        failures={("v1", "secrets"): "403 Forbidden"},
    )
    result = LiveCollector(cluster).collect(ClusterVersionInfo(1, 30))

    assert result.inventory.keys() == ["v1-configmaps", "v1-services"]
    assert result.errors == [("v1/secrets", "403 Forbidden")]
    assert result.error_count == 1
    assert result.collected == 2


def test_timeout_is_passed_to_every_list_call():
    seen = []

    class RecordingCluster(FakeCluster):
        def list_items(self, group_version, resource, timeout):
            seen.append(timeout)
            return []

    cluster = RecordingCluster(resources=[APIResourceList("v1", (api_resource("pods"),))])
    LiveCollector(cluster, timeout=5).collect(ClusterVersionInfo(1, 30))
    assert seen == [5]

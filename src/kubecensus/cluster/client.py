#!/usr/bin/env python3
"""
KUBECENSUS CLUSTER CLIENT
-------------------------
Thin adapter over the official `kubernetes` Python client. It exposes the
four capabilities the collector needs (server version, API groups,
preferred resources, list-all-instances) in terms of kubecensus models, so
the collector itself never touches client objects and can be driven by a
fake in tests.

Author: KubeCensus Team
Date: 2026-10-18
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException

from kubecensus.core.errors import ClusterConnectionError, FetchError
from kubecensus.core.models import APIResource, APIResourceList

logger = logging.getLogger("kubecensus.cluster")

_AUTH = ["BearerToken"]
_ACCEPT = {"Accept": "application/json"}


def get_cluster_name(kubeconfig_path: Path) -> str:
    """
    Name of the cluster referenced by the kubeconfig's current context,
    falling back to the context name itself.
    """
    try:
        _, current = config.list_kube_config_contexts(config_file=str(kubeconfig_path))
    except (ConfigException, OSError) as e:
        raise ClusterConnectionError(f"cannot read contexts from {kubeconfig_path}: {e}")

    if not current:
        raise ClusterConnectionError(f"no current context set in kubeconfig {kubeconfig_path}")

    context = current.get("context") or {}
    return context.get("cluster") or current["name"]


class KubeClusterClient:
    """
    Discovery and generic list access for one cluster connection.
    """

    def __init__(self, api_client: client.ApiClient):
        self.api = api_client
        self._groups: Optional[List[Any]] = None

    @classmethod
    def from_kubeconfig(cls, kubeconfig_path: Path) -> "KubeClusterClient":
        try:
            api_client = config.new_client_from_config(config_file=str(kubeconfig_path))
        except (ConfigException, OSError) as e:
            raise ClusterConnectionError(f"failed to build config from kubeconfig {kubeconfig_path}: {e}")
        return cls(api_client)

    # --- Discovery ---

    def server_version(self) -> Tuple[str, str]:
        """Raw (major, minor) strings as reported by /version."""
        info = client.VersionApi(self.api).get_code()
        return info.major, info.minor

    def _api_groups(self) -> List[Any]:
        if self._groups is None:
            self._groups = list(client.ApisApi(self.api).get_api_versions().groups or [])
        return self._groups

    def server_groups(self) -> List[str]:
        return [g.name for g in self._api_groups()]

    def preferred_resources(self) -> List[APIResourceList]:
        """
        Preferred resource list of the core group plus every named group.
        A group whose discovery document cannot be read is logged and left
        out; only a failure of the core/group listing itself is fatal.
        """
        try:
            core = client.CoreV1Api(self.api).get_api_resources()
            groups = self._api_groups()
        except ApiException as e:
            raise ClusterConnectionError(f"failed to discover API resources: {e.reason}")

        lists = [self._convert(core)]
        for group in groups:
            preferred = group.preferred_version or (group.versions[0] if group.versions else None)
            if preferred is None:
                continue
            group_version = preferred.group_version
            try:
                raw = self.api.call_api(
                    f"/apis/{group_version}", "GET",
                    header_params=dict(_ACCEPT),
                    auth_settings=_AUTH,
                    response_type="V1APIResourceList",
                    _return_http_data_only=True,
                )
            except ApiException as e:
                logger.warning(f"Discovery failed for {group_version}: {e.reason}")
                continue
            lists.append(self._convert(raw))
        return lists

    @staticmethod
    def _convert(raw: Any) -> APIResourceList:
        resources = tuple(
            APIResource(
                name=r.name,
                verbs=tuple(r.verbs or ()),
                kind=r.kind or "",
                namespaced=bool(r.namespaced),
            )
            for r in (raw.resources or [])
        )
        return APIResourceList(group_version=raw.group_version, resources=resources)

    # --- Generic fetch ---

    def list_items(self, group_version: str, resource: str, timeout: int) -> List[Dict[str, Any]]:
        """
        Lists every instance of a resource type across all namespaces.

        Raises:
            FetchError: the request failed or timed out.
        """
        prefix = "/api" if "/" not in group_version else "/apis"
        path = f"{prefix}/{group_version}/{resource}"
        try:
            data = self.api.call_api(
                path, "GET",
                header_params=dict(_ACCEPT),
                auth_settings=_AUTH,
                response_type="object",
                _return_http_data_only=True,
                _request_timeout=timeout,
            )
        except ApiException as e:
            raise FetchError(resource, group_version, f"{e.status} {e.reason}")
        except Exception as e:
            # urllib3 timeouts and connection resets surface as their own types
            raise FetchError(resource, group_version, str(e))

        if not isinstance(data, dict):
            raise FetchError(resource, group_version, "unexpected response body")

        # List responses omit apiVersion/kind on their items
        list_kind = data.get("kind") or ""
        item_kind = list_kind[:-len("List")] if list_kind.endswith("List") else list_kind
        items = []
        for item in data.get("items") or []:
            if isinstance(item, dict):
                item.setdefault("apiVersion", group_version)
                if item_kind:
                    item.setdefault("kind", item_kind)
            items.append(item)
        return items

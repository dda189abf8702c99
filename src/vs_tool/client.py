"""Remote resource client"""

from __future__ import annotations

from typing import Any, Protocol

from kubernetes import client as k8s
from kubernetes import config as k8s_config

from vs_tool.descriptor import API_GROUP, API_VERSION

# (group, version, plural) for the custom resources the wizard reads or creates
CUSTOM_RESOURCES: dict[str, tuple[str, str, str]] = {
    "definitions": (API_GROUP, API_VERSION, "virtualserverdefinitions"),
    "virtualservers": (API_GROUP, API_VERSION, "virtualservers"),
}


class ResourceClient(Protocol):
    """What the wizard needs from the cluster"""

    @property
    def default_namespace(self) -> str: ...

    def list(self, kind: str, namespace: str | None = None) -> list[dict[str, Any]]:
        """List objects of ``kind``: images, definitions, services, pvcs, virtualservers."""

    def create(self, manifest: dict[str, Any]) -> int:
        """Create a Virtual Server and return the HTTP status code."""


class KubernetesResourceClient:
    """ResourceClient backed by the current kubeconfig context"""

    def __init__(self, context: str | None = None) -> None:
        k8s_config.load_kube_config(context=context)
        _, active_context = k8s_config.list_kube_config_contexts()
        self._default_namespace: str = (
            (active_context or {}).get("context", {}).get("namespace") or "default"
        )
        self.api_client: k8s.ApiClient = k8s.ApiClient()
        self.core: k8s.CoreV1Api = k8s.CoreV1Api(self.api_client)
        self.custom: k8s.CustomObjectsApi = k8s.CustomObjectsApi(self.api_client)

    @property
    def default_namespace(self) -> str:
        return self._default_namespace

    def list(self, kind: str, namespace: str | None = None) -> list[dict[str, Any]]:
        namespace = namespace or self._default_namespace

        if kind in CUSTOM_RESOURCES:
            group, version, plural = CUSTOM_RESOURCES[kind]
            response: dict[str, Any] = self.custom.list_namespaced_custom_object(
                group, version, namespace, plural
            )
            return list(response.get("items", []))

        # Images are PVCs living in a dedicated namespace
        if kind in ("images", "pvcs"):
            result = self.core.list_namespaced_persistent_volume_claim(namespace)
        elif kind == "services":
            result = self.core.list_namespaced_service(namespace)
        else:
            raise ValueError(f"Unknown resource kind: {kind}")

        return list(self.api_client.sanitize_for_serialization(result).get("items", []))

    def create(self, manifest: dict[str, Any]) -> int:
        group, version, plural = CUSTOM_RESOURCES["virtualservers"]
        _, status, _ = self.custom.create_namespaced_custom_object_with_http_info(
            group, version, manifest["metadata"]["namespace"], plural, manifest
        )
        return status

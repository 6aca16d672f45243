from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

import urllib3
from kubernetes import client, config
from kubernetes.client import V1Deployment
from kubernetes.client.rest import ApiException

from autoscaler.domain.errors import ScaleCommandError, ServiceLookupError
from autoscaler.domain.orchestrator import Orchestrator
from autoscaler.domain.serviceConfig import ServiceConfig, parse_service_config
from autoscaler.domain.thresholdPolicy import LabelKeys

logger = logging.getLogger(__name__)


def _load_config() -> None:
    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()


class KubernetesClient(Orchestrator):
    """Treats each Deployment in one namespace as a service; label keys are read from labels and annotations."""

    def __init__(
            self,
            namespace: str = "default",
            labels: LabelKeys = LabelKeys(),
            apps_api: Optional[client.AppsV1Api] = None,
    ) -> None:
        if apps_api is None:
            _load_config()
            apps_api = client.AppsV1Api()
        self.apps = apps_api
        self.ns = namespace
        self.labels = labels

    def _read_deployment(self, name: str) -> V1Deployment:
        try:
            return self.apps.read_namespaced_deployment(name=name, namespace=self.ns)
        except ApiException as exc:
            raise ServiceLookupError(name, f"cannot read deployment in {self.ns}: {exc.status} {exc.reason}") from exc
        except urllib3.exceptions.HTTPError as exc:
            raise ServiceLookupError(name, f"kubernetes API unreachable: {exc}") from exc

    def inspect(self, service_id: str) -> ServiceConfig:
        deployment = self._read_deployment(service_id)
        meta = deployment.metadata

        merged: dict[str, Any] = {}
        merged.update(meta.labels or {})
        merged.update(meta.annotations or {})

        replicas = deployment.spec.replicas if deployment.spec else None
        return parse_service_config(service_id, merged, replicas, self.labels)

    def scale(self, service_id: str, replicas: int) -> None:
        patch: Mapping[str, Any] = {"spec": {"replicas": replicas}}

        try:
            self.apps.patch_namespaced_deployment_scale(
                name=service_id,
                namespace=self.ns,
                body=patch,
            )
        except ApiException as exc:
            raise ScaleCommandError(service_id, f"scale to {replicas} rejected: {exc.status} {exc.reason}") from exc
        except urllib3.exceptions.HTTPError as exc:
            raise ScaleCommandError(service_id, f"kubernetes API unreachable: {exc}") from exc

        logger.debug(f"[scaler] deployment={self.ns}/{service_id} replicas -> {replicas}")

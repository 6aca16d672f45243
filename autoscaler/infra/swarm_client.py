from __future__ import annotations

import logging
from typing import Any, Optional

import docker
import requests
from docker.errors import DockerException, NotFound

from autoscaler.domain.errors import ScaleCommandError, ServiceConfigError, ServiceLookupError
from autoscaler.domain.orchestrator import Orchestrator
from autoscaler.domain.serviceConfig import ServiceConfig, parse_service_config
from autoscaler.domain.thresholdPolicy import LabelKeys

logger = logging.getLogger(__name__)


class SwarmClient(Orchestrator):
    """Docker Swarm services: labels live in Spec.Labels, replicas in Spec.Mode.Replicated."""

    def __init__(self, labels: LabelKeys = LabelKeys(), docker_client: Optional[Any] = None) -> None:
        self.labels = labels
        self.docker = docker_client or docker.from_env()

    def _get_service(self, service_id: str):
        try:
            return self.docker.services.get(service_id)
        except NotFound as exc:
            raise ServiceLookupError(service_id, "service not found") from exc
        except (DockerException, requests.RequestException) as exc:
            raise ServiceLookupError(service_id, f"docker service inspect failed: {exc}") from exc

    def inspect(self, service_id: str) -> ServiceConfig:
        service = self._get_service(service_id)

        try:
            spec = service.attrs["Spec"]
            labels = spec.get("Labels") or {}
            mode = spec.get("Mode") or {}
        except (KeyError, TypeError, AttributeError) as exc:
            raise ServiceConfigError(service_id, "malformed service spec") from exc

        replicated = mode.get("Replicated")
        if replicated is None:
            raise ServiceConfigError(service_id, f"not a replicated service (mode={list(mode)})")

        return parse_service_config(service_id, labels, replicated.get("Replicas"), self.labels)

    def scale(self, service_id: str, replicas: int) -> None:
        service = self._get_service(service_id)
        try:
            service.scale(replicas)
        except (DockerException, requests.RequestException) as exc:
            raise ScaleCommandError(service_id, f"docker service scale to {replicas} failed: {exc}") from exc

        logger.debug(f"[scaler] service={service_id} replicas -> {replicas}")

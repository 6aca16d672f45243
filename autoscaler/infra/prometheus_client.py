from __future__ import annotations

import json
import logging
import math
from typing import Any, Final, Optional

import requests

from autoscaler.domain.errors import MetricsUnavailableError
from autoscaler.domain.utilizationSample import UtilizationSample

logger = logging.getLogger(__name__)

SWARM_SERVICE_LABEL: Final[str] = "container_label_com_docker_swarm_service_name"

# per-service, per-instance cpu rate over 5 minutes, as a percentage
DEFAULT_CPU_QUERY: Final[str] = (
    "sum(rate(container_cpu_usage_seconds_total"
    "{container_label_com_docker_swarm_task_name=~'.+'}[5m]))"
    "BY(container_label_com_docker_swarm_service_name,instance)*100"
)


class PrometheusClient:
    _QUERY_PATH: Final[str] = "/api/v1/query"

    def __init__(
            self,
            base_url: str,
            query: str = DEFAULT_CPU_QUERY,
            service_label: str = SWARM_SERVICE_LABEL,
            timeout: Optional[float] = None,
    ) -> None:
        self.base = base_url.rstrip("/")
        self.query = query
        self.service_label = service_label
        self.timeout = timeout

    def _query(self) -> list[dict[str, Any]]:
        params = {"query": self.query}

        try:
            r = requests.get(f"{self.base}{self._QUERY_PATH}", params=params, timeout=self.timeout)
            r.raise_for_status()
            data: dict[str, Any] = r.json()
        except requests.RequestException as exc:
            raise MetricsUnavailableError("Failed to query Prometheus") from exc
        except ValueError as exc:
            raise MetricsUnavailableError("Prometheus returned a non-JSON body") from exc

        if not isinstance(data, dict) or data.get("status") != "success":
            raise MetricsUnavailableError(f"Prometheus error: {data}")

        logger.info("Prometheus results")
        logger.debug(json.dumps(data, indent=2))

        try:
            result = data["data"]["result"]
        except (KeyError, TypeError) as exc:
            raise MetricsUnavailableError(f"Invalid Prometheus response: {data}") from exc
        if not isinstance(result, list):
            raise MetricsUnavailableError(f"Invalid Prometheus response: {data}")
        return result

    def fetch_utilization(self) -> list[UtilizationSample]:
        """
        One sample per service, in the order services first appear in the result.

        The query yields one row per (service, instance); rows of the same
        service are averaged. Rows without the service label or with a
        non-numeric value are skipped.
        """
        totals: dict[str, list[float]] = {}

        for item in self._query():
            try:
                service_id = item["metric"][self.service_label]
                value = float(item["value"][1])
            except (KeyError, IndexError, TypeError, ValueError):
                logger.warning(f"Skipping malformed Prometheus row: {item}")
                continue

            if not service_id or not math.isfinite(value):
                logger.debug(f"Skipping Prometheus row without usable data: {item}")
                continue

            totals.setdefault(service_id, []).append(value)

        samples = [
            UtilizationSample(service_id=service_id, utilization_percent=sum(values) / len(values))
            for service_id, values in totals.items()
        ]
        logger.info(f"Fetched utilization for {len(samples)} services from Prometheus")
        return samples

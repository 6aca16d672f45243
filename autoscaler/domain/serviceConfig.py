import math
import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from autoscaler.domain.errors import ServiceConfigError
from autoscaler.domain.thresholdPolicy import LabelKeys

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class ServiceConfig:
    service_id: str
    autoscale_enabled: bool
    current_replicas: int
    min_replicas: Optional[int] = None
    max_replicas: Optional[int] = None
    upper_threshold: Optional[float] = None
    lower_threshold: Optional[float] = None


def _parse_replica_bound(value: Any) -> Optional[int]:
    # labels are strings; "3", " 3 " and "3.7" all mean 3, anything else means unset
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    match = _INT_PREFIX.match(str(value))
    return int(match.group(1)) if match else None


def _parse_threshold(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(parsed) or parsed <= 0:
        return None
    return parsed


def parse_service_config(
        service_id: str,
        labels: Optional[Mapping[str, Any]],
        current_replicas: Any,
        keys: LabelKeys = LabelKeys(),
) -> ServiceConfig:
    """
    Build a ServiceConfig from orchestrator labels.

    Missing bounds and thresholds are not errors; they come back as None.
    A missing/invalid replica count or contradictory bounds raise
    ServiceConfigError, which is scoped to this one service.
    """
    labels = labels or {}

    if isinstance(current_replicas, bool) or not isinstance(current_replicas, int) or current_replicas < 0:
        raise ServiceConfigError(service_id, f"invalid replica count {current_replicas!r}")

    minimum = _parse_replica_bound(labels.get(keys.minimum))
    maximum = _parse_replica_bound(labels.get(keys.maximum))

    if minimum is not None and minimum < 0:
        raise ServiceConfigError(service_id, f"negative minimum {minimum}")
    if maximum is not None and maximum < 0:
        raise ServiceConfigError(service_id, f"negative maximum {maximum}")
    if minimum is not None and maximum is not None and minimum > maximum:
        raise ServiceConfigError(service_id, f"minimum {minimum} is above maximum {maximum}")

    return ServiceConfig(
        service_id=service_id,
        autoscale_enabled=labels.get(keys.enabled) == "true",
        current_replicas=current_replicas,
        min_replicas=minimum,
        max_replicas=maximum,
        upper_threshold=_parse_threshold(labels.get(keys.cpu_upper_limit)),
        lower_threshold=_parse_threshold(labels.get(keys.cpu_lower_limit)),
    )

import json

from autoscaler.domain.errors import ConfigurationError
from autoscaler.domain.thresholdPolicy import (
    CPU_PERCENTAGE_LOWER_LIMIT,
    CPU_PERCENTAGE_UPPER_LIMIT,
    SCALE_DOWN_STEP,
    SCALE_UP_STEP,
    LabelKeys,
    ThresholdPolicy,
)


def load_policy(path: str) -> ThresholdPolicy:
    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        raise ConfigurationError(f"Cannot read policy file {path}") from exc

    return build_policy(data)


def build_policy(data: dict) -> ThresholdPolicy:
    try:
        labels = LabelKeys(**data.get('labels', {}))
        policy = ThresholdPolicy(
            cpu_upper_limit=float(data.get('cpu_upper_limit', CPU_PERCENTAGE_UPPER_LIMIT)),
            cpu_lower_limit=float(data.get('cpu_lower_limit', CPU_PERCENTAGE_LOWER_LIMIT)),
            scale_up_step=int(data.get('scale_up_step', SCALE_UP_STEP)),
            scale_down_step=int(data.get('scale_down_step', SCALE_DOWN_STEP)),
            labels=labels,
        )
    except (AttributeError, TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid policy: {data}") from exc

    if policy.cpu_upper_limit <= policy.cpu_lower_limit:
        raise ConfigurationError(
            f"cpu_upper_limit ({policy.cpu_upper_limit}) must be above "
            f"cpu_lower_limit ({policy.cpu_lower_limit})"
        )
    if policy.scale_up_step < 1 or policy.scale_down_step < 1:
        raise ConfigurationError("scale steps must be at least 1")

    return policy


"""
{
  "cpu_upper_limit": 80,
  "cpu_lower_limit": 20,
  "scale_up_step": 2,
  "scale_down_step": 1,
  "labels": {"enabled": "autoscaler.enabled", "minimum": "autoscaler.min", "maximum": "autoscaler.max"}
}
"""

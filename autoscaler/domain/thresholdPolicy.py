from dataclasses import dataclass, field

# default limits if a service does not carry its own cpu limit labels
CPU_PERCENTAGE_UPPER_LIMIT = 85.0
CPU_PERCENTAGE_LOWER_LIMIT = 25.0

SCALE_UP_STEP = 2
SCALE_DOWN_STEP = 1


@dataclass(frozen=True)
class LabelKeys:
    enabled: str = "swarm.autoscaler"
    minimum: str = "swarm.autoscaler.minimum"
    maximum: str = "swarm.autoscaler.maximum"
    cpu_upper_limit: str = "swarm.cpu.upper_limit"
    cpu_lower_limit: str = "swarm.cpu.lower_limit"


@dataclass(frozen=True)
class ThresholdPolicy:
    cpu_upper_limit: float = CPU_PERCENTAGE_UPPER_LIMIT
    cpu_lower_limit: float = CPU_PERCENTAGE_LOWER_LIMIT
    scale_up_step: int = SCALE_UP_STEP
    scale_down_step: int = SCALE_DOWN_STEP
    labels: LabelKeys = field(default_factory=LabelKeys)

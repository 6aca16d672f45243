from dataclasses import dataclass


@dataclass(frozen=True)
class UtilizationSample:
    service_id: str
    utilization_percent: float

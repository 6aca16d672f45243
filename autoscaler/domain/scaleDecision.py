from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ScaleAction(Enum):
    NONE = "none"
    ENFORCE_MINIMUM = "enforce_minimum"
    ENFORCE_MAXIMUM = "enforce_maximum"
    SCALE_UP = "scale_up"
    SCALE_DOWN = "scale_down"


@dataclass(frozen=True)
class ScaleDecision:
    action: ScaleAction
    target: Optional[int] = None
    reason: str = ""

    @classmethod
    def no_action(cls, reason: str = "") -> "ScaleDecision":
        return cls(ScaleAction.NONE, None, reason)

    @property
    def requires_change(self) -> bool:
        return self.action is not ScaleAction.NONE


"""
ScaleDecision(ScaleAction.SCALE_UP, target=7, reason="cpu 90.0% > 85.0%")
ScaleDecision(ScaleAction.NONE, reason="already at maximum of 10 replicas")
"""

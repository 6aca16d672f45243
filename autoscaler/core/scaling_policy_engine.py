import logging
from typing import Optional

from autoscaler.domain.scaleDecision import ScaleAction, ScaleDecision
from autoscaler.domain.serviceConfig import ServiceConfig
from autoscaler.domain.thresholdPolicy import ThresholdPolicy
from autoscaler.domain.utilizationSample import UtilizationSample

logger = logging.getLogger(__name__)


class ScalingPolicyEngine:
    """
    Turns one service's config into a ScaleDecision for each step of a cycle.

    1.  Bounds first: a replica count outside [minimum, maximum] is pulled back
        to the violated bound, whatever the cpu usage is.
    2.  Above the upper limit: +scale_up_step replicas, only if the whole step
        fits under the maximum. At the maximum, or with a step that would
        overshoot it, nothing happens.
    3.  Below the lower limit: -scale_down_step replicas, never under the minimum.
    4.  Services without autoscale="true" are never touched.

    The engine holds no state between calls and performs no I/O.
    """

    def __init__(self, policy: Optional[ThresholdPolicy] = None) -> None:
        self.policy: ThresholdPolicy = policy or ThresholdPolicy()

    # ─────────────────────────── thresholds ────────────────────────────
    def effective_upper(self, cfg: ServiceConfig) -> float:
        if cfg.upper_threshold is None:
            return self.policy.cpu_upper_limit
        return cfg.upper_threshold

    def effective_lower(self, cfg: ServiceConfig) -> float:
        if cfg.lower_threshold is None:
            return self.policy.cpu_lower_limit
        return cfg.lower_threshold

    def is_high(self, sample: UtilizationSample, cfg: ServiceConfig) -> bool:
        return sample.utilization_percent > self.effective_upper(cfg)

    def is_low(self, sample: UtilizationSample, cfg: ServiceConfig) -> bool:
        return sample.utilization_percent < self.effective_lower(cfg)

    # ─────────────────────────── decisions ─────────────────────────────
    @staticmethod
    def _bounds_violation(cfg: ServiceConfig) -> Optional[ScaleDecision]:
        current = cfg.current_replicas
        if cfg.min_replicas is not None and current < cfg.min_replicas:
            return ScaleDecision(ScaleAction.ENFORCE_MINIMUM, cfg.min_replicas,
                                 f"{current} replicas < minimum {cfg.min_replicas}")
        if cfg.max_replicas is not None and current > cfg.max_replicas:
            return ScaleDecision(ScaleAction.ENFORCE_MAXIMUM, cfg.max_replicas,
                                 f"{current} replicas > maximum {cfg.max_replicas}")
        return None

    def enforce_bounds(self, cfg: ServiceConfig) -> ScaleDecision:
        name = cfg.service_id
        if not cfg.autoscale_enabled:
            logger.warning(f"Service {name} does not have an autoscale label.")
            return ScaleDecision.no_action("autoscale disabled")

        logger.info(f"Service {name} has an autoscale label.")
        violation = self._bounds_violation(cfg)
        if violation is None:
            return ScaleDecision.no_action("within bounds")

        if violation.action is ScaleAction.ENFORCE_MINIMUM:
            logger.info(f"Service {name} is below the minimum. Scaling to the minimum of {violation.target}")
        else:
            logger.info(f"Service {name} is above the maximum. Scaling to the maximum of {violation.target}")
        return violation

    def scale_for_high(self, cfg: ServiceConfig) -> ScaleDecision:
        if not cfg.autoscale_enabled:
            return ScaleDecision.no_action("autoscale disabled")
        # bounds enforcement wins over any threshold step
        violation = self._bounds_violation(cfg)
        if violation is not None:
            return violation

        name = cfg.service_id
        current = cfg.current_replicas
        maximum = cfg.max_replicas
        target = current + self.policy.scale_up_step

        if maximum is None:
            logger.info(f"Service {name} has no usable maximum label, not scaling up")
            return ScaleDecision.no_action("no maximum")
        if current == maximum:
            logger.info(f"Service {name} already has the maximum of {maximum} replicas")
            return ScaleDecision.no_action(f"already at maximum of {maximum} replicas")
        if target > maximum:
            # a partial step up to the maximum is deliberately not taken
            logger.info(f"Service {name} cannot scale up to {target}, maximum is {maximum}")
            return ScaleDecision.no_action(f"step to {target} exceeds maximum {maximum}")

        logger.info(f"Scaling up the service {name} to {target}")
        return ScaleDecision(ScaleAction.SCALE_UP, target, f"{current} -> {target}")

    def scale_for_low(self, cfg: ServiceConfig) -> ScaleDecision:
        if not cfg.autoscale_enabled:
            return ScaleDecision.no_action("autoscale disabled")
        violation = self._bounds_violation(cfg)
        if violation is not None:
            return violation

        name = cfg.service_id
        current = cfg.current_replicas
        minimum = cfg.min_replicas
        target = current - self.policy.scale_down_step

        if minimum is None:
            logger.info(f"Service {name} has no usable minimum label, not scaling down")
            return ScaleDecision.no_action("no minimum")
        if target >= minimum:
            logger.info(f"Scaling down the service {name} to {target}")
            return ScaleDecision(ScaleAction.SCALE_DOWN, target, f"{current} -> {target}")
        if current == minimum:
            logger.info(f"Service {name} has the minimum number of replicas.")
            return ScaleDecision.no_action(f"already at minimum of {minimum} replicas")

        return ScaleDecision.no_action(f"step to {target} is below minimum {minimum}")

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Set, Tuple

from autoscaler.core.scaling_policy_engine import ScalingPolicyEngine
from autoscaler.domain.errors import MetricsUnavailableError, OrchestratorError
from autoscaler.domain.orchestrator import Orchestrator
from autoscaler.domain.scaleDecision import ScaleDecision
from autoscaler.domain.serviceConfig import ServiceConfig
from autoscaler.domain.utilizationSample import UtilizationSample
from autoscaler.infra.prometheus_client import PrometheusClient

logger = logging.getLogger(__name__)


@dataclass
class CycleReport:
    aborted: bool = False
    decisions: List[Tuple[str, ScaleDecision]] = field(default_factory=list)
    applied: List[Tuple[str, int]] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


class ScalingDecisionService:
    """
    One cycle:
    1.  Fetch cpu utilization for every service (one Prometheus query). If that
        fails nothing is touched until the next cycle.
    2.  Enforce min/max bounds on every service seen in the result.
    3.  Scale up services above their upper limit, then scale down services
        below their lower limit, in the order Prometheus returned them.
        Services corrected in step 2 sit out step 3 for this cycle.

    Service config is read from the orchestrator again for every step. A
    service is scaled at most once per cycle, and a failure to read or scale
    one service never affects the others.
    """

    def __init__(self, metrics_client: PrometheusClient, orchestrator: Orchestrator,
                 engine: Optional[ScalingPolicyEngine] = None,
                 sleep: Callable[[float], None] = time.sleep) -> None:
        self.metrics_client: PrometheusClient = metrics_client
        self.orchestrator: Orchestrator = orchestrator
        self.engine: ScalingPolicyEngine = engine or ScalingPolicyEngine()
        self._sleep = sleep

    # ─────────────────────────── helpers ────────────────────────────
    def _inspect(self, service_id: str, report: CycleReport) -> Optional[ServiceConfig]:
        try:
            return self.orchestrator.inspect(service_id)
        except OrchestratorError as exc:
            logger.error(f"Cannot inspect service {service_id}: {exc}")
            report.failed.append(service_id)
            report.decisions.append((service_id, ScaleDecision.no_action("inspect failed")))
            return None

    def _apply(self, service_id: str, decision: ScaleDecision, report: CycleReport) -> bool:
        report.decisions.append((service_id, decision))
        if not decision.requires_change:
            return False

        try:
            self.orchestrator.scale(service_id, decision.target)
        except OrchestratorError as exc:
            logger.error(f"Error scaling {service_id} to {decision.target} ({decision.action.value}): {exc}")
            report.failed.append(service_id)
            return False

        report.applied.append((service_id, decision.target))
        return True

    def _enforce_bounds(self, services: List[str], report: CycleReport) -> Set[str]:
        corrected: Set[str] = set()
        for service_id in services:
            cfg = self._inspect(service_id, report)
            if cfg is None:
                continue
            decision = self.engine.enforce_bounds(cfg)
            if decision.requires_change:
                # counts as handled even if the scale call failed; retried next cycle
                corrected.add(service_id)
            self._apply(service_id, decision, report)
        return corrected

    def _scale_up_pass(self, samples: List[UtilizationSample], skip: Set[str],
                       report: CycleReport) -> List[UtilizationSample]:
        """Scale up hot services; returns the cold ones for the scale-down pass."""
        cold: List[UtilizationSample] = []
        for sample in samples:
            if sample.service_id in skip:
                continue
            cfg = self._inspect(sample.service_id, report)
            if cfg is None:
                continue

            # a sample over its upper limit is never also treated as low
            if self.engine.is_high(sample, cfg):
                logger.info(f"Service {cfg.service_id} is above {self.engine.effective_upper(cfg)} percent cpu usage.")
                self._apply(cfg.service_id, self.engine.scale_for_high(cfg), report)
            elif self.engine.is_low(sample, cfg):
                cold.append(sample)
        return cold

    def _scale_down_pass(self, cold: List[UtilizationSample], report: CycleReport) -> None:
        for sample in cold:
            cfg = self._inspect(sample.service_id, report)
            if cfg is None:
                continue
            if self.engine.is_high(sample, cfg) or not self.engine.is_low(sample, cfg):
                logger.info(f"Service {cfg.service_id} limits changed during the cycle, skipping scale down")
                continue

            logger.info(f"Service {cfg.service_id} is below {self.engine.effective_lower(cfg)} percent cpu usage.")
            self._apply(cfg.service_id, self.engine.scale_for_low(cfg), report)

    # ─────────────────────────── cycle ──────────────────────────────
    def run_cycle(self) -> CycleReport:
        report = CycleReport()

        try:
            samples = self.metrics_client.fetch_utilization()
        except MetricsUnavailableError as exc:
            logger.error(f"Skipping cycle, metrics unavailable: {exc}")
            report.aborted = True
            return report

        services = list(dict.fromkeys(s.service_id for s in samples))
        corrected = self._enforce_bounds(services, report)

        logger.info('Checking for high cpu services')
        cold = self._scale_up_pass(samples, corrected, report)

        logger.info('Checking for low cpu services')
        self._scale_down_pass(cold, report)

        return report

    def run(self, loop: bool = True, interval_sec: int = 60) -> None:
        while True:
            try:
                self.run_cycle()
            except Exception:
                logger.exception("Unexpected error during scaling cycle")

            if not loop:
                return
            logger.info(f"Waiting {interval_sec} seconds for the next test")
            self._sleep(interval_sec)

import logging
import sys

from autoscaler.config import Settings, load_settings
from autoscaler.core.scaling_decision_service import ScalingDecisionService
from autoscaler.core.scaling_policy_engine import ScalingPolicyEngine
from autoscaler.domain.errors import ConfigurationError
from autoscaler.domain.orchestrator import Orchestrator
from autoscaler.domain.policy_loader import load_policy
from autoscaler.domain.thresholdPolicy import ThresholdPolicy
from autoscaler.infra.prometheus_client import PrometheusClient

logger = logging.getLogger(__name__)


def build_orchestrator(settings: Settings, policy: ThresholdPolicy) -> Orchestrator:
    if settings.orchestrator == "kubernetes":
        from kubernetes.config import ConfigException

        from autoscaler.infra.kubernetes_client import KubernetesClient
        try:
            return KubernetesClient(namespace=settings.namespace, labels=policy.labels)
        except ConfigException as exc:
            raise ConfigurationError(f"No usable kubernetes configuration: {exc}") from exc

    from docker.errors import DockerException

    from autoscaler.infra.swarm_client import SwarmClient
    try:
        return SwarmClient(labels=policy.labels)
    except DockerException as exc:
        raise ConfigurationError(f"Cannot connect to the docker daemon: {exc}") from exc


def build_service(settings: Settings) -> ScalingDecisionService:
    policy = load_policy(settings.policy_file) if settings.policy_file else ThresholdPolicy()

    # --- Infrastructure ---
    prometheus = PrometheusClient(
        base_url=settings.prometheus_url,
        query=settings.prometheus_query,
        service_label=settings.service_label,
        timeout=settings.prometheus_timeout,
    )
    orchestrator = build_orchestrator(settings, policy)

    return ScalingDecisionService(
        metrics_client=prometheus,
        orchestrator=orchestrator,
        engine=ScalingPolicyEngine(policy),
    )


def main() -> int:
    try:
        settings = load_settings()
    except ConfigurationError as exc:
        logging.basicConfig(level=logging.ERROR)
        logger.error(f"Invalid configuration: {exc}")
        return 2

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    try:
        decision_service = build_service(settings)
    except ConfigurationError as exc:
        logger.error(f"Cannot start autoscaler: {exc}")
        return 2

    logger.info(f"Starting scaling loop ({settings.orchestrator}, interval={settings.interval_sec}s, loop={settings.loop})")
    try:
        decision_service.run(loop=settings.loop, interval_sec=settings.interval_sec)
    except KeyboardInterrupt:
        logger.info("Exiting on Ctrl+C")
    return 0


if __name__ == "__main__":
    sys.exit(main())

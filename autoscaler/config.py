import os
from dataclasses import dataclass
from typing import Mapping, Optional

from autoscaler.domain.errors import ConfigurationError
from autoscaler.infra.prometheus_client import DEFAULT_CPU_QUERY, SWARM_SERVICE_LABEL

ORCHESTRATORS = ("swarm", "kubernetes")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    prometheus_url: str
    interval_sec: int = 60
    loop: bool = True
    orchestrator: str = "swarm"
    namespace: str = "default"
    prometheus_query: str = DEFAULT_CPU_QUERY
    service_label: str = SWARM_SERVICE_LABEL
    prometheus_timeout: Optional[float] = None
    policy_file: Optional[str] = None
    log_level: str = "INFO"


def _positive_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value}")
    return value


def _optional_float(environ: Mapping[str, str], name: str) -> Optional[float]:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Read the process configuration once, at startup."""
    if environ is None:
        environ = os.environ

    prometheus_url = environ.get("PROMETHEUS_URL", "").strip()
    if not prometheus_url:
        raise ConfigurationError("PROMETHEUS_URL is not set")

    orchestrator = environ.get("ORCHESTRATOR", "swarm").strip().lower()
    if orchestrator not in ORCHESTRATORS:
        raise ConfigurationError(f"ORCHESTRATOR must be one of {ORCHESTRATORS}, got {orchestrator!r}")

    log_level = (environ.get("LOG_LEVEL") or "INFO").strip().upper()
    if log_level not in LOG_LEVELS:
        raise ConfigurationError(f"LOG_LEVEL must be one of {LOG_LEVELS}, got {log_level!r}")

    return Settings(
        prometheus_url=prometheus_url,
        interval_sec=_positive_int(environ, "INTERVAL", 60),
        loop=environ.get("LOOP") != "no",
        orchestrator=orchestrator,
        namespace=environ.get("KUBE_NAMESPACE") or "default",
        prometheus_query=environ.get("PROMETHEUS_QUERY") or DEFAULT_CPU_QUERY,
        service_label=environ.get("PROMETHEUS_SERVICE_LABEL") or SWARM_SERVICE_LABEL,
        prometheus_timeout=_optional_float(environ, "PROMETHEUS_TIMEOUT"),
        policy_file=environ.get("POLICY_FILE") or None,
        log_level=log_level,
    )

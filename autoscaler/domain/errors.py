class AutoscalerError(RuntimeError):
    pass


class ConfigurationError(AutoscalerError):
    """Invalid process configuration or policy file. Raised at startup only."""


class MetricsUnavailableError(AutoscalerError):
    """The metrics backend could not be queried; the whole cycle is skipped."""


class OrchestratorError(AutoscalerError):
    """Base for failures that are isolated to a single service."""

    def __init__(self, service_id: str, message: str) -> None:
        super().__init__(f"{service_id}: {message}")
        self.service_id = service_id


class ServiceLookupError(OrchestratorError):
    pass


class ServiceConfigError(OrchestratorError):
    pass


class ScaleCommandError(OrchestratorError):
    pass

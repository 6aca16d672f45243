from abc import ABC, abstractmethod

from autoscaler.domain.serviceConfig import ServiceConfig


class Orchestrator(ABC):
    @abstractmethod
    def inspect(self, service_id: str) -> ServiceConfig:
        pass

    @abstractmethod
    def scale(self, service_id: str, replicas: int) -> None:
        pass

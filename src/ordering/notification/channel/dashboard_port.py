"""Dashboard channel port — publishes order events to the admin dashboard feed."""

from abc import ABC, abstractmethod


class DashboardPort(ABC):
    @abstractmethod
    async def publish(self, event: str, payload: dict) -> dict:
        """Publish an order event.

        Returns:
            dict with keys: message_id, status ("sent" or "failed"), error (optional)
        """
        ...

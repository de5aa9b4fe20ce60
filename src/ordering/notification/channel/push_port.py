"""Push channel port — abstract interface for mobile push dispatch."""

from abc import ABC, abstractmethod


class PushPort(ABC):
    @abstractmethod
    async def send(self, user_id: str, title: str, body: str) -> dict:
        """Send a push notification to all of a user's devices.

        Returns:
            dict with keys: message_id, status ("sent" or "failed"), error (optional)
        """
        ...

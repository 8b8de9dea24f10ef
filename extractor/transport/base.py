"""Host transport contract."""

from abc import ABC, abstractmethod

from extractor.domain.models import HostAck, HostPayload


class HostTransport(ABC):
    """Delivers the single selected payload to the persistence/analysis host."""

    name: str = "transport"

    @abstractmethod
    async def send(self, payload: HostPayload) -> HostAck:
        """
        Deliver a payload.

        Args:
            payload: Selected text plus metadata

        Returns:
            The host's acknowledgement

        Raises:
            TransportError: If delivery failed or the host rejected the payload
        """

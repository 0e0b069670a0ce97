from typing import Any, Protocol


class EventPublisherPort(Protocol):
    async def emit(self, name: str, payload: dict[str, Any]) -> None:
        """Publish a named event. Delivery happens out of band."""

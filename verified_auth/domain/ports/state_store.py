from typing import Any, Protocol


class StateStorePort(Protocol):
    async def set(self, key: str, value: dict[str, Any]) -> None:
        """Store/replace value under key. Expiry is the store's own policy."""

    async def get(self, key: str) -> dict[str, Any] | None:
        """Return the stored value, or None if absent or expired."""

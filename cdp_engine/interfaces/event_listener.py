"""Event listener protocol — observability hook for committed operations."""
from typing import Protocol

from ..models import EngineEvent


class EventListener(Protocol):
    """Receives engine events after the emitting call has committed."""

    def on_event(self, event: EngineEvent) -> None: ...

import logging
from typing import Any, List

from .types import DiagnosticEvent

logger = logging.getLogger(__name__)


class Diagnostics:
    """
    Journal de diagnostic rattaché à une requête.

    Chaque événement part toujours dans le logger (niveau DEBUG) ; il n'est
    conservé pour le rapport que si `enabled` est vrai (mode verbeux / tests).
    """

    def __init__(self, enabled: bool = False) -> None:
        self.enabled = enabled
        self._events: List[DiagnosticEvent] = []

    def emit(self, step: str, message: str, **data: Any) -> None:
        logger.debug("[%s] %s %s", step, message, data or "")
        if self.enabled:
            self._events.append(DiagnosticEvent(step=step, message=message, data=dict(data)))

    @property
    def events(self) -> List[DiagnosticEvent]:
        return list(self._events)

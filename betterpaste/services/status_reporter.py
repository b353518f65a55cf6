"""Status sink for the scanner widget.

The reporter only remembers the last label it was given so the control API
can show it.  Whether a write is allowed at all is decided by the gate
callable: while the scanner is paused every write is dropped.
"""

import logging
from typing import Callable, Optional

from betterpaste.models.status import StatusHint, StatusLabel, StatusSnapshot

logger = logging.getLogger(__name__)


class StatusReporter:
    def __init__(self, gate: Optional[Callable[[], bool]] = None) -> None:
        self._gate = gate or (lambda: True)
        self._current = StatusSnapshot(label="Paused", hint="muted")

    @property
    def current(self) -> StatusSnapshot:
        return self._current

    def report(self, label: StatusLabel, hint: StatusHint = "neutral") -> bool:
        """Show *label*; returns False when the write was gated off."""
        if not self._gate():
            return False
        self._set(label, hint)
        return True

    def force(self, label: StatusLabel, hint: StatusHint = "neutral") -> None:
        """Write regardless of the gate (used for the pause/resume transition itself)."""
        self._set(label, hint)

    def _set(self, label: StatusLabel, hint: StatusHint) -> None:
        if label != self._current.label:
            logger.info("Status: %s", label)
        self._current = StatusSnapshot(label=label, hint=hint)

"""In-memory inbox for blocks received on ``POST /api/diff``.

Entries are only queued for review here; nothing is written to disk.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from betterpaste.models.block import PatchPayload
from betterpaste.models.patch import PatchEntry

logger = logging.getLogger(__name__)


class PatchInbox:
    def __init__(self, *, paused: bool = False, auto_dismiss: bool = False) -> None:
        self.paused = paused
        self.auto_dismiss = auto_dismiss
        self.new_patch_alert = False
        self._entries: List[PatchEntry] = []
        self._last_id = 0

    def _next_id(self) -> str:
        now = datetime.now(timezone.utc)
        micros = int(now.timestamp() * 1_000_000)
        # Keep ids unique even for two patches in the same microsecond.
        self._last_id = max(micros, self._last_id + 1)
        return str(self._last_id)

    def receive(self, payload: PatchPayload) -> Optional[PatchEntry]:
        """Store *payload*; returns None when it was auto-dismissed."""
        if self.auto_dismiss:
            logger.info("Auto-dismissed patch for %s", payload.file_path)
            return None

        entry = PatchEntry(
            id=self._next_id(),
            timestamp=datetime.now().strftime("%H:%M:%S"),
            data=payload,
            status="queued" if self.paused else "pending",
        )
        self._entries.append(entry)
        self.new_patch_alert = True
        logger.info("Received patch %s for %s (%s)", entry.id, payload.file_path, entry.status)
        return entry

    def entries(self) -> List[PatchEntry]:
        self.new_patch_alert = False
        return list(self._entries)

    def pause(self) -> None:
        """Hold blocks received from now on as queued."""
        self.paused = True
        logger.info("Inbox paused")

    def unpause(self) -> int:
        """Release queued entries to pending; returns how many moved."""
        self.paused = False
        moved = 0
        for i, entry in enumerate(self._entries):
            if entry.status == "queued":
                self._entries[i] = entry.model_copy(update={"status": "pending"})
                moved += 1
        return moved

    def clear(self) -> None:
        self._entries.clear()
        self.new_patch_alert = False

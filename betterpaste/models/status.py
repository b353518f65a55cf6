from typing import Literal

from pydantic import BaseModel

StatusLabel = Literal["Paused", "Idle", "Sending...", "Synced", "Err: Backend", "Err: Connect"]
"""Every label the status widget can show."""

StatusHint = Literal["neutral", "muted", "busy", "ok", "error"]
"""Presentation hint that goes with a label (the widget maps it to a colour)."""


class StatusSnapshot(BaseModel):
    label: StatusLabel
    hint: StatusHint

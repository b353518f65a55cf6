from typing import Literal

from pydantic import BaseModel

from betterpaste.models.block import PatchPayload

PatchStatus = Literal["queued", "pending"]


class PatchEntry(BaseModel):
    """One forwarded block as held by the local inbox."""

    id: str
    timestamp: str  # local wall-clock, HH:MM:SS
    data: PatchPayload
    status: PatchStatus

from pydantic import BaseModel, Field

from betterpaste.models.status import StatusHint, StatusLabel


class ScannerStateResponse(BaseModel):
    paused: bool
    corner_index: int
    corner: str
    status: StatusLabel
    hint: StatusHint
    synced_blocks: int
    in_flight: int


class ScanRequest(BaseModel):
    text: str = Field(
        ...,
        max_length=5 * 1024 * 1024,
        description="Text snapshot to scan once, e.g. a copied chat transcript.",
    )


class ScanResult(BaseModel):
    """Per-tick counters."""

    found: int = 0
    dispatched: int = 0
    already_synced: int = 0
    suspicious: int = 0
    skipped_in_flight: int = 0
    errors: int = 0

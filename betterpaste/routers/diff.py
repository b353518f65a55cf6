import logging
from typing import List

from fastapi import APIRouter, Request

from betterpaste.models.block import PatchPayload
from betterpaste.models.patch import PatchEntry
from betterpaste.services.patch_inbox import PatchInbox

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Inbox"])


def _inbox(request: Request) -> PatchInbox:
    return request.app.state.inbox


@router.post("/diff", summary="Receive one forwarded block")
async def receive_diff(request: Request, body: PatchPayload) -> dict:
    """Queue *body* for review.  The edit itself is never applied here."""
    entry = _inbox(request).receive(body)
    if entry is None:
        return {"status": "dismissed"}
    return {"status": entry.status, "id": entry.id}


@router.get("/patches", response_model=List[PatchEntry], summary="List received blocks")
async def list_patches(request: Request) -> List[PatchEntry]:
    return _inbox(request).entries()


@router.post("/patches/pause", summary="Hold new blocks as queued")
async def pause(request: Request) -> dict:
    _inbox(request).pause()
    return {"paused": True}


@router.post("/patches/unpause", summary="Release queued blocks")
async def unpause(request: Request) -> dict:
    moved = _inbox(request).unpause()
    return {"released": moved}


@router.delete("/patches", summary="Clear the inbox")
async def clear(request: Request) -> dict:
    _inbox(request).clear()
    return {"status": "cleared"}

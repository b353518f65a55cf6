import logging

from fastapi import APIRouter, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from betterpaste.models.control import ScannerStateResponse, ScanRequest, ScanResult
from betterpaste.services.scanner import Scanner

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)
router = APIRouter(prefix="/scanner", tags=["Scanner"])


def _scanner(request: Request) -> Scanner:
    scanner = getattr(request.app.state, "scanner", None)
    if scanner is None:
        raise HTTPException(status_code=503, detail="Scanner is not running.")
    return scanner


def _state_response(scanner: Scanner) -> ScannerStateResponse:
    state = scanner.state
    status = scanner.reporter.current
    return ScannerStateResponse(
        paused=state.paused,
        corner_index=state.corner_index,
        corner=state.corner,
        status=status.label,
        hint=status.hint,
        synced_blocks=len(state.dedup_store),
        in_flight=len(state.in_flight),
    )


@router.get("/state", response_model=ScannerStateResponse, summary="Current scanner state")
async def get_state(request: Request) -> ScannerStateResponse:
    return _state_response(_scanner(request))


@router.post("/toggle", response_model=ScannerStateResponse, summary="Pause or resume scanning")
async def toggle(request: Request) -> ScannerStateResponse:
    scanner = _scanner(request)
    await scanner.toggle()
    return _state_response(scanner)


@router.post("/move", response_model=ScannerStateResponse, summary="Move the widget to the next corner")
async def move(request: Request) -> ScannerStateResponse:
    scanner = _scanner(request)
    scanner.move()
    return _state_response(scanner)


@router.post(
    "/scan",
    response_model=ScanResult,
    summary="Scan a piece of text once",
    description=(
        "Runs a single scan tick over the submitted text instead of the "
        "configured page.  Blocks are dispatched exactly as during a normal "
        "tick; the call returns as soon as they are scheduled.  A paused "
        "scanner does nothing and reports zero blocks."
    ),
)
@limiter.limit("30/minute")
async def scan(request: Request, body: ScanRequest) -> ScanResult:
    scanner = _scanner(request)
    result = await scanner.tick(body.text)
    logger.info(
        "Manual scan: %d found, %d dispatched", result.found, result.dispatched
    )
    return result


@router.post("/session/end", response_model=ScannerStateResponse, summary="Forget all synced blocks")
async def end_session(request: Request) -> ScannerStateResponse:
    scanner = _scanner(request)
    scanner.end_session()
    return _state_response(scanner)

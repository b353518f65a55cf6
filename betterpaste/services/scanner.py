"""Periodic scan loop: text snapshot -> blocks -> dedup -> dispatch.

Everything runs on one asyncio event loop.  A tick reads a snapshot and
schedules one dispatch task per new block without waiting for it; the task
updates the dedup store and the status once the outcome is known.  The
store is therefore only ever written from completed dispatches, never from
the tick itself.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional, Set

from betterpaste.models.block import BlockRecord
from betterpaste.models.control import ScanResult
from betterpaste.models.outcome import DispatchOutcome
from betterpaste.services.block_extractor import iter_candidates
from betterpaste.services.dedup_store import DedupStore
from betterpaste.services.dispatcher import SyncDispatcher
from betterpaste.services.status_reporter import StatusReporter
from betterpaste.services.text_source import TextSource
from betterpaste.services.validity import MAX_SINGLE_LINE_SEARCH, is_suspicious

logger = logging.getLogger(__name__)

SCAN_INTERVAL_MS = 1000
SYNCED_REVERT_MS = 2000

# Widget positions, cycled by move(): 0=BR, 1=BL, 2=TL, 3=TR
CORNERS = ("bottom-right", "bottom-left", "top-left", "top-right")


@dataclass
class ScannerState:
    """All mutable state of one scanner instance."""

    paused: bool = True
    corner_index: int = 0
    dedup_store: DedupStore = field(default_factory=DedupStore)
    in_flight: Set[int] = field(default_factory=set)

    @property
    def corner(self) -> str:
        return CORNERS[self.corner_index]


class Scanner:
    def __init__(
        self,
        dispatcher: SyncDispatcher,
        source: Optional[TextSource] = None,
        *,
        state: Optional[ScannerState] = None,
        reporter: Optional[StatusReporter] = None,
        scan_interval_ms: int = SCAN_INTERVAL_MS,
        synced_revert_ms: int = SYNCED_REVERT_MS,
        max_single_line: int = MAX_SINGLE_LINE_SEARCH,
        suppress_in_flight: bool = True,
    ) -> None:
        self.dispatcher = dispatcher
        self.source = source
        self.state = state or ScannerState()
        self.reporter = reporter or StatusReporter(gate=lambda: not self.state.paused)
        self.scan_interval_ms = scan_interval_ms
        self.synced_revert_ms = synced_revert_ms
        self.max_single_line = max_single_line
        self.suppress_in_flight = suppress_in_flight
        self._tasks: Set[asyncio.Task] = set()
        self._stop = asyncio.Event()

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    async def tick(self, text: Optional[str] = None) -> ScanResult:
        """Run one scan over *text*, or over a fresh snapshot of the source."""
        result = ScanResult()
        if self.state.paused:
            return result
        if text is None:
            if self.source is None:
                return result
            text = await self.source.snapshot()
            # The source may be slow; honour a pause that arrived meanwhile.
            if self.state.paused:
                return result

        for block, fp in iter_candidates(text):
            result.found += 1
            try:
                self._consider(block, fp, result)
            except Exception:
                result.errors += 1
                logger.exception("Failed to process block for %s", block.file_path)
        return result

    def _consider(self, block: BlockRecord, fp: int, result: ScanResult) -> None:
        if self.state.dedup_store.has(fp):
            result.already_synced += 1
            return

        if is_suspicious(block, max_single_line=self.max_single_line):
            result.suspicious += 1
            logger.warning("Skipping suspicious flattened block for %s", block.file_path)
            return

        if self.suppress_in_flight and fp in self.state.in_flight:
            result.skipped_in_flight += 1
            return

        self.reporter.report("Sending...", "busy")
        self.state.in_flight.add(fp)
        task = asyncio.get_running_loop().create_task(self._deliver(block, fp))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        result.dispatched += 1

    async def _deliver(self, block: BlockRecord, fp: int) -> None:
        try:
            outcome = await self.dispatcher.dispatch(block)
        except Exception as exc:
            logger.exception("Dispatch crashed for %s", block.file_path)
            outcome = DispatchOutcome.failure("connect", detail=str(exc))
        finally:
            self.state.in_flight.discard(fp)
        self._on_outcome(fp, outcome)

    def _on_outcome(self, fp: int, outcome: DispatchOutcome) -> None:
        if outcome.ok:
            self.state.dedup_store.record(fp)
            self.reporter.report("Synced", "ok")
            asyncio.get_running_loop().call_later(
                self.synced_revert_ms / 1000, self._revert_synced
            )
        elif outcome.reason == "backend":
            self.reporter.report("Err: Backend", "error")
        else:
            self.reporter.report("Err: Connect", "error")

    def _revert_synced(self) -> None:
        # A later send may already have replaced "Synced"; leave that alone.
        if self.reporter.current.label == "Synced":
            self.reporter.report("Idle", "neutral")

    async def drain(self) -> None:
        """Wait for every dispatch scheduled so far to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    async def run(self) -> None:
        """Tick every ``scan_interval_ms`` until :meth:`stop` is called."""
        self._stop.clear()
        logger.info("Scan loop started (every %d ms)", self.scan_interval_ms)
        while not self._stop.is_set():
            try:
                await self.tick()
            except Exception:
                logger.exception("Scan tick failed")
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self.scan_interval_ms / 1000)
            except asyncio.TimeoutError:
                pass
        logger.info("Scan loop stopped")

    def stop(self) -> None:
        self._stop.set()

    # ------------------------------------------------------------------
    # Widget controls
    # ------------------------------------------------------------------

    async def toggle(self) -> bool:
        """Flip between paused and scanning; returns the new ``paused`` value.

        Resuming scans immediately instead of waiting for the next tick.
        Pausing does not cancel dispatches that are already in flight.
        """
        self.state.paused = not self.state.paused
        if self.state.paused:
            self.reporter.force("Paused", "muted")
            logger.info("Scanner paused")
        else:
            self.reporter.force("Idle", "neutral")
            logger.info("Scanner resumed")
            try:
                await self.tick()
            except Exception:
                logger.exception("Scan tick failed")
        return self.state.paused

    def move(self) -> int:
        self.state.corner_index = (self.state.corner_index + 1) % len(CORNERS)
        return self.state.corner_index

    def end_session(self) -> None:
        """Forget every delivered fingerprint."""
        self.state.dedup_store.clear()
        logger.info("Session ended; dedup store cleared")

    async def aclose(self) -> None:
        self.stop()
        await self.drain()
        await self.dispatcher.aclose()
        close = getattr(self.source, "close", None)
        if close is not None:
            await close()

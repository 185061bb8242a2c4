"""
Cumulative scanning on top of the stateless engine.

``ScanSession`` remembers words across scans so a word is only counted
once. ``LiveScanner`` polls a symbol source on a worker thread at a fixed
interval, skipping a tick while the previous one is still running.
"""

import logging
import threading
from typing import Callable, Iterable, List, Optional, Set

from .engine import ScanEngine, ScanResult
from .symbols import ScoredWord, ScoreReport, Symbol, WordCandidate

logger = logging.getLogger(__name__)

SymbolSource = Callable[[], Optional[Iterable[Symbol]]]


class ScanSession:
    def __init__(self) -> None:
        self.seen: Set[str] = set()
        self.words: List[ScoredWord] = []
        self.total = 0
        # Candidate texts that failed the dictionary, in first-seen order
        self.rejected: List[str] = []
        self.last_rejected: List[str] = []
        self._lock = threading.Lock()

    def add(self, report: ScoreReport, candidates: Iterable[WordCandidate] = ()) -> List[ScoredWord]:
        """Record a scan's words; return only those not seen before.

        Candidates that are not in the report are remembered as rejected
        reads; the ones new to this session end up in ``last_rejected``.
        """
        fresh: List[ScoredWord] = []
        valid = {w.text.upper() for w in report.words}
        with self._lock:
            self.last_rejected = []
            for cand in candidates:
                key = cand.text.upper()
                if key in valid or key in self.seen:
                    continue
                self.seen.add(key)
                self.rejected.append(key)
                self.last_rejected.append(key)
            for word in report.words:
                key = word.text.upper()
                if key in self.seen:
                    continue
                self.seen.add(key)
                self.words.append(word)
                self.total += word.points
                fresh.append(word)
        if fresh:
            logger.info(f"Session: +{', '.join(w.text for w in fresh)} (total {self.total})")
        return fresh

    def reset(self) -> None:
        with self._lock:
            self.seen.clear()
            self.words.clear()
            self.rejected.clear()
            self.last_rejected = []
            self.total = 0


class LiveScanner:
    """
    Periodically scan symbols pulled from ``source``.

    Args:
        engine: Engine used for every tick
        source: Callable returning the current frame's symbols, or None when
            no frame is available
        interval: Seconds between ticks
        session: Session receiving each scan's words
        on_result: Called with the ScanResult and the newly seen words
    """

    def __init__(
        self,
        engine: ScanEngine,
        source: SymbolSource,
        interval: float = 1.0,
        session: Optional[ScanSession] = None,
        on_result: Optional[Callable[[ScanResult, List[ScoredWord]], None]] = None,
    ):
        self.engine = engine
        self.source = source
        self.interval = interval
        self.session = session or ScanSession()
        self.on_result = on_result
        self.skipped = 0
        self._busy = threading.Lock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def tick(self) -> Optional[ScanResult]:
        """Run one scan, or return None if a scan is already in flight."""
        if not self._busy.acquire(blocking=False):
            self.skipped += 1
            logger.debug("Live scan: previous tick still running, skipping")
            return None
        try:
            symbols = self.source()
            if symbols is None:
                return None
            result = self.engine.scan(symbols)
            fresh = self.session.add(result.report, result.candidates)
            if self.on_result is not None:
                self.on_result(result, fresh)
            return result
        finally:
            self._busy.release()

    def _run(self) -> None:
        logger.info("Live scanner started")
        while not self._stop.is_set():
            try:
                self.tick()
            except Exception:
                logger.exception("Error in live scan tick")
            self._stop.wait(self.interval)
        logger.info("Live scanner stopped")

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="tilescan-live", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

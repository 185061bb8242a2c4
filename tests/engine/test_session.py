import os
import sys
import threading

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
SRC = os.path.join(ROOT, "src")
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from tilescan.engine import ScanEngine
from tilescan.session import LiveScanner, ScanSession
from tilescan.symbols import ScoredWord, ScoreReport


def test_session_counts_each_word_once():
    session = ScanSession()
    fresh = session.add(ScoreReport([ScoredWord("CAT", 5)], 5))
    assert [w.text for w in fresh] == ["CAT"]
    fresh = session.add(ScoreReport([ScoredWord("ART", 3), ScoredWord("CAT", 5)], 8))
    assert [w.text for w in fresh] == ["ART"]
    assert session.total == 8
    assert [w.text for w in session.words] == ["CAT", "ART"]
    session.reset()
    assert session.total == 0 and not session.seen


def test_tick_scans_and_reports(small_dictionary, layout_symbols):
    seen = []
    scanner = LiveScanner(
        ScanEngine(small_dictionary),
        source=lambda: layout_symbols("CAT"),
        on_result=lambda result, fresh: seen.append((result.total, [w.text for w in fresh])),
    )
    assert scanner.tick().words == ["CAT"]
    scanner.tick()
    assert seen == [(5, ["CAT"]), (5, [])]
    assert scanner.session.total == 5


def test_tick_without_frame(small_dictionary):
    scanner = LiveScanner(ScanEngine(small_dictionary), source=lambda: None)
    assert scanner.tick() is None
    assert scanner.skipped == 0


def test_tick_is_skipped_while_previous_is_in_flight(small_dictionary, layout_symbols):
    scanner = LiveScanner(ScanEngine(small_dictionary), source=lambda: layout_symbols("CAT"))
    scanner._busy.acquire()
    try:
        assert scanner.tick() is None
    finally:
        scanner._busy.release()
    assert scanner.skipped == 1
    assert scanner.session.total == 0


def test_overlapping_ticks_do_not_queue(small_dictionary, layout_symbols):
    entered = threading.Event()
    release = threading.Event()
    calls = []

    def slow_source():
        calls.append(1)
        entered.set()
        release.wait(5)
        return layout_symbols("CAT")

    scanner = LiveScanner(ScanEngine(small_dictionary), source=slow_source)
    worker = threading.Thread(target=scanner.tick)
    worker.start()
    assert entered.wait(5)
    assert scanner.tick() is None
    release.set()
    worker.join(5)
    assert len(calls) == 1
    assert scanner.session.total == 5


def test_background_loop(small_dictionary, layout_symbols):
    done = threading.Event()
    scanner = LiveScanner(
        ScanEngine(small_dictionary),
        source=lambda: layout_symbols("CAT"),
        interval=0.01,
        on_result=lambda result, fresh: done.set(),
    )
    scanner.start()
    try:
        assert done.wait(5)
        assert scanner.is_running()
    finally:
        scanner.stop(timeout=5)
    assert not scanner.is_running()
    assert scanner.session.total == 5


def test_rejected_reads_are_remembered(small_dictionary, layout_symbols):
    engine = ScanEngine(small_dictionary)
    session = ScanSession()
    result = engine.scan(layout_symbols("XQ"))
    assert session.add(result.report, result.candidates) == []
    assert session.last_rejected == ["XQ"]
    session.add(result.report, result.candidates)
    assert session.last_rejected == []
    assert session.rejected == ["XQ"]
    assert session.total == 0


def test_live_scanner_records_rejected_reads(small_dictionary, layout_symbols):
    scanner = LiveScanner(ScanEngine(small_dictionary), source=lambda: layout_symbols("XQ"))
    scanner.tick()
    assert scanner.session.rejected == ["XQ"]

"""
Scan pipeline: symbol filter -> grid mapper -> word extractor -> scorer.

``ScanEngine`` owns no mutable state; the dictionary it is given is only
read, so one engine can serve concurrent scans on independent inputs.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set

from .config import EngineConfig
from .grid import Grid, map_glyphs_to_grid
from .scoring import score_words
from .symbol_filter import filter_symbols
from .symbols import ScoreReport, Symbol, WordCandidate
from .word_extractor import extract_words

logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    grid: Grid
    candidates: List[WordCandidate] = field(default_factory=list)
    report: ScoreReport = field(default_factory=ScoreReport)
    median_height: float = 0.0

    @property
    def words(self) -> List[str]:
        return [w.text for w in self.report.words]

    @property
    def total(self) -> int:
        return self.report.total

    def accepted_candidates(self) -> List[WordCandidate]:
        """Candidates that survived dictionary validation, for highlighting."""
        valid = set(self.words)
        return [c for c in self.candidates if c.text in valid]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "grid": self.grid.to_string().splitlines(),
            "letters": [
                {"col": c, "row": r, "letter": g.letter, "bbox": g.bbox.to_dict()}
                for (c, r), g in sorted(self.grid.letter_map.items(), key=lambda kv: (kv[0][1], kv[0][0]))
            ],
            "candidates": [c.to_dict() for c in self.candidates],
            **self.report.to_dict(),
        }


class ScanEngine:
    def __init__(self, dictionary: Set[str], config: Optional[EngineConfig] = None):
        self.dictionary = dictionary
        self.config = config or EngineConfig()

    def scan(self, symbols: Iterable[Symbol], config: Optional[EngineConfig] = None) -> ScanResult:
        cfg = config or self.config
        filtered = filter_symbols(
            symbols,
            confidence_threshold=cfg.confidence_threshold,
            size_deviation=cfg.size_deviation,
        )
        grid = map_glyphs_to_grid(
            filtered.glyphs,
            filtered.median_height,
            lane_tolerance=cfg.lane_tolerance,
            snap=cfg.snap,
        )
        result = self.scan_grid(grid, cfg)
        result.median_height = filtered.median_height
        return result

    def scan_grid(self, grid: Grid, config: Optional[EngineConfig] = None) -> ScanResult:
        cfg = config or self.config
        candidates = extract_words(grid)
        report = score_words(candidates, self.dictionary, cfg.score_table)
        logger.info(
            f"Scan: {len(grid)} squares, {len(candidates)} candidate(s), "
            f"{len(report.words)} valid word(s), total {report.total}"
        )
        return ScanResult(grid=grid, candidates=candidates, report=report)

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

import numpy as np  # type: ignore

from .symbols import FilteredGlyph, Symbol

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE_THRESHOLD = 65.0
DEFAULT_SIZE_DEVIATION = 0.5


@dataclass
class FilterResult:
    glyphs: List[FilteredGlyph] = field(default_factory=list)
    median_height: float = 0.0

    def __len__(self) -> int:
        return len(self.glyphs)


def _normalize_letter(text: str) -> Optional[str]:
    t = (text or "").strip().upper()
    if len(t) == 1 and 'A' <= t <= 'Z':
        return t
    return None


def filter_symbols(
    symbols: Iterable[Symbol],
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
    size_deviation: float = DEFAULT_SIZE_DEVIATION,
) -> FilterResult:
    """Drop non-letters, low-confidence reads and outlier-sized glyphs.

    Symbols without a confidence (recognizers that report none) pass the
    confidence test. Returns an empty result when fewer than two glyphs
    survive either stage.
    """
    glyphs: List[FilteredGlyph] = []
    seen = 0
    for sym in symbols:
        seen += 1
        letter = _normalize_letter(sym.text)
        if letter is None:
            continue
        if sym.confidence is not None and sym.confidence < confidence_threshold:
            continue
        glyphs.append(FilteredGlyph(symbol=sym, letter=letter))

    if len(glyphs) < 2:
        logger.debug(f"Symbol filter: {seen} in, {len(glyphs)} letters, too few for a grid")
        return FilterResult()

    median = float(np.median([g.height for g in glyphs]))
    lo = median * (1.0 - size_deviation)
    hi = median * (1.0 + size_deviation)
    kept = [g for g in glyphs if lo <= g.height <= hi]

    logger.debug(
        f"Symbol filter: {seen} in, {len(glyphs)} letters, {len(kept)} within size band "
        f"[{lo:.1f}, {hi:.1f}] (median height {median:.1f})"
    )
    if len(kept) < 2:
        return FilterResult()
    return FilterResult(glyphs=kept, median_height=median)

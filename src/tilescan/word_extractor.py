import logging
from typing import Dict, List

from .grid import Grid
from .symbols import Axis, GridCoordinate, WordCandidate

logger = logging.getLogger(__name__)

MIN_WORD_LENGTH = 2


def _has_cross_neighbor(grid: Grid, path: List[GridCoordinate], axis: Axis) -> bool:
    # Perpendicular neighbours: above/below for a horizontal run, left/right for a vertical one
    pc, pr = (0, 1) if axis is Axis.HORIZONTAL else (1, 0)
    for c, r in path:
        if (c - pc, r - pr) in grid.cells or (c + pc, r + pr) in grid.cells:
            return True
    return False


def _scan_axis(grid: Grid, axis: Axis, require_connection: bool) -> List[WordCandidate]:
    bounds = grid.bounds()
    if bounds is None:
        return []
    min_c, max_c, min_r, max_r = bounds
    if axis is Axis.HORIZONTAL:
        lines = [[(c, r) for c in range(min_c, max_c + 2)] for r in range(min_r, max_r + 1)]
    else:
        lines = [[(c, r) for r in range(min_r, max_r + 2)] for c in range(min_c, max_c + 1)]

    found: List[WordCandidate] = []
    for line in lines:
        # The last square of each line lies past the occupied rectangle, so every run terminates
        run: List[GridCoordinate] = []
        for coord in line:
            if coord in grid.cells:
                run.append(coord)
                continue
            if len(run) >= MIN_WORD_LENGTH and (
                not require_connection or _has_cross_neighbor(grid, run, axis)
            ):
                text = "".join(grid.cells[p] for p in run)
                found.append(WordCandidate(text=text, path=tuple(run), axis=axis))
            run = []
    return found


def _scan(grid: Grid, require_connection: bool) -> List[WordCandidate]:
    return _scan_axis(grid, Axis.HORIZONTAL, require_connection) + _scan_axis(
        grid, Axis.VERTICAL, require_connection
    )


def dedupe_candidates(candidates: List[WordCandidate]) -> List[WordCandidate]:
    by_text: Dict[str, WordCandidate] = {}
    for cand in candidates:
        by_text.setdefault(cand.text, cand)
    return list(by_text.values())


def extract_words(grid: Grid) -> List[WordCandidate]:
    """Recover the words laid out on a grid.

    Only runs of two or more letters that touch a perpendicular neighbour
    are accepted. When no run is connected the grid is treated as a
    first move: a single distinct unconnected run is accepted, anything
    else is ambiguous and yields nothing.
    """
    if len(grid) < MIN_WORD_LENGTH:
        return []

    connected = dedupe_candidates(_scan(grid, require_connection=True))
    if connected:
        logger.debug(f"Word extractor: {len(connected)} connected candidate(s)")
        return connected

    loose = dedupe_candidates(_scan(grid, require_connection=False))
    if len(loose) == 1:
        logger.debug(f"Word extractor: accepted lone run {loose[0].text!r}")
        return loose
    if loose:
        logger.debug(
            f"Word extractor: {len(loose)} unconnected runs "
            f"({', '.join(c.text for c in loose)}), ambiguous, rejecting all"
        )
    return []


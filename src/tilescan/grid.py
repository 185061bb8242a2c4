import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np  # type: ignore

from .symbols import FilteredGlyph, GridCoordinate

logger = logging.getLogger(__name__)

# Lane tolerance as a fraction of the median glyph height
DEFAULT_LANE_TOLERANCE = 0.5

SNAP_LANES = "lanes"
SNAP_TILE = "tile"
SNAP_STRATEGIES = (SNAP_LANES, SNAP_TILE)


@dataclass
class Grid:
    # cells[(col, row)] is an uppercase letter; missing keys are empty squares
    cells: Dict[GridCoordinate, str] = field(default_factory=dict)
    # letter_map[(col, row)] is the glyph that produced the letter (visualization only)
    letter_map: Dict[GridCoordinate, FilteredGlyph] = field(default_factory=dict)

    @staticmethod
    def from_string(multiline: str) -> "Grid":
        # Equal-length lines; '.' empty, 'A-Z' letter. Line i is row i, char j is col j.
        rows = [line.strip() for line in multiline.strip().splitlines() if line.strip()]
        if rows and any(len(r) != len(rows[0]) for r in rows):
            raise ValueError("Grid string rows must all have the same length")
        grid = Grid()
        for r, line in enumerate(rows):
            for c, ch in enumerate(line):
                if ch == '.':
                    continue
                if not ('A' <= ch <= 'Z'):
                    raise ValueError(f"Invalid grid character: {ch}")
                grid.cells[(c, r)] = ch
        return grid

    def place(self, coord: GridCoordinate, letter: str, glyph: Optional[FilteredGlyph] = None) -> bool:
        """Store a letter unless the square is taken (first writer wins)."""
        if coord in self.cells:
            return False
        self.cells[coord] = letter
        if glyph is not None:
            self.letter_map[coord] = glyph
        return True

    def get(self, coord: GridCoordinate) -> Optional[str]:
        return self.cells.get(coord)

    def __len__(self) -> int:
        return len(self.cells)

    def is_empty(self) -> bool:
        return not self.cells

    def bounds(self) -> Optional[Tuple[int, int, int, int]]:
        """(min_col, max_col, min_row, max_row) of the occupied squares."""
        if not self.cells:
            return None
        cols = [c for c, _ in self.cells]
        rows = [r for _, r in self.cells]
        return min(cols), max(cols), min(rows), max(rows)

    def to_string(self) -> str:
        b = self.bounds()
        if b is None:
            return ""
        min_c, max_c, min_r, max_r = b
        lines: List[str] = []
        for r in range(min_r, max_r + 1):
            lines.append("".join(self.cells.get((c, r), '.') for c in range(min_c, max_c + 1)))
        return "\n".join(lines)


def cluster_lanes(values: Iterable[float], tolerance: float) -> List[float]:
    """Group 1-D positions into lanes; return lane centers in ascending order.

    A value joins the open lane when it lies within ``tolerance`` of the
    lane's first member (not its running mean), so a slow monotone drift
    cannot stretch one lane across neighbouring rows.
    """
    ordered = sorted(values)
    if not ordered:
        return []
    lanes: List[List[float]] = [[ordered[0]]]
    for v in ordered[1:]:
        if v - lanes[-1][0] <= tolerance:
            lanes[-1].append(v)
        else:
            lanes.append([v])
    return [float(np.mean(lane)) for lane in lanes]


def nearest_lane(value: float, lanes: Sequence[float]) -> int:
    # argmin returns the first minimum, so ties resolve to the lower index
    return int(np.argmin(np.abs(np.asarray(lanes, dtype=float) - value)))


def _snap_by_tile_size(glyphs: Sequence[FilteredGlyph]) -> List[GridCoordinate]:
    if not glyphs:
        return []
    tile_w = float(np.median([g.width for g in glyphs]))
    tile_h = float(np.median([g.height for g in glyphs]))
    coords: List[GridCoordinate] = []
    for g in glyphs:
        col = int(round(g.bbox.x0 / tile_w)) if tile_w > 0 else 0
        row = int(round(g.bbox.y0 / tile_h)) if tile_h > 0 else 0
        coords.append((col, row))
    return coords


def _snap_by_lanes(
    glyphs: Sequence[FilteredGlyph], tolerance: float
) -> Optional[List[GridCoordinate]]:
    x_lanes = cluster_lanes([g.cx for g in glyphs], tolerance)
    y_lanes = cluster_lanes([g.cy for g in glyphs], tolerance)
    if len(glyphs) > 1 and len(x_lanes) == 1 and len(y_lanes) == 1:
        # Everything collapsed into a single square; not a usable layout
        return None
    logger.debug(f"Grid mapper: {len(x_lanes)} column lanes, {len(y_lanes)} row lanes")
    return [(nearest_lane(g.cx, x_lanes), nearest_lane(g.cy, y_lanes)) for g in glyphs]


def map_glyphs_to_grid(
    glyphs: Sequence[FilteredGlyph],
    median_height: float,
    lane_tolerance: float = DEFAULT_LANE_TOLERANCE,
    snap: str = SNAP_LANES,
) -> Grid:
    """Quantize glyph centers into integer (col, row) squares.

    ``snap="lanes"`` clusters observed centers into row/column lanes;
    ``snap="tile"`` divides pixel positions by the median tile size. The
    tile strategy is also used whenever lane clustering has no usable
    tolerance or collapses every glyph into one square.
    """
    if snap not in SNAP_STRATEGIES:
        raise ValueError(f"Unknown snap strategy: {snap}")
    grid = Grid()
    if not glyphs:
        return grid

    tolerance = median_height * lane_tolerance
    coords: Optional[List[GridCoordinate]] = None
    if snap == SNAP_LANES and tolerance > 0:
        coords = _snap_by_lanes(glyphs, tolerance)
    if coords is None:
        logger.debug("Grid mapper: using median tile-size snapping")
        coords = _snap_by_tile_size(glyphs)

    collisions = 0
    for glyph, coord in zip(glyphs, coords):
        if not grid.place(coord, glyph.letter, glyph):
            collisions += 1
    if collisions:
        logger.debug(f"Grid mapper: {collisions} glyph(s) dropped on occupied squares")
    return grid

"""
Shared builders for tilescan tests.

Grids are described with multi-line strings: '.' empty, 'A-Z' letter.
"""

import os
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC = os.path.join(ROOT, "src")
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from tilescan.symbols import BBox, Symbol

# Tile pitch and glyph size in pixels for synthetic layouts
PITCH = 40
GLYPH = 30


def symbols_from_layout(layout: str, confidence: float = 90.0, scale: float = 1.0, origin=(12, 8)):
    """One Symbol per letter of ``layout``, placed on a regular tile pitch."""
    rows = [line.strip() for line in layout.strip().splitlines() if line.strip()]
    ox, oy = origin
    symbols = []
    for r, line in enumerate(rows):
        for c, ch in enumerate(line):
            if ch == '.':
                continue
            x0 = ox + c * PITCH
            y0 = oy + r * PITCH
            box = BBox(x0, y0, x0 + GLYPH, y0 + GLYPH)
            symbols.append(Symbol(ch, box.scaled(scale), confidence))
    return symbols


@pytest.fixture
def layout_symbols():
    return symbols_from_layout


@pytest.fixture
def small_dictionary():
    return {"cat", "art", "at", "dog", "tar", "rat", "quiz"}

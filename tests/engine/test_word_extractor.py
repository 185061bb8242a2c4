import os
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
SRC = os.path.join(ROOT, "src")
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from tilescan.grid import Grid
from tilescan.symbols import Axis
from tilescan.word_extractor import extract_words


def _texts(candidates):
    return sorted(c.text for c in candidates)


def test_lone_word_is_accepted_as_first_move():
    words = extract_words(Grid.from_string("CAT"))
    assert len(words) == 1
    cat = words[0]
    assert cat.text == "CAT"
    assert cat.axis is Axis.HORIZONTAL
    assert cat.path == ((0, 0), (1, 0), (2, 0))


def test_lone_vertical_word():
    words = extract_words(Grid.from_string("\n".join(["C", "A", "T"])))
    assert [(w.text, w.axis) for w in words] == [("CAT", Axis.VERTICAL)]


def test_crossing_words_are_both_found():
    grid = Grid.from_string("\n".join([
        "CAT",
        ".R.",
        ".T.",
    ]))
    words = extract_words(grid)
    assert _texts(words) == ["ART", "CAT"]
    art = next(w for w in words if w.text == "ART")
    assert art.axis is Axis.VERTICAL
    assert art.path == ((1, 0), (1, 1), (1, 2))


def test_unconnected_runs_are_dropped_once_a_crossing_exists():
    grid = Grid.from_string("\n".join([
        "CAT....",
        ".R.....",
        ".T..DOG",
    ]))
    # DOG shares row 2 with the T of ART but no perpendicular neighbour
    assert _texts(extract_words(grid)) == ["ART", "CAT"]


def test_several_unconnected_runs_are_ambiguous():
    grid = Grid.from_string("\n".join([
        "CAT...",
        "......",
        "...DOG",
    ]))
    assert extract_words(grid) == []


def test_identical_unconnected_runs_count_once():
    grid = Grid.from_string("\n".join([
        "AT.",
        "...",
        "AT.",
    ]))
    words = extract_words(grid)
    assert [(w.text, w.path) for w in words] == [("AT", ((0, 0), (1, 0)))]


def test_duplicate_text_keeps_first_path():
    grid = Grid.from_string("\n".join([
        "AT",
        "T.",
    ]))
    words = extract_words(grid)
    assert len(words) == 1
    assert words[0].axis is Axis.HORIZONTAL


def test_word_touching_the_far_edge_is_terminated():
    grid = Grid.from_string("\n".join([
        "..C",
        "TAR",
    ]))
    words = extract_words(grid)
    assert _texts(words) == ["CR", "TAR"]


def test_single_letters_are_never_words():
    grid = Grid.from_string("\n".join([
        "A.B",
        "...",
        "C.D",
    ]))
    assert extract_words(grid) == []


def test_too_small_grid():
    assert extract_words(Grid()) == []
    assert extract_words(Grid.from_string("Q")) == []


def test_grid_away_from_origin():
    grid = Grid()
    grid.place((5, 7), "A")
    grid.place((6, 7), "T")
    words = extract_words(grid)
    assert [(w.text, w.path) for w in words] == [("AT", ((5, 7), (6, 7)))]

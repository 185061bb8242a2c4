from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

# (col, row); need not start at zero or be contiguous
GridCoordinate = Tuple[int, int]


@dataclass(frozen=True)
class BBox:
    x0: float
    y0: float
    x1: float
    y1: float

    @property
    def width(self) -> float:
        return self.x1 - self.x0

    @property
    def height(self) -> float:
        return self.y1 - self.y0

    @property
    def center_x(self) -> float:
        return (self.x0 + self.x1) / 2.0

    @property
    def center_y(self) -> float:
        return (self.y0 + self.y1) / 2.0

    def scaled(self, k: float) -> "BBox":
        return BBox(self.x0 * k, self.y0 * k, self.x1 * k, self.y1 * k)

    def to_dict(self) -> Dict[str, float]:
        return {"x0": self.x0, "y0": self.y0, "x1": self.x1, "y1": self.y1}


@dataclass(frozen=True)
class Symbol:
    """One recognized character as reported by the recognizer.

    ``confidence`` is 0-100, or None when the recognizer reports none.
    """

    text: str
    bbox: BBox
    confidence: Optional[float] = None

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Symbol":
        # Accepts {"text", "bbox": {x0,y0,x1,y1}, "confidence"}
        box = data["bbox"]
        conf = data.get("confidence")
        return Symbol(
            text=str(data["text"]),
            bbox=BBox(float(box["x0"]), float(box["y0"]), float(box["x1"]), float(box["y1"])),
            confidence=None if conf is None else float(conf),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "bbox": self.bbox.to_dict(), "confidence": self.confidence}


@dataclass(frozen=True)
class FilteredGlyph:
    symbol: Symbol
    letter: str

    @property
    def cx(self) -> float:
        return self.symbol.bbox.center_x

    @property
    def cy(self) -> float:
        return self.symbol.bbox.center_y

    @property
    def width(self) -> float:
        return self.symbol.bbox.width

    @property
    def height(self) -> float:
        return self.symbol.bbox.height

    @property
    def bbox(self) -> BBox:
        return self.symbol.bbox


class Axis(str, Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


@dataclass(frozen=True)
class WordCandidate:
    text: str
    path: Tuple[GridCoordinate, ...]
    axis: Axis

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "path": [list(p) for p in self.path], "axis": self.axis.value}


@dataclass(frozen=True)
class ScoredWord:
    text: str
    points: int


@dataclass
class ScoreReport:
    words: List[ScoredWord] = field(default_factory=list)
    total: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "words": [{"text": w.text, "points": w.points} for w in self.words],
            "total": self.total,
        }

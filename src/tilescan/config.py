"""
Engine configuration.

Settings can be kept in a JSON file; missing keys fall back to
``DEFAULT_SETTINGS``.
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .grid import DEFAULT_LANE_TOLERANCE, SNAP_LANES, SNAP_STRATEGIES
from .scoring import LANGUAGES, scores_for_lang
from .symbol_filter import DEFAULT_CONFIDENCE_THRESHOLD, DEFAULT_SIZE_DEVIATION

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS: Dict[str, Any] = {
    "confidence_threshold": DEFAULT_CONFIDENCE_THRESHOLD,
    "size_deviation": DEFAULT_SIZE_DEVIATION,
    "lane_tolerance": DEFAULT_LANE_TOLERANCE,
    "snap": SNAP_LANES,
    "lang": "EN",
    "letter_scores": None,
}


def _as_float(name: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a number")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number, got {value!r}") from None


def _as_str(name: str, value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string, got {value!r}")
    return value


@dataclass
class EngineConfig:
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD
    size_deviation: float = DEFAULT_SIZE_DEVIATION
    lane_tolerance: float = DEFAULT_LANE_TOLERANCE
    snap: str = SNAP_LANES
    lang: str = "EN"
    # Explicit per-letter table; overrides ``lang`` when set
    letter_scores: Optional[Dict[str, int]] = field(default=None)

    def __post_init__(self) -> None:
        self.confidence_threshold = _as_float("confidence_threshold", self.confidence_threshold)
        self.size_deviation = _as_float("size_deviation", self.size_deviation)
        self.lane_tolerance = _as_float("lane_tolerance", self.lane_tolerance)
        self.snap = _as_str("snap", self.snap)
        self.lang = _as_str("lang", self.lang)
        if not (0.0 <= self.confidence_threshold <= 100.0):
            raise ValueError("confidence_threshold must be within 0-100")
        if self.size_deviation < 0:
            raise ValueError("size_deviation must be non-negative")
        if self.lane_tolerance < 0:
            raise ValueError("lane_tolerance must be non-negative")
        if self.snap not in SNAP_STRATEGIES:
            raise ValueError(f"snap must be one of {', '.join(SNAP_STRATEGIES)}")
        self.lang = self.lang.upper()
        if self.lang not in LANGUAGES:
            raise ValueError(f"lang must be one of {', '.join(LANGUAGES)}")
        if self.letter_scores is not None:
            try:
                self.letter_scores = {str(k).upper(): int(v) for k, v in self.letter_scores.items()}
            except (AttributeError, TypeError, ValueError) as e:
                raise ValueError(f"letter_scores must map letters to integers: {e}") from e

    @property
    def score_table(self) -> Dict[str, int]:
        if self.letter_scores is not None:
            return self.letter_scores
        return scores_for_lang(self.lang)

    def with_overrides(self, **overrides: Any) -> "EngineConfig":
        data = asdict(self)
        data.update({k: v for k, v in overrides.items() if v is not None})
        return EngineConfig(**data)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config(path: Union[str, Path, None]) -> EngineConfig:
    """Load an EngineConfig from JSON, falling back to defaults.

    Unknown keys are ignored. Out-of-range values raise ValueError.
    """
    settings = DEFAULT_SETTINGS.copy()
    if path is None:
        return EngineConfig(**settings)
    path = Path(path)
    if not path.exists():
        logger.debug(f"Config file {path} not found, using defaults")
        return EngineConfig(**settings)
    try:
        with open(path, "r", encoding="utf-8") as f:
            loaded = json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        logger.warning(f"Failed to load config {path}: {e}, using defaults")
        return EngineConfig(**settings)
    if not isinstance(loaded, dict):
        logger.warning(f"Config {path} is not a JSON object, using defaults")
        return EngineConfig(**settings)
    settings.update({k: v for k, v in loaded.items() if k in DEFAULT_SETTINGS})
    return EngineConfig(**settings)


def save_config(config: EngineConfig, path: Union[str, Path]) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config.to_dict(), f, indent=2)
    logger.debug(f"Config saved to {path}")

import logging
from typing import Any, Dict, List, Optional, Tuple

import cv2  # type: ignore
import numpy as np  # type: ignore

from .symbols import BBox, Symbol

try:
    import pytesseract  # type: ignore
except Exception:  # pragma: no cover
    pytesseract = None  # type: ignore

logger = logging.getLogger(__name__)

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
# 11: sparse text, finds as many isolated glyphs as possible in no particular order
DEFAULT_PSM = 11
RECOGNIZE_MODES = ("data", "boxes")

# (x, y, width, height) of the guide region, in source image pixels
CropRect = Tuple[int, int, int, int]


def _tesseract_config(psm: int) -> str:
    return f"--psm {psm} --oem 3 -c tessedit_char_whitelist={ALPHABET}"


def _to_float(v: Any, default: float = -1.0) -> float:
    try:
        return float(v)
    except (TypeError, ValueError):
        return default


def symbols_from_tesseract_data(data: Dict[str, List[Any]], split_words: bool = True) -> List[Symbol]:
    """Convert ``image_to_data(..., output_type=DICT)`` into Symbols.

    Entries with a negative confidence (layout rows, not text) and empty
    text are skipped. When Tesseract glues neighbouring tiles into one
    multi-letter word, ``split_words`` cuts its box into equal-width
    slices, one per letter, all sharing the word's confidence.
    """
    symbols: List[Symbol] = []
    texts = data.get("text", [])
    for i, raw in enumerate(texts):
        text = (raw or "").strip()
        conf = _to_float(data["conf"][i])
        if not text or conf < 0:
            continue
        left = _to_float(data["left"][i], 0.0)
        top = _to_float(data["top"][i], 0.0)
        width = _to_float(data["width"][i], 0.0)
        height = _to_float(data["height"][i], 0.0)
        if len(text) == 1 or not split_words:
            symbols.append(Symbol(text, BBox(left, top, left + width, top + height), conf))
            continue
        step = width / len(text)
        for j, ch in enumerate(text):
            x0 = left + j * step
            symbols.append(Symbol(ch, BBox(x0, top, x0 + step, top + height), conf))
    return symbols


def symbols_from_tesseract_boxes(boxes: str, image_height: int) -> List[Symbol]:
    """Convert ``image_to_boxes`` output into confidence-less Symbols.

    Box lines read ``<char> <left> <bottom> <right> <top> <page>`` with the
    origin at the bottom-left corner of the image.
    """
    symbols: List[Symbol] = []
    for line in boxes.splitlines():
        parts = line.split()
        if len(parts) < 5:
            continue
        ch = parts[0]
        try:
            left, bottom, right, top = (float(p) for p in parts[1:5])
        except ValueError:
            continue
        symbols.append(Symbol(ch, BBox(left, image_height - top, right, image_height - bottom), None))
    return symbols


def crop_to_guide(img: np.ndarray, crop: Optional[CropRect]) -> np.ndarray:
    if crop is None:
        return img
    h, w = img.shape[:2]
    x, y, cw, ch = crop
    x0 = max(0, min(w, int(x)))
    y0 = max(0, min(h, int(y)))
    x1 = max(x0, min(w, int(x + cw)))
    y1 = max(y0, min(h, int(y + ch)))
    return img[y0:y1, x0:x1]


def recognize_symbols(
    img: np.ndarray,
    crop: Optional[CropRect] = None,
    psm: int = DEFAULT_PSM,
    mode: str = "data",
) -> List[Symbol]:
    """Run Tesseract over an image and return the glyphs it saw.

    Coordinates are relative to the cropped region. ``mode="boxes"`` uses
    per-character boxes, which carry no confidence.
    """
    if pytesseract is None:
        raise RuntimeError("pytesseract is not installed")
    if mode not in RECOGNIZE_MODES:
        raise ValueError(f"mode must be one of {', '.join(RECOGNIZE_MODES)}")
    region = crop_to_guide(img, crop)
    if region.size == 0:
        return []
    gray = region if region.ndim == 2 else cv2.cvtColor(region, cv2.COLOR_BGR2GRAY)
    cfg = _tesseract_config(psm)
    if mode == "boxes":
        boxes = pytesseract.image_to_boxes(gray, config=cfg)
        symbols = symbols_from_tesseract_boxes(boxes, gray.shape[0])
    else:
        data = pytesseract.image_to_data(gray, config=cfg, output_type=pytesseract.Output.DICT)
        symbols = symbols_from_tesseract_data(data)
    logger.debug(f"Recognizer ({mode}, psm {psm}): {len(symbols)} symbol(s)")
    return symbols


def read_image(path: str) -> np.ndarray:
    img = cv2.imread(path)
    if img is None:
        raise FileNotFoundError(path)
    return img


def decode_image(buf: bytes) -> np.ndarray:
    img = cv2.imdecode(np.frombuffer(buf, dtype=np.uint8), cv2.IMREAD_COLOR)
    if img is None:
        raise ValueError("could not decode image")
    return img


def draw_scan_overlay(img: np.ndarray, result: Any, offset: Tuple[int, int] = (0, 0)) -> np.ndarray:
    """Draw every recognized letter box, and highlight the accepted words.

    ``result`` is a ``ScanResult``; ``offset`` is the crop origin when the
    scan ran on a cropped region of ``img``.
    """
    out = cv2.cvtColor(img, cv2.COLOR_GRAY2BGR) if img.ndim == 2 else img.copy()
    ox, oy = offset
    font = cv2.FONT_HERSHEY_SIMPLEX

    def _rect(bbox: BBox) -> Tuple[Tuple[int, int], Tuple[int, int]]:
        return (int(bbox.x0 + ox), int(bbox.y0 + oy)), (int(bbox.x1 + ox), int(bbox.y1 + oy))

    for glyph in result.grid.letter_map.values():
        p0, p1 = _rect(glyph.bbox)
        cv2.rectangle(out, p0, p1, (0, 255, 0), 1)

    for cand in result.accepted_candidates():
        glyphs = [result.grid.letter_map[p] for p in cand.path if p in result.grid.letter_map]
        if not glyphs:
            continue
        for g in glyphs:
            p0, p1 = _rect(g.bbox)
            cv2.rectangle(out, p0, p1, (0, 165, 255), 2)
        first, _ = _rect(glyphs[0].bbox)
        cv2.putText(out, cand.text, (first[0], max(12, first[1] - 4)), font, 0.5, (0, 165, 255), 1, cv2.LINE_AA)
    return out

import argparse
import json
import logging
from typing import Any, List, Optional

import cv2  # type: ignore

from .config import load_config
from .engine import ScanEngine
from .grid import SNAP_STRATEGIES
from .ocr import DEFAULT_PSM, RECOGNIZE_MODES, draw_scan_overlay, read_image, recognize_symbols
from .scoring import LANGUAGES, load_dictionary
from .symbols import Symbol


def _parse_crop(s: Optional[str]) -> Optional[tuple]:
    if not s:
        return None
    parts = [p.strip() for p in s.split(",")]
    if len(parts) != 4:
        raise ValueError("crop must be 'x,y,width,height'")
    x, y, w, h = (int(float(p)) for p in parts)
    return (x, y, w, h)


def _load_symbols(path: str) -> List[Symbol]:
    with open(path, "r", encoding="utf-8") as f:
        data: Any = json.load(f)
    if isinstance(data, dict):
        data = data.get("symbols", [])
    return [Symbol.from_dict(item) for item in data]


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(description="Letter-tile grid scanner and scorer")
    src = p.add_mutually_exclusive_group(required=True)
    src.add_argument("--image", type=str, help="Path to a photo of the tile grid")
    src.add_argument("--symbols", type=str, help="Path to a JSON list of recognized symbols")
    p.add_argument("--dict", required=True, type=str, dest="dict_path", help="Path to dictionary file (one word per line)")
    p.add_argument("--config", type=str, help="JSON settings file")
    p.add_argument("--conf", type=float, dest="confidence_threshold", help="Minimum symbol confidence (0-100)")
    p.add_argument("--size-deviation", type=float, help="Allowed glyph height deviation from the median (fraction)")
    p.add_argument("--lane-tolerance", type=float, help="Lane width as a fraction of the median glyph height")
    p.add_argument("--snap", choices=list(SNAP_STRATEGIES), help="Grid snapping strategy")
    p.add_argument("--lang", choices=list(LANGUAGES), help="Letter score table")
    p.add_argument("--crop", type=str, help="Guide region 'x,y,width,height' (with --image)")
    p.add_argument("--psm", type=int, default=DEFAULT_PSM, help="Tesseract page segmentation mode")
    p.add_argument("--ocr-mode", default="data", choices=list(RECOGNIZE_MODES), help="Tesseract output used for symbols")
    p.add_argument("--annotate", type=str, help="Write an annotated copy of the image here (with --image)")
    p.add_argument("--json", action="store_true", help="Print the full result as JSON")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = p.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        config = load_config(args.config).with_overrides(
            confidence_threshold=args.confidence_threshold,
            size_deviation=args.size_deviation,
            lane_tolerance=args.lane_tolerance,
            snap=args.snap,
            lang=args.lang,
        )
        crop = _parse_crop(args.crop)
    except ValueError as exc:
        p.error(str(exc))

    try:
        dictionary = load_dictionary(args.dict_path)
    except FileNotFoundError:
        p.error(f"dictionary not found: {args.dict_path}")

    img = None
    if args.image:
        try:
            img = read_image(args.image)
        except FileNotFoundError:
            p.error(f"could not read image: {args.image}")
        symbols = recognize_symbols(img, crop=crop, psm=args.psm, mode=args.ocr_mode)
    else:
        symbols = _load_symbols(args.symbols)

    engine = ScanEngine(dictionary, config)
    result = engine.scan(symbols)

    if img is not None and args.annotate:
        offset = (crop[0], crop[1]) if crop else (0, 0)
        cv2.imwrite(args.annotate, draw_scan_overlay(img, result, offset=offset))

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        if not result.grid.is_empty():
            print("Grid:")
            print(result.grid.to_string())
        if result.report.words:
            for word in result.report.words:
                print(f"{word.text} - Score: {word.points}")
        else:
            print("No valid words found.")
        print(f"Total Score: {result.total}")
    return 0 if result.report.words else 1


if __name__ == "__main__":
    raise SystemExit(main())

import logging
import os
from typing import Any, Dict, Optional, Set

from flask import Flask, jsonify, request

from .config import EngineConfig
from .engine import ScanEngine
from .grid import Grid
from .ocr import DEFAULT_PSM, RECOGNIZE_MODES, decode_image, recognize_symbols
from .scoring import load_dictionary
from .symbols import Symbol

logger = logging.getLogger(__name__)

DEFAULT_DICTIONARY = os.path.abspath(os.path.join(os.path.dirname(__file__), "../../dictionaries/en_small.txt"))

# JSON request keys -> EngineConfig fields
_OVERRIDE_KEYS = {
    "confidenceThreshold": "confidence_threshold",
    "sizeDeviation": "size_deviation",
    "laneTolerance": "lane_tolerance",
    "snap": "snap",
    "lang": "lang",
}


def create_app(
    dictionary_path: Optional[str] = None,
    config: Optional[EngineConfig] = None,
    dictionary: Optional[Set[str]] = None,
) -> Flask:
    app = Flask(__name__)
    if dictionary is None:
        dictionary = load_dictionary(dictionary_path or DEFAULT_DICTIONARY)
    engine = ScanEngine(dictionary, config or EngineConfig())

    def _request_config(data: Dict[str, Any]) -> EngineConfig:
        overrides: Dict[str, Any] = {}
        for key, field in _OVERRIDE_KEYS.items():
            value = data.get(key)
            if value is None or value == "":
                continue
            overrides[field] = value
        return engine.config.with_overrides(**overrides)

    @app.get("/api/health")
    def health():
        return jsonify({"status": "ok", "dictionarySize": len(engine.dictionary)})

    @app.post("/api/scan")
    def scan():
        data = request.get_json(silent=True) or {}
        raw = data.get("symbols")
        if not isinstance(raw, list):
            return jsonify({"error": "symbols must be a list"}), 400
        try:
            cfg = _request_config(data)
            symbols = [Symbol.from_dict(item) for item in raw]
        except (KeyError, TypeError, ValueError) as exc:
            return jsonify({"error": f"invalid request: {exc}"}), 400
        return jsonify(engine.scan(symbols, cfg).to_dict())

    @app.post("/api/scan/grid")
    def scan_grid():
        data = request.get_json(silent=True) or {}
        grid_string = data.get("gridString")
        if not isinstance(grid_string, str):
            return jsonify({"error": "gridString is required"}), 400
        try:
            cfg = _request_config(data)
            grid = Grid.from_string(grid_string)
        except (TypeError, ValueError) as exc:
            return jsonify({"error": f"invalid request: {exc}"}), 400
        return jsonify(engine.scan_grid(grid, cfg).to_dict())

    @app.post("/api/scan/image")
    def scan_image():
        if "image" not in request.files:
            return jsonify({"error": "image file missing"}), 400
        try:
            cfg = _request_config(request.form.to_dict())
            mode = request.form.get("ocrMode") or "data"
            if mode not in RECOGNIZE_MODES:
                raise ValueError(f"ocrMode must be one of {', '.join(RECOGNIZE_MODES)}")
            img = decode_image(request.files["image"].read())
            crop = None
            if request.form.get("crop"):
                crop = tuple(int(float(v)) for v in request.form["crop"].split(","))
                if len(crop) != 4:
                    raise ValueError("crop must be 'x,y,width,height'")
            psm = int(request.form.get("psm", DEFAULT_PSM))
        except (TypeError, ValueError) as exc:
            return jsonify({"error": f"invalid request: {exc}"}), 400
        try:
            symbols = recognize_symbols(img, crop=crop, psm=psm, mode=mode)
        except RuntimeError as exc:
            return jsonify({"error": str(exc)}), 503
        return jsonify(engine.scan(symbols, cfg).to_dict())

    return app


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    app = create_app()
    app.run(host="127.0.0.1", port=8765, debug=True)

import json
from typing import Any, Dict, Optional

WIDTH = 2000
HEIGHT = 2000
MAX_ITERATIONS = 1000
MAX_ATTEMPTS = 400  # anything much below 100 gives a lot of dull images
OUTPUT_DIR = "output"
BAND_HEIGHT = 32

DEFAULTS: Dict[str, Any] = {
    "width": WIDTH,
    "height": HEIGHT,
    "max_iterations": MAX_ITERATIONS,
    "max_attempts": MAX_ATTEMPTS,
    "output_dir": OUTPUT_DIR,
    "band_height": BAND_HEIGHT,
    "workers": None,
    "seed": None,
}

def load_config(config_path: Optional[str]) -> Dict[str, Any]:
    if not config_path:
        return dict(DEFAULTS)

    with open(config_path, "r", encoding="utf-8") as f:
        cfg = json.load(f)
    if not isinstance(cfg, dict):
        raise ValueError("Config JSON must be an object.")
    unknown = sorted(set(cfg) - set(DEFAULTS))
    if unknown:
        raise ValueError(f"Unknown config field(s): {', '.join(unknown)}")
    out = dict(DEFAULTS)
    out.update(cfg)
    return out

def _int(cfg: Dict[str, Any], key: str) -> int:
    value = cfg.get(key)
    if isinstance(value, bool):
        raise ValueError(f"{key} must be an integer.")
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError) as e:
        raise ValueError(f"{key} must be an integer.") from e

def _optional_int(cfg: Dict[str, Any], key: str) -> Optional[int]:
    if cfg.get(key) is None:
        return None
    return _int(cfg, key)

def normalise_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(DEFAULTS)
    out.update(cfg)

    width = _int(out, "width")
    height = _int(out, "height")
    max_iterations = _int(out, "max_iterations")
    if width <= 0 or height <= 0 or max_iterations <= 0:
        raise ValueError("width/height/max_iterations must be positive.")

    max_attempts = _int(out, "max_attempts")
    if max_attempts < 0:
        raise ValueError("max_attempts must not be negative.")

    band_height = _int(out, "band_height")
    if band_height <= 0:
        raise ValueError("band_height must be positive.")

    workers = _optional_int(out, "workers")
    if workers is not None and workers <= 0:
        raise ValueError("workers must be positive.")

    # numpy seeds must be non-negative
    seed = _optional_int(out, "seed")
    if seed is not None and seed < 0:
        raise ValueError("seed must not be negative.")

    output_dir = out["output_dir"]
    if not isinstance(output_dir, str) or not output_dir.strip():
        raise ValueError("output_dir must be a non-empty string.")

    out["width"] = width
    out["height"] = height
    out["max_iterations"] = max_iterations
    out["max_attempts"] = max_attempts
    out["band_height"] = band_height
    out["workers"] = workers
    out["seed"] = seed
    out["output_dir"] = output_dir
    return out

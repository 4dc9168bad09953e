from __future__ import annotations

import argparse
import logging
from typing import Any, Dict, Optional

import numpy as np

from mandelsnap.config import load_config, normalise_config
from mandelsnap.errors import MandelsnapError
from mandelsnap.pipeline import run
from mandelsnap.util.logging_setup import get_logger, logging_session

def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="mandelsnap", description="Render a random interesting region of the Mandelbrot set to PNG.")
    p.add_argument("--config", type=str, default=None, help="Path to config JSON. If omitted, uses the built-in defaults.")
    p.add_argument("--output-dir", type=str, default=None, help="Override output_dir from config.")
    p.add_argument("--seed", type=int, default=None, help="Seed for the random generator (reproducible runs).")
    p.add_argument("--workers", type=int, default=None, help="Render worker processes (defaults to the CPU count).")
    p.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Log level.")
    p.add_argument("--log-file", type=str, default=None, help="Rotating log file path. Omit to log to stdout only.")
    p.add_argument("--progress", action="store_true", help="Show a progress bar while rendering.")
    return p

def _build_config(args: argparse.Namespace) -> Dict[str, Any]:
    cfg = load_config(args.config)
    if args.output_dir:
        cfg["output_dir"] = args.output_dir
    if args.seed is not None:
        cfg["seed"] = args.seed
    if args.workers is not None:
        cfg["workers"] = args.workers
    return normalise_config(cfg)

def main(argv: Optional[list] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    log_level = getattr(logging, args.log_level.upper(), logging.INFO)
    log_file = args.log_file if args.log_file and args.log_file.strip() else None

    cfg: Optional[Dict[str, Any]] = None
    config_error: Optional[Exception] = None
    try:
        cfg = _build_config(args)
        rng = np.random.default_rng(cfg["seed"])
    except (OSError, ValueError) as e:
        config_error = e

    show_process = cfg is not None and cfg["workers"] != 1
    with logging_session(level=log_level, log_file=log_file, show_process=show_process) as queue:
        logger = get_logger()
        if config_error is not None:
            logger.error("Invalid configuration: %s", config_error)
            return 2

        try:
            run(cfg=cfg, rng=rng, log_queue=queue, log_level=log_level, progress=args.progress)
        except MandelsnapError as e:
            logger.error("%s", e)
            return 1
        return 0

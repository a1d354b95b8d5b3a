## markwatch/cli.py

from __future__ import annotations
import argparse, os, sys
from typing import Optional, Sequence
from .utils import configure_logging, ensure_dirs, logger
from .alerts import notify
from .errors import ConfigError, OutputOpenFailure
from .pipeline import load_config
from .watcher import run

USAGE = "Usage: markwatch --input/-i input_file.txt [--output/-o output_file.xlsx] [--config/-c config.yaml]"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="markwatch", description="Tail a mark log into an Excel workbook")
    p.add_argument("-i", "--input", default="", help="Path to input file containing mark data")
    p.add_argument("-o", "--output", default=None, help="Path to output Excel file (default output.xlsx)")
    p.add_argument("-c", "--config", default="config.yaml", help="Optional YAML config file")
    p.add_argument("--state", default=None, help="Persist the read offset to this file between runs")
    p.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")
    return p


def _fail(msg: str) -> int:
    print(f"Error: {msg}")
    print(USAGE)
    return 1


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if not args.input:
        return _fail("Input file path is required")
    if not os.path.isfile(args.input):
        return _fail(f"Input file '{args.input}' does not exist")
    try:
        cfg = load_config(
            args.config,
            input_path=args.input,
            **{"sink.path": args.output, "cursor.state_path": args.state, "logging.level": args.log_level},
        )
    except ConfigError as e:
        return _fail(str(e))
    if not cfg.sink.path:
        return _fail("Output file path is required")

    configure_logging(cfg.logging.path, cfg.logging.level)
    try:
        ensure_dirs(cfg.sink.path)
    except OSError as e:
        logger.error(f"Error creating output directory: {e}")
        return 1
    try:
        run(cfg)
    except OutputOpenFailure as e:
        logger.error(str(e))
        notify("startup failure", str(e), enabled=cfg.alerts.enabled)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Command-line interface."""
import argparse
import logging
from typing import Optional, Sequence

from mth5browser.main import main as run_gui


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mth5-browser",
        description="Browse groups, datasets and attributes of MTH5/HDF5 files.",
    )
    parser.add_argument("file", nargs="?", help="MTH5/HDF5 file to open on start-up")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="console/file log level (default: INFO)",
    )
    parser.add_argument("--log-file", default=None, help="also write the log to this file")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    run_gui(
        filepath=args.file,
        log_level=getattr(logging, args.log_level),
        log_file=args.log_file,
    )


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""Scan an alliance info screenshot into a JSON file for review.

Example: python scan_alliance.py -i alliance.png -o alliance.json -s 1

The JSON is a staging file: check it (OCR does misread), fix it by hand, then
load it into the database with the alliance new/add commands.
"""

from __future__ import annotations

import argparse
import logging
import shutil
import sys
from pathlib import Path
from typing import List, Optional

from alliance_matcher import instruction_for
from alliance_scanner import ScanRequest, scan_alliance
from db_config import PostgresAllianceStore
from ocr_engine import create_engine
from scan_errors import ScanError
from scan_regions import get_layout
from settings import load_settings


def _init_scratch(scratch_dir: Path) -> None:
    shutil.rmtree(scratch_dir, ignore_errors=True)
    try:
        scratch_dir.mkdir(parents=True, exist_ok=True)
    except OSError:
        print(f"Unable to initialize scratch directory: {scratch_dir}", file=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Scan an alliance screenshot into a json file.")
    parser.add_argument("-i", "--image", required=True, help="image file (PNG) to scan for alliance data")
    parser.add_argument("-o", "--output", required=True, help="JSON file to output alliance data to")
    parser.add_argument("-s", "--server", type=int, default=1, help="Alliance's server number")
    parser.add_argument("--config", help="config file (default is ~/.wartracker-cli.json)")
    parser.add_argument("--debug", action="store_true", default=None, help="Save preprocessed crops to the scratch directory")
    parser.add_argument("--scratch", help="Directory to store scratch files")
    parser.add_argument("--tessdata", help="Tesseract data directory")
    parser.add_argument("--tesseract-cmd", help="Path to the tesseract executable")
    parser.add_argument("--layout", help="Screen layout profile (default: 'default')")
    parser.add_argument("--layout-file", help="JSON file with extra layout profiles")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    settings = load_settings(Path(args.config) if args.config else None)
    for key, value in (("debug", args.debug), ("scratch", args.scratch), ("tessdata", args.tessdata),
                       ("tesseract_cmd", args.tesseract_cmd), ("layout", args.layout),
                       ("layout_file", args.layout_file)):
        if value is not None:
            settings[key] = value

    logging.basicConfig(
        level=logging.DEBUG if settings["debug"] else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    debug_dir = None
    if settings["debug"]:
        debug_dir = Path(settings["scratch"])
        _init_scratch(debug_dir)

    try:
        layout = get_layout(settings["layout"], Path(settings["layout_file"]) if settings["layout_file"] else None)
    except (ValueError, OSError) as e:
        print(f"ERROR: {e}")
        return 1

    request = ScanRequest(
        image_path=Path(args.image),
        output_path=Path(args.output),
        server_id=args.server,
        layout=layout,
        debug_dir=debug_dir,
    )

    try:
        engine = create_engine("tesseract", tessdata_dir=settings["tessdata"],
                               tesseract_cmd=settings["tesseract_cmd"])
        engine.ensure_available()
        result = scan_alliance(request, engine, PostgresAllianceStore())
    except ScanError as e:
        print(e)
        return 1

    print(instruction_for(result.match, result.output_path))
    print(f"Saved: {result.output_path}")
    if debug_dir is not None:
        print(f"Debug images saved in: {debug_dir.resolve()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""Resolve a projected coordinate to a Spanish cadastral parcel from the command line.

Workflow:
    1. Query the registry's distance search at the exact point.
    2. If nothing comes back, probe rings of 5-100 m around the point until a
       parcel answers.
    3. Fetch descriptive attributes for the parcel that was found.
    4. Print the outcome as JSON, including a message describing any step that
       had to fall back.

The point must already be projected (for example UTM zone 30N, EPSG:25830);
no coordinate conversion happens here.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from catastro.client import CatastroClient
from catastro.errors import InputValidationError, InternalFault
from catastro.models import ProjectedPoint
from catastro.resolver import ResolutionCoordinator

DEFAULT_SRS = os.getenv("RESOLVER_DEFAULT_SRS", "EPSG:25830")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Find the cadastral parcel for a projected coordinate.")
    parser.add_argument("x", type=float, help="Projected X (easting).")
    parser.add_argument("y", type=float, help="Projected Y (northing).")
    parser.add_argument(
        "--srs",
        default=DEFAULT_SRS,
        help="Reference system identifier of the coordinate (default: %(default)s).",
    )
    parser.add_argument(
        "--base-url",
        default=None,
        help="Override the registry web service root (default: CATASTRO_BASE_URL env var).",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-request timeout in seconds (default: CATASTRO_TIMEOUT env var).",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable verbose HTTP logging.",
    )
    return parser.parse_args(argv)


def setup_logging(debug: bool) -> None:
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(message)s")


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.debug)

    try:
        point = ProjectedPoint(args.x, args.y, args.srs)
    except InputValidationError as exc:
        logging.error("Invalid point: %s", exc)
        return 2

    coordinator = ResolutionCoordinator(CatastroClient(args.base_url, timeout=args.timeout))
    try:
        outcome = coordinator.resolve(point)
    except InternalFault as exc:
        logging.error("Resolution failed: %s", exc)
        return 1

    print(json.dumps(outcome.to_dict(), indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())

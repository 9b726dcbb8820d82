"""Route visibility analysis script: detect sharp turns and blind spots for a stored route.

Usage:
  python scripts/analyze_route.py \\
      --db route_hazards.db \\
      --route NH44-srinagar-leh \\
      --output report.md

  # load a route from a "lat,lon" CSV first, then analyze it
  python scripts/analyze_route.py --db route_hazards.db --route R1 \\
      --import-csv r1.csv --name "Manali - Leh" --terrain hilly --json

Thresholds can be tuned through ROUTE_HAZARDS_* environment variables (or a .env file).
"""

from __future__ import annotations

import argparse
import csv
import json
import logging
import sys

from dotenv import load_dotenv

from route_hazards.analysis.service import RouteAnalysisService
from route_hazards.config import default_db_path
from route_hazards.errors import InsufficientGpsPoints, RouteNotFound
from route_hazards.geometry.primitives import with_cumulative_distances
from route_hazards.reporting.formatter import MarkdownFormatter
from route_hazards.storage.models import Route
from route_hazards.storage.storage import HazardStorage


def _import_csv(db_path: str, route_id: str, path: str, name: str, terrain: str) -> int:
    with open(path, newline="", encoding="utf-8") as fh:
        coords = [
            (float(row[0]), float(row[1]))
            for row in csv.reader(fh)
            if row and not row[0].lstrip().startswith(("#", "lat"))
        ]
    storage = HazardStorage(db_path)
    try:
        storage.save_route(
            Route(
                route_id=route_id,
                name=name,
                terrain=terrain,
                points=with_cumulative_distances(coords),
            )
        )
    finally:
        storage.close()
    return len(coords)


def main() -> None:
    load_dotenv()

    ap = argparse.ArgumentParser(description="Analyze a route for sharp turns and blind spots")
    ap.add_argument("--db", default=None, help="SQLite database path (default: $ROUTE_HAZARDS_DB)")
    ap.add_argument("--route", required=True, help="Route ID")
    ap.add_argument("--import-csv", default=None, help="Load route points from a lat,lon CSV first")
    ap.add_argument("--name", default="", help="Route name (with --import-csv)")
    ap.add_argument("--terrain", default="flat", help="Route terrain (with --import-csv)")
    ap.add_argument("--output", default="route_report.md", help="Output Markdown file path")
    ap.add_argument("--json", action="store_true", help="Print the result as JSON instead")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    db_path = args.db or default_db_path()

    if args.import_csv:
        n = _import_csv(db_path, args.route, args.import_csv, args.name, args.terrain)
        print(f"Imported {n} points into route {args.route!r}", file=sys.stderr)

    try:
        result = RouteAnalysisService(db_path).analyze_route(args.route)
    except (RouteNotFound, InsufficientGpsPoints) as exc:
        print(f"  [!] {exc}", file=sys.stderr)
        sys.exit(1)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return

    MarkdownFormatter().write(result, args.output)
    s = result.summary
    print(
        f"[OK] {s.total_sharp_turns} sharp turns, {s.total_blind_spots} blind spots, "
        f"overall risk {s.overall_risk_level.value}: {args.output}"
    )


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""
Engine Runner

Runs the analytics engine over a search-console CSV export:
1. Row validation (header aliases, clamping, CTR parsing)
2. Page scoring, cannibalization, topic clusters, actions
3. JSON output to stdout or a file

Usage:
    python scripts/run_engine.py export.csv

    # With options:
    python scripts/run_engine.py export.csv \
        --output result.json \
        --min-impressions 100 \
        --max-clusters 20
"""

import argparse
import csv
import json
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from searchlens.analyzer import AnalyticsEngine, EngineConfig
from searchlens.models.validation import validate_records
from searchlens.scoring.aggregation import PositionAveraging
from searchlens.scoring.clustering import ClusteringBudget
from searchlens.utils import get_settings

# Configure logging (stderr keeps stdout clean for JSON)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)


def build_config(args: argparse.Namespace) -> EngineConfig:
    """Settings defaults with command-line overrides applied."""
    settings = get_settings()
    config = EngineConfig.from_settings(settings)

    if args.min_impressions is not None:
        config.min_impressions = args.min_impressions
    if args.averaging is not None:
        config.position_averaging = PositionAveraging(args.averaging)
    if args.max_clusters is not None:
        budget = config.clustering_budget
        config.clustering_budget = ClusteringBudget(
            similarity_threshold=budget.similarity_threshold,
            max_clusters=args.max_clusters,
            max_iterations=budget.max_iterations,
            top_query_cap=budget.top_query_cap,
            search_window=budget.search_window,
            sample_pairs=budget.sample_pairs,
        )
    return config


def run_engine(csv_path: Path, config: EngineConfig) -> dict:
    """Validate the export and run the engine."""
    with open(csv_path, newline="", encoding="utf-8-sig") as f:
        rows = list(csv.DictReader(f))

    logger.info(f"Read {len(rows)} rows from {csv_path}")

    report = validate_records(rows)
    if report.critical_count:
        logger.warning(f"{report.critical_count} rows skipped during validation")

    result = AnalyticsEngine(config).run(report.records)

    output = result.to_dict()
    output["validation"] = report.to_dict()
    return output


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Run the analytics engine over a search-console CSV export"
    )
    parser.add_argument(
        "csv_path",
        type=Path,
        help="CSV export (query, page, clicks, impressions, ctr, position)"
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=None,
        help="Write JSON here instead of stdout"
    )
    parser.add_argument(
        "--min-impressions",
        type=int,
        default=None,
        help="Minimum impressions for a cannibalized query"
    )
    parser.add_argument(
        "--averaging",
        default=None,
        choices=[mode.value for mode in PositionAveraging],
        help="Position merge strategy"
    )
    parser.add_argument(
        "--max-clusters",
        type=int,
        default=None,
        help="Stop topic merging at this many clusters"
    )

    args = parser.parse_args()
    load_dotenv()

    if not args.csv_path.exists():
        print(f"ERROR: File not found: {args.csv_path}", file=sys.stderr)
        sys.exit(1)

    try:
        output = run_engine(args.csv_path, build_config(args))
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(2)

    payload = json.dumps(output, indent=2, default=str)
    if args.output:
        args.output.write_text(payload, encoding="utf-8")
        logger.info(f"Result saved to: {args.output}")
    else:
        print(payload)


if __name__ == "__main__":
    main()

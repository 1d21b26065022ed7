"""ETL script for loading civic complaint reports into the warehouse.

Pulls the full report collection from the report service and ingests each
report in its own transaction.

Usage:
    python scripts/run_etl.py                                  # One batch
    python scripts/run_etl.py --create-schema --seed           # First run on an empty database
    python scripts/run_etl.py --fail-fast                      # Stop at the first failing report
    python scripts/run_etl.py --authority-policy skip-link     # Unlink authority on a creation race
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from civic_warehouse.config import Settings, settings
from civic_warehouse.db.warehouse_engine import get_warehouse
from civic_warehouse.errors import UpstreamFetchFailure, WarehouseError
from civic_warehouse.etl.extractors.report_source import ReportSourceClient
from civic_warehouse.etl.loaders.reports import ReportLoader
from civic_warehouse.etl.pipeline import IngestionPipeline
from civic_warehouse.seed.dimensions import seed_dimensions


def build_parser(config: Settings = settings) -> argparse.ArgumentParser:
    """CLI options; defaults come from the settings."""
    parser = argparse.ArgumentParser(description="Run civic complaint warehouse ETL")

    # Schema / seed
    parser.add_argument("--create-schema", action="store_true", help="Create warehouse tables before loading")
    parser.add_argument("--seed", action="store_true", help="Seed dimension tables before loading")

    # Ingestion behaviour
    parser.add_argument("--source-url", default=config.report_source_url, help="Report service base URL")
    parser.add_argument(
        "--authority-policy",
        default=config.authority_conflict_policy,
        choices=["fail", "skip-link", "lookup-existing"],
    )
    parser.add_argument("--fail-fast", action="store_true", default=config.batch_fail_fast,
                        help="Abort the batch at the first failing report")
    parser.add_argument("--append-events", action="store_true", default=not config.replay_safe_events,
                        help="Append status/escalation events on every run (replays duplicate them)")
    return parser


def main():
    args = build_parser().parse_args()

    logging.basicConfig(
        level=settings.etl_log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    print("=" * 60)
    print("🚀 Civic Complaint Warehouse ETL")
    print("=" * 60)
    print(f"Source: {args.source_url}")
    print(f"Authority policy: {args.authority_policy}")
    print(f"Timestamp: {datetime.now()}")
    print("=" * 60)

    warehouse = get_warehouse()

    if args.create_schema:
        print("🏗️  Creating warehouse schema...")
        warehouse.create_schema()

    if args.seed:
        print("🌱 Seeding dimensions...")
        with warehouse.transaction() as session:
            inserted = seed_dimensions(session)
        for table, count in inserted.items():
            print(f"   ✅ {table}: {count} new rows")

    pipeline = IngestionPipeline(
        warehouse,
        ReportSourceClient(args.source_url, timeout=settings.report_source_timeout_seconds),
        loader=ReportLoader(
            warehouse,
            authority_policy=args.authority_policy,
            replay_safe_events=not args.append_events,
        ),
        fail_fast=args.fail_fast,
    )

    print("🔄 Starting report ingestion...")
    try:
        result = pipeline.run_batch()
    except UpstreamFetchFailure as e:
        print(f"❌ Report service unavailable: {e}")
        sys.exit(2)
    except WarehouseError as e:
        print(f"❌ ETL aborted: {e}")
        sys.exit(1)

    print("\n" + "=" * 60)
    print("📊 ETL Summary:")
    print("=" * 60)
    print(f"  batch_run_id: {result.batch_run_id}")
    print(f"  status: {result.status}")
    print(f"  processed: {result.processed}")
    print(f"  failed: {len(result.failed)}")
    for failure in result.failed:
        print(f"    ⚠️  {failure.report_id}: {failure.error}")

    if result.failed:
        print("\n⚠️  ETL finished with failures")
        sys.exit(1)
    print("\n✅ ETL completed!")


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""Generate a sample loan portfolio for manual validation.

Writes customers and marketing targets into a JSON storage file that the
desk can open (``COOP_STORAGE_PATH``), and optionally exports every report
next to it.
"""

import argparse
import sys
from datetime import date
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from coop_lending.config import LendingConfig, StorageConfig
from coop_lending.desk import LendingDesk
from coop_lending.generators import CustomerGenerator, MarketingTargetGenerator
from coop_lending.logging import setup_logging
from coop_lending.reporting import REPORTS
from coop_lending.store import JsonFileStorage


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--customers", type=int, default=50, help="Number of customers")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument("--output", type=Path, default=Path("local/storage.json"), help="Storage file")
    parser.add_argument("--export", action="store_true", help="Also export every report")
    parser.add_argument("--period", default="Januari 2026", help="Marketing target period label")
    parser.add_argument("--log-file", type=Path, default=None, help="Also write logs to this file")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    config = LendingConfig.from_env()
    config.storage = StorageConfig(path=args.output)
    config.export.output_dir = args.output.parent
    config.seed = args.seed
    setup_logging(config.log_level, config.log_format, log_file=args.log_file)

    desk = LendingDesk(config, storage=JsonFileStorage(args.output), session_id="sample-data")

    customer_gen = CustomerGenerator(seed=args.seed, fee_policy=config.fees)
    target_gen = MarketingTargetGenerator(seed=args.seed)

    print(f"\n1. Generating {args.customers} customers...")
    for customer in customer_gen.generate_batch(args.customers):
        desk.customers.upsert(customer)

    print("\n2. Generating marketing targets...")
    for target in target_gen.generate_batch(customer_gen.marketing_names, args.period):
        desk.targets.upsert(target)

    dashboard = desk.dashboard()
    print(f"\nSaved {len(desk.customers)} customers and {len(desk.targets)} targets to {args.output}")
    print(f"  Net disbursed this month: {dashboard.totals.month_net:,}")
    print(f"  Principal disbursed this year: {dashboard.totals.year_principal:,}")

    if args.export:
        print("\n3. Exporting reports...")
        for report in REPORTS:
            path = desk.export(report, today=date.today())
            print(f"  {report}: {path or 'nothing to export'}")

    desk.close()


if __name__ == "__main__":
    main()

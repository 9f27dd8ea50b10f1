# Main Entry Point
# Run the Billing Discrepancy Analyser from the command line
#
# Usage:
#     python run.py export.csv                      # Load a CSV export
#     python run.py export.csv "Who is overbilled?"  # ...and ask the assistant
#     python run.py --refresh                       # Pull from the warehouse
#     python run.py --serve                         # Refresh on a schedule

import os
import sys
import time

from config import CURRENCY, REFRESH_INTERVAL_HOURS
from data_sources.csv_source import read_csv_file
from data_sources.postgres_source import create_row_source
from orchestrator.discrepancy_service import DiscrepancyService
from orchestrator.refresh_scheduler import RefreshScheduler
from reconciliation.errors import DiscrepancyError

TOP_CUSTOMERS_SHOWN = 10


def print_report(service: DiscrepancyService):
    """Print the KPI summary and the customers with the largest discrepancies."""
    stats = service.get_stats()
    print("-" * 60)
    print(f"Source:            {stats['source']}")
    print(f"Loaded at:         {stats['last_fetched']}")
    print(f"Customers:         {stats['total_customers']}")
    print(f"Orders:            {stats['total_orders']}")
    print(f"Net discrepancy:   ${stats['total_discrepancy']:,.2f} {CURRENCY}")
    print(f"Overcharged:       {stats['total_overcharges']} orders")
    print(f"Undercharged:      {stats['total_undercharges']} orders")
    print(f"Avg rate:          {stats['avg_discrepancy_rate']:.2f}%")
    print(f"Critical:          {stats['critical_count']} customers")
    print("-" * 60)

    for customer in service.get_customers()[:TOP_CUSTOMERS_SHOWN]:
        print(
            f"  [{customer['severity']:>6}] {customer['customer']}: "
            f"{customer['total_discrepancy']:+,.2f} {CURRENCY} over {customer['orders']} orders"
        )


def main(argv=None):
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print("usage: python run.py <export.csv> [question] | --refresh | --serve")
        return 1

    print("=" * 60)
    print("Billing Discrepancy Analyser")
    print("=" * 60)

    if args[0] in ("--refresh", "--serve"):
        source = create_row_source()
        if source is None:
            print("DB_HOST is not configured")
            return 1
        service = DiscrepancyService(source=source)
    else:
        service = DiscrepancyService()

    try:
        if args[0] == "--serve":
            scheduler = RefreshScheduler(service, REFRESH_INTERVAL_HOURS)
            scheduler.run_once()
            print_report(service)
            scheduler.start()
            try:
                while True:
                    time.sleep(60)
            except KeyboardInterrupt:
                scheduler.stop()
            return 0

        if args[0] == "--refresh":
            service.refresh()
        else:
            path = args[0]
            service.upload_data(read_csv_file(path), os.path.basename(path))

        print_report(service)

        if len(args) > 1:
            question = " ".join(args[1:])
            print(f"\nQ: {question}")
            print(f"A: {service.chat(question)['answer']}")
    except (DiscrepancyError, OSError) as e:
        print(f"Error: {e}")
        return 1

    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""
Quality report over athletes already stored in Postgres.
Prints athlete counts, the score distribution and the most common issues;
with --ids, validates just those athletes. --json prints each selected
record with its validation block.

Usage (DATABASE_URL may come from .env.local):
  hyrox-report [--ids ID [ID ...]] [--json] [-v]
"""
import argparse
import json
import logging
import sys

from .config import ScrapeConfig, log_level
from .errors import ConfigError, ValidationInputError
from .validation import enrich_record, quality_stats, validate_athlete_id, validate_batch

logger = logging.getLogger(__name__)

TOP_ISSUES = 5


def build_report(records, stats: dict, athlete_ids=None) -> dict:
    """Combine stored counts with quality figures; athlete_ids narrows to a batch."""
    report = {"stats": dict(stats), "quality": quality_stats(records)}
    if athlete_ids is not None:
        report["batch"] = validate_batch(records, [validate_athlete_id(i) for i in athlete_ids])
    return report


def _print_report(report: dict) -> None:
    stats = report["stats"]
    quality = report["quality"]
    print(
        f"Athletes: {stats['total_athletes']} "
        f"(men {stats['men_count']}, women {stats['women_count']}), last update {stats['last_update'] or 'never'}"
    )
    print(f"Average quality: {quality['average_quality_score']:.1f}  {quality['quality_distribution']}")
    for issue, count in list(quality["common_issues"].items())[:TOP_ISSUES]:
        print(f"  {count:4d}x  {issue}")
    batch = report.get("batch")
    if batch is None:
        return
    print(f"\nValidated {batch['summary']['total']} athlete(s), {batch['summary']['valid']} valid")
    for row in batch["results"]:
        mark = "OK" if row["is_valid"] else f"{row['error_count']} errors, {row['issue_count']} timing issues"
        print(f"  #{row['athlete_id']} {row['athlete_name']}: {row['data_quality_score']}/100 {mark}")
    if batch["not_found"]:
        print(f"Not found: {batch['not_found']}")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Report data quality of stored HYROX athletes.")
    parser.add_argument("--ids", nargs="+", help="athlete ids to validate (max 50)")
    parser.add_argument("--json", action="store_true", help="print records with their validation block as JSON")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(level=log_level(args.verbose), format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    try:
        config = ScrapeConfig.from_env()
        ids = [validate_athlete_id(i) for i in args.ids] if args.ids else None
    except (ConfigError, ValidationInputError) as e:
        print(str(e))
        sys.exit(2)

    from .db import get_db, get_stats, load_athlete_records

    conn = get_db(config.database_url)
    try:
        records = load_athlete_records(conn)
        stats = get_stats(conn)
    finally:
        conn.close()
    logger.info("Loaded %d stored athletes", len(records))

    if args.json:
        selected = [r for r in records if ids is None or r.id in ids]
        print(json.dumps([enrich_record(r) for r in selected], indent=2, default=str))
        return
    try:
        report = build_report(records, stats, ids)
    except ValidationInputError as e:
        print(str(e))
        sys.exit(2)
    _print_report(report)


if __name__ == "__main__":
    main()

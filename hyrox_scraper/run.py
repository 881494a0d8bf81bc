#!/usr/bin/env python3
"""
HYROX results scraper.
Fetches a results roster page, then each athlete's split table (one request at
a time, REQUEST_DELAY seconds apart), normalizes times onto the 16-segment
schedule, scores each record and upserts to Postgres.

Usage (ROSTER_URL / DATABASE_URL may come from .env.local):
  hyrox-scrape [ROSTER_URL] [--year YEAR] [--max-athletes N] [--delay SEC]
               [--fill-missing] [--dry-run] [--json] [-v]
"""
import argparse
import json
import logging
import sys
import threading

from .config import ScrapeConfig, log_level
from .errors import ConfigError, TransientFetchFailure, ValidationInputError
from .fetch import ResultFetcher
from .models import IngestionResult
from .transform import MissingSlotPolicy, ResultTransformer, parse_entries
from .validation import quality_report, validate_query_params

logger = logging.getLogger(__name__)


def build_transformer(config: ScrapeConfig) -> ResultTransformer:
    policy = MissingSlotPolicy.FILL_DEFAULT if config.fill_missing_slots else MissingSlotPolicy.OMIT
    return ResultTransformer(missing_slots=policy)


def scrape_roster(
    roster_url: str,
    config: ScrapeConfig,
    fetcher: ResultFetcher | None = None,
    transformer: ResultTransformer | None = None,
    stop_event: threading.Event | None = None,
) -> IngestionResult:
    """
    Walk one roster. Raises TransientFetchFailure if the roster itself cannot
    be fetched; athletes whose page fails are skipped.
    """
    fetcher = fetcher or ResultFetcher(config)
    transformer = transformer or build_transformer(config)
    result = IngestionResult()

    refs, roster_metadata = fetcher.fetch_roster_page(roster_url)
    result.roster_metadata = roster_metadata
    refs = refs[: config.max_athletes]
    rank_by_id = {ref.external_id: i for i, ref in enumerate(refs, start=1)}

    processed = 0
    for ref, outcome in fetcher.iter_athlete_events(refs, stop_event=stop_event):
        processed += 1
        if isinstance(outcome, TransientFetchFailure):
            logger.warning("Skipping %s: %s", ref.name, outcome)
            result.skipped.append(ref.name)
            continue
        parsed, failed = parse_entries(outcome)
        result.parse_failures += len(failed)
        for label in failed:
            logger.info("%s: no usable time for %r", ref.name, label)
        rank = rank_by_id[ref.external_id]
        record = transformer.transform(
            rank,
            ref.name,
            parsed,
            ranking=rank,
            year=config.season_year,
            location=config.location,
            external_id=ref.external_id,
            metadata=roster_metadata,
        )
        for label in transformer.last_unmapped:
            if label not in result.unmapped_labels:
                result.unmapped_labels.append(label)
        if not record.events:
            logger.warning("%s: no events parsed", ref.name)
        result.records.append(record)

    if processed < len(refs):
        result.stopped_early = True
    return result


def _print_summary(result: IngestionResult) -> None:
    for record in result.records:
        report = quality_report(record)
        print(
            f"  #{record.ranking} {record.name} ({record.category}): "
            f"{len(record.events)}/16 events, total {record.total_time_seconds:.2f}s, quality {report.score}/100"
        )
        for issue in report.errors + report.warnings + report.timing_issues:
            print(f"      - {issue}")
    if result.skipped:
        print(f"Skipped {len(result.skipped)} athlete(s): {', '.join(result.skipped)}")
    if result.unmapped_labels:
        print(f"Unmapped event labels: {result.unmapped_labels}")
    if result.parse_failures:
        print(f"Unparseable time cells: {result.parse_failures}")


def _records_json(result: IngestionResult) -> str:
    out = []
    for record in result.records:
        data = record.to_dict()
        report = quality_report(record)
        data["quality"] = {
            "score": report.score,
            "errors": report.errors,
            "warnings": report.warnings,
            "timing_issues": report.timing_issues,
        }
        out.append(data)
    return json.dumps(out, indent=2)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Scrape HYROX results for one roster page.")
    parser.add_argument("roster_url", nargs="?", help="roster/list page URL (default: ROSTER_URL)")
    parser.add_argument("--year", type=int, help="season year stored on each record (default: SEASON_YEAR)")
    parser.add_argument("--location", help="event location stored on each record")
    parser.add_argument("--max-athletes", type=int, help="stop after N athletes (1-100)")
    parser.add_argument("--delay", type=float, help="seconds between athlete pages")
    parser.add_argument("--fill-missing", action="store_true", help="fill unscraped segments with default durations")
    parser.add_argument("--dry-run", action="store_true", help="print records instead of writing to the database")
    parser.add_argument("--json", action="store_true", help="with --dry-run, print records as JSON")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=log_level(args.verbose),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        config = ScrapeConfig.from_env()
        validate_query_params(year=args.year, limit=args.max_athletes)
    except (ConfigError, ValidationInputError) as e:
        print(str(e))
        sys.exit(2)
    if args.year:
        config.season_year = args.year
    if args.location:
        config.location = args.location
    if args.max_athletes:
        config.max_athletes = args.max_athletes
    if args.delay is not None:
        config.request_delay = max(0.0, args.delay)
    if args.fill_missing:
        config.fill_missing_slots = True

    roster_url = args.roster_url or config.roster_url
    if not roster_url:
        print("No roster URL: pass one or set ROSTER_URL")
        sys.exit(2)

    if not args.json:
        print(f"Scraping {roster_url} (max {config.max_athletes} athletes, {config.request_delay}s between athletes)")

    if args.dry_run:
        result = scrape_roster(roster_url, config)
        if args.json:
            print(_records_json(result))
        else:
            _print_summary(result)
        return

    from .db import finish_run, get_db, start_run, upsert_athlete_records

    conn = get_db(config.database_url)
    run_id = start_run(conn, roster_url)
    try:
        result = scrape_roster(roster_url, config)
        saved = upsert_athlete_records(conn, result.records)
        _print_summary(result)
        print(f"Done. {saved} athlete record(s) upserted.")
        finish_run(conn, run_id, "success", saved)
    except (Exception, KeyboardInterrupt) as e:
        conn.rollback()
        finish_run(conn, run_id, "failed", 0, str(e) or type(e).__name__)
        raise
    finally:
        conn.close()


if __name__ == "__main__":
    main()

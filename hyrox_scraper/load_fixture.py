#!/usr/bin/env python3
"""
Load a saved athlete page into the database (parse + transform + upsert).
Use after fetch_rendered_html to push fixture data to Postgres.

Usage (from project root; DATABASE_URL in .env.local):
  hyrox-load-fixture <path_to.html> "<athlete name>" [--year YEAR] [--ranking N]

Example:
  hyrox-load-fixture fixtures/athlete_JGDMS4JI62E4B.html "Hunter McIntyre" --year 2025
"""
import argparse
import os
import sys

from .config import ScrapeConfig
from .db import get_db, upsert_athlete_records
from .fetch import parse_athlete_events, parse_athlete_info
from .run import build_transformer
from .transform import parse_entries
from .validation import quality_report


def main():
    parser = argparse.ArgumentParser(description="Parse a saved athlete page and upsert it.")
    parser.add_argument("path", help="saved athlete detail HTML")
    parser.add_argument("name", help="athlete display name")
    parser.add_argument("--year", type=int, help="season year (default: SEASON_YEAR)")
    parser.add_argument("--ranking", type=int, help="overall rank, if known")
    args = parser.parse_args()

    if not os.path.isfile(args.path):
        print(f"File not found: {args.path}")
        sys.exit(1)
    config = ScrapeConfig.from_env()
    with open(args.path, encoding="utf-8") as f:
        html = f.read()

    parsed, failed = parse_entries(parse_athlete_events(html))
    record = build_transformer(config).transform(
        args.ranking or 1,
        args.name,
        parsed,
        ranking=args.ranking,
        year=args.year or config.season_year,
        location=config.location,
        metadata=parse_athlete_info(html),
    )
    print(f"Parsed {len(record.events)} events ({len(failed)} unparseable), quality {quality_report(record).score}/100")
    if not record.events:
        sys.exit(0)
    conn = get_db(config.database_url)
    try:
        upsert_athlete_records(conn, [record])
        print("Upserted to database.")
    finally:
        conn.close()


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""
Run the parser on a saved athlete page (e.g. from fetch_rendered_html or
browser "Save as") and print the normalized record with its quality report.
Usage: hyrox-parse-sample <path_to.html> [athlete name] [--fill-missing]
"""
import sys
from pathlib import Path

from .fetch import parse_athlete_events, parse_athlete_info
from .timing import format_seconds
from .transform import MissingSlotPolicy, ResultTransformer, parse_entries
from .validation import quality_report


def main():
    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    fill = "--fill-missing" in sys.argv
    if not args:
        print("Usage: hyrox-parse-sample <path_to.html> [athlete name] [--fill-missing]")
        sys.exit(1)
    path = Path(args[0])
    if not path.is_file():
        print(f"File not found: {path}")
        print("Run: hyrox-fetch-html <athlete page url>")
        sys.exit(1)
    name = args[1] if len(args) > 1 else path.stem

    html = path.read_text(encoding="utf-8")
    entries = parse_athlete_events(html)
    print(f"Parsed {len(entries)} split rows from {path}")
    parsed, failed = parse_entries(entries)
    if failed:
        print(f"  unparseable times: {failed}")

    policy = MissingSlotPolicy.FILL_DEFAULT if fill else MissingSlotPolicy.OMIT
    transformer = ResultTransformer(missing_slots=policy)
    record = transformer.transform(1, name, parsed, metadata=parse_athlete_info(html))
    if transformer.last_unmapped:
        print(f"  unmapped labels: {transformer.last_unmapped}")

    print(f"{record.name} ({record.category}) total {format_seconds(record.total_time_seconds)}")
    for event in record.events:
        print(
            f"  {event.order_index:2d}. {event.name:<22} {format_seconds(event.duration_seconds, 'M:SS'):>6}"
            f"  split {format_seconds(event.split_time_seconds)}"
        )
    report = quality_report(record)
    print(f"Quality {report.score}/100")
    for issue in report.errors + report.warnings + report.timing_issues:
        print(f"  - {issue}")


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""
Diagnostic: run every saved athlete page through the pipeline and report
which canonical segments come out missing and the resulting quality score.

Usage: hyrox-diagnose [--verbose]
"""
import sys
from collections import Counter

from .config import FIXTURES_DIR
from .fetch import parse_athlete_events
from .transform import CANONICAL_SCHEDULE, ResultTransformer, parse_entries
from .validation import quality_report, quality_stats


def main():
    verbose = "--verbose" in sys.argv or "-v" in sys.argv
    files = sorted(FIXTURES_DIR.glob("athlete_*.html"))
    if not files:
        print("No athlete fixtures found. Run hyrox-fetch-html first.")
        sys.exit(1)

    transformer = ResultTransformer()
    records = []
    missing_by_slot = Counter()
    print("=== Parser diagnostic: per-athlete segments ===\n")
    for i, path in enumerate(files, start=1):
        entries = parse_athlete_events(path.read_text(encoding="utf-8"))
        parsed, failed = parse_entries(entries)
        record = transformer.transform(i, path.stem.replace("athlete_", ""), parsed)
        records.append(record)

        present = {e.name for e in record.events}
        missing = [slot.name for slot in CANONICAL_SCHEDULE if slot.name not in present]
        missing_by_slot.update(missing)
        report = quality_report(record)
        print(f"{path.name}: {len(entries)} rows, {len(record.events)}/16 segments, quality {report.score}")
        if missing:
            print(f"  MISSING: {', '.join(missing)}")
        if failed:
            print(f"  unparseable: {failed}")
        if verbose and transformer.last_unmapped:
            print(f"  unmapped: {transformer.last_unmapped}")

    print("\n=== Missing segments across fixtures ===")
    for slot in CANONICAL_SCHEDULE:
        count = missing_by_slot.get(slot.name, 0)
        mark = "  OK" if not count else f"  MISSING in {count}"
        print(f"  {slot.order_index:2d}. {slot.name}{mark}")

    stats = quality_stats(records)
    print(f"\nAverage quality: {stats['average_quality_score']:.1f}  {stats['quality_distribution']}")
    print("=== Done ===")


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""
Collect all event labels across saved athlete pages and show how each maps
onto the canonical schedule. Use when an event keeps coming out missing.

Usage: hyrox-inspect-events [path_to.html ...]
       With no paths, reads every fixtures/athlete_*.html.
"""
import sys
from collections import Counter
from pathlib import Path

from .config import FIXTURES_DIR
from .fetch import parse_athlete_events
from .transform import map_event_label


def main():
    paths = [Path(p) for p in sys.argv[1:]] or sorted(FIXTURES_DIR.glob("athlete_*.html"))
    if not paths:
        print("No fixtures found. Run hyrox-fetch-html first or pass paths.")
        sys.exit(1)

    label_counts = Counter()
    for path in paths:
        if not path.is_file():
            print(f"File not found: {path}")
            continue
        for entry in parse_athlete_events(path.read_text(encoding="utf-8")):
            label_counts[entry.event_label] += 1

    print(f"Event labels in {len(paths)} page(s):")
    unmapped = []
    for label, count in sorted(label_counts.items(), key=lambda x: -x[1]):
        canonical = map_event_label(label)
        if canonical is None:
            unmapped.append(label)
        print(f"  {count:3d}x  {label!r} -> {canonical or 'UNMAPPED'}")
    if unmapped:
        print("\nUnmapped labels:", unmapped)


if __name__ == "__main__":
    main()

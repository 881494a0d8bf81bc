"""Shared fixtures: saved results pages and record builders."""

from pathlib import Path

import pytest

from hyrox_scraper.models import ParsedTime
from hyrox_scraper.transform import CANONICAL_SCHEDULE

FIXTURES = Path(__file__).parent / "fixtures"

ROSTER_URL = "https://results.hyrox.com/season-7/?pid=list&event=HPRO_LR3MS4JI1234"

# Seconds per canonical segment in athlete_detail.html (total 4252)
DETAIL_DURATIONS = {
    "Running 1": 252.0,
    "1000m SkiErg": 270.0,
    "Running 2": 260.0,
    "50m Sled Push": 185.0,
    "Running 3": 265.0,
    "50m Sled Pull": 250.0,
    "Running 4": 270.0,
    "80m Burpee Broad Jump": 300.0,
    "Running 5": 275.0,
    "1000m Row": 280.0,
    "Running 6": 280.0,
    "200m Farmers Carry": 120.0,
    "Running 7": 285.0,
    "100m Sandbag Lunges": 290.0,
    "Running 8": 300.0,
    "Wall Balls": 370.0,
}


@pytest.fixture
def roster_html():
    return (FIXTURES / "roster.html").read_text(encoding="utf-8")


@pytest.fixture
def detail_html():
    return (FIXTURES / "athlete_detail.html").read_text(encoding="utf-8")


def parsed(seconds: float, text: str | None = None) -> ParsedTime:
    return ParsedTime(original_text=text or str(seconds), cleaned_text=text or str(seconds), seconds=seconds)


def record_dict(durations=None, **overrides) -> dict:
    """A stored-shape record; total matches the event sum unless overridden."""
    durations = DETAIL_DURATIONS if durations is None else durations
    events = []
    split = 0.0
    for slot in CANONICAL_SCHEDULE:
        if slot.name not in durations:
            continue
        split += durations[slot.name]
        events.append(
            {
                "name": slot.name,
                "duration_seconds": durations[slot.name],
                "order_index": slot.order_index,
                "split_time_seconds": split,
            }
        )
    data = {
        "id": 1,
        "name": "Hunter McIntyre",
        "category": "men",
        "total_time_seconds": sum(e["duration_seconds"] for e in events),
        "events": events,
    }
    data.update(overrides)
    return data

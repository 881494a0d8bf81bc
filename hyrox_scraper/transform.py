"""
Map scraped event labels onto the fixed 16-segment race schedule and build
AthleteRecords with cumulative split times.
"""
import enum
import logging
import re
from collections import namedtuple

from .models import AthleteRecord, CanonicalEvent, ParsedTime
from .timing import cleanse_scraped

logger = logging.getLogger(__name__)

ScheduleSlot = namedtuple("ScheduleSlot", ["name", "order_index", "default_duration"])

# 8 runs interleaved with 8 stations. Default durations (seconds) are only used
# with MissingSlotPolicy.FILL_DEFAULT.
CANONICAL_SCHEDULE = (
    ScheduleSlot("Running 1", 1, 300.0),
    ScheduleSlot("1000m SkiErg", 2, 270.0),
    ScheduleSlot("Running 2", 3, 300.0),
    ScheduleSlot("50m Sled Push", 4, 180.0),
    ScheduleSlot("Running 3", 5, 300.0),
    ScheduleSlot("50m Sled Pull", 6, 240.0),
    ScheduleSlot("Running 4", 7, 300.0),
    ScheduleSlot("80m Burpee Broad Jump", 8, 300.0),
    ScheduleSlot("Running 5", 9, 300.0),
    ScheduleSlot("1000m Row", 10, 280.0),
    ScheduleSlot("Running 6", 11, 300.0),
    ScheduleSlot("200m Farmers Carry", 12, 120.0),
    ScheduleSlot("Running 7", 13, 300.0),
    ScheduleSlot("100m Sandbag Lunges", 14, 270.0),
    ScheduleSlot("Running 8", 15, 300.0),
    ScheduleSlot("Wall Balls", 16, 360.0),
)

# Site label -> canonical name. Exact keys are tried first, then substring
# containment (either direction, case-insensitive) in this order, so more
# specific keys must come before shorter ones that would also match.
EVENT_ALIASES = {
    "Running 1": "Running 1", "Run 1": "Running 1", "1km Run 1": "Running 1",
    "Running 2": "Running 2", "Run 2": "Running 2", "1km Run 2": "Running 2",
    "Running 3": "Running 3", "Run 3": "Running 3", "1km Run 3": "Running 3",
    "Running 4": "Running 4", "Run 4": "Running 4", "1km Run 4": "Running 4",
    "Running 5": "Running 5", "Run 5": "Running 5", "1km Run 5": "Running 5",
    "Running 6": "Running 6", "Run 6": "Running 6", "1km Run 6": "Running 6",
    "Running 7": "Running 7", "Run 7": "Running 7", "1km Run 7": "Running 7",
    "Running 8": "Running 8", "Run 8": "Running 8", "1km Run 8": "Running 8",
    "1000m SkiErg": "1000m SkiErg", "SkiErg": "1000m SkiErg", "Ski Erg": "1000m SkiErg",
    "50m Sled Push": "50m Sled Push", "Sled Push": "50m Sled Push",
    "50m Sled Pull": "50m Sled Pull", "Sled Pull": "50m Sled Pull",
    "80m Burpee Broad Jump": "80m Burpee Broad Jump",
    "80m Burpee Broad Jumps": "80m Burpee Broad Jump",
    "Burpee Broad Jump": "80m Burpee Broad Jump", "Burpees": "80m Burpee Broad Jump",
    "1000m Row": "1000m Row", "Rowing": "1000m Row", "Row": "1000m Row",
    "200m Farmers Carry": "200m Farmers Carry", "Farmers Carry": "200m Farmers Carry",
    "Farmer's Carry": "200m Farmers Carry",
    "100m Sandbag Lunges": "100m Sandbag Lunges", "Sandbag Lunges": "100m Sandbag Lunges",
    "Lunges": "100m Sandbag Lunges",
    "100 Wall Balls": "Wall Balls", "75 Wall Balls": "Wall Balls", "Wall Balls": "Wall Balls",
    "Wallballs": "Wall Balls",
}

# Whole-word tokens, checked in order; first hit wins.
CATEGORY_TOKENS = (
    ("women", "women"), ("female", "women"), ("ladies", "women"), ("damen", "women"),
    ("men", "men"), ("male", "men"), ("herren", "men"),
    ("mixed", "mixed"),
)
DEFAULT_CATEGORY = "mixed"


class MissingSlotPolicy(enum.Enum):
    OMIT = "omit"  # fidelity: emit only segments we actually scraped
    FILL_DEFAULT = "fill_default"  # completeness: placeholder default duration


def map_event_label(label: str, aliases=None) -> str | None:
    """Canonical name for a site label, or None if it has no counterpart."""
    aliases = EVENT_ALIASES if aliases is None else aliases
    if not label:
        return None
    key = re.sub(r"\s+", " ", label.strip())
    if key in aliases:
        return aliases[key]
    lowered = key.lower()
    for alias, canonical in aliases.items():
        a = alias.lower()
        if a in lowered or lowered in a:
            return canonical
    return None


def infer_category(name: str, metadata=None) -> str:
    """Best-effort gender category from name/metadata text. May misclassify."""
    parts = [name or ""]
    if metadata:
        parts.extend(str(v) for v in metadata.values() if v)
    text = " ".join(parts).lower()
    for token, category in CATEGORY_TOKENS:
        if re.search(rf"\b{token}\b", text):
            return category
    return DEFAULT_CATEGORY


def parse_entries(entries) -> tuple[dict, list[str]]:
    """RawEventEntry rows -> ({label: ParsedTime}, [labels that failed to parse])."""
    parsed = {}
    failed = []
    for entry in entries:
        result = cleanse_scraped(entry.time_text, entry.event_label)
        if result is None:
            failed.append(entry.event_label)
            continue
        if entry.event_label not in parsed:
            parsed[entry.event_label] = result
    return parsed, failed


class ResultTransformer:
    """Turns {raw label: ParsedTime} into an ordered AthleteRecord."""

    def __init__(
        self,
        missing_slots: MissingSlotPolicy = MissingSlotPolicy.OMIT,
        schedule=CANONICAL_SCHEDULE,
        aliases=None,
    ):
        self.missing_slots = missing_slots
        self.schedule = sorted(schedule, key=lambda s: s.order_index)
        self.aliases = EVENT_ALIASES if aliases is None else aliases
        self.last_unmapped: list[str] = []

    def _map_durations(self, raw_events) -> dict[str, float]:
        """Canonical name -> seconds. First raw label to land on a slot wins."""
        slot_names = {slot.name for slot in self.schedule}
        durations = {}
        self.last_unmapped = []
        for label, parsed in raw_events.items():
            if parsed is None:
                continue
            canonical = map_event_label(label, self.aliases)
            if canonical is None or canonical not in slot_names:
                logger.info("Dropping unmapped event label %r", label)
                self.last_unmapped.append(label)
                continue
            if canonical in durations:
                logger.info("Dropping %r: %s already filled", label, canonical)
                continue
            seconds = parsed.seconds if isinstance(parsed, ParsedTime) else float(parsed)
            if seconds <= 0:
                continue
            durations[canonical] = seconds
        return durations

    def transform(
        self,
        athlete_id: int,
        raw_name: str,
        raw_events,
        *,
        ranking: int | None = None,
        year: int | None = None,
        location: str | None = None,
        external_id: str | None = None,
        metadata=None,
    ) -> AthleteRecord:
        durations = self._map_durations(raw_events)
        events = []
        split = 0.0
        for slot in self.schedule:
            duration = durations.get(slot.name)
            if duration is None:
                if self.missing_slots is not MissingSlotPolicy.FILL_DEFAULT:
                    continue
                duration = slot.default_duration
            split = round(split + duration, 2)
            events.append(
                CanonicalEvent(
                    name=slot.name,
                    duration_seconds=round(duration, 2),
                    order_index=slot.order_index,
                    split_time_seconds=split,
                )
            )
        name = re.sub(r"\s+", " ", (raw_name or "").strip())
        total = round(sum(e.duration_seconds for e in events), 2)
        return AthleteRecord(
            id=athlete_id,
            name=name,
            category=infer_category(name, metadata),
            total_time_seconds=total,
            ranking=ranking,
            year=year,
            location=location,
            events=events,
            external_id=external_id,
        )

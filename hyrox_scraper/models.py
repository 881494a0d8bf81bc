"""Data models for scraped results (dataclasses, no DB dependency)."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class RawAthleteReference:
    """Athlete link found on a roster page."""

    name: str  # "Hunter McIntyre"
    external_id: str  # idp query parameter: "JGDMS4JI62E4B"
    detail_url: str  # absolute URL of the athlete's result page


@dataclass(frozen=True)
class RawEventEntry:
    """One row of an athlete's split table, as text."""

    event_label: str  # "Running 1", "SkiErg", ...
    time_text: str  # "04:32" (not cleaned)
    place_text: str  # "12" or ""


@dataclass(frozen=True)
class ParsedTime:
    """Result of parsing a time string. A failed parse is None, never 0."""

    original_text: str
    cleaned_text: str
    seconds: float  # > 0, 2 decimals
    is_plausible: bool = True


@dataclass
class CanonicalEvent:
    """One segment of the canonical schedule with its measured duration."""

    name: str  # "Running 1"
    duration_seconds: float
    order_index: int  # 1..16
    split_time_seconds: float  # cumulative, end of this segment

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "duration_seconds": self.duration_seconds,
            "order_index": self.order_index,
            "split_time_seconds": self.split_time_seconds,
        }


@dataclass
class AthleteRecord:
    """Normalized result for one athlete. The unit handed to storage."""

    id: int
    name: str
    category: str  # "men" / "women" / "mixed"
    total_time_seconds: float  # sum of event durations
    ranking: int | None = None  # position on the roster page
    year: int | None = None
    location: str | None = None
    events: list[CanonicalEvent] = field(default_factory=list)
    external_id: str | None = None

    def to_dict(self) -> dict:
        """Plain mapping shape shared by the validator and the store."""
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "total_time_seconds": self.total_time_seconds,
            "ranking": self.ranking,
            "year": self.year,
            "location": self.location,
            "external_id": self.external_id,
            "events": [e.to_dict() for e in self.events],
        }


@dataclass
class Completeness:
    """Presence of the mandatory station families."""

    total_events: int
    expected_events: int = 16
    has_ski_erg: bool = False
    has_sled_push: bool = False
    has_sled_pull: bool = False
    has_burpees: bool = False
    has_wall_balls: bool = False


@dataclass
class StructureReport:
    is_valid: bool
    errors: list[str]
    warnings: list[str]
    score: int  # 0..100


@dataclass
class TimingReport:
    is_valid: bool
    issues: list[str]
    completeness: Completeness


@dataclass
class QualityReport:
    """Combined structural + timing report. Recomputed, never stored."""

    is_structurally_valid: bool
    errors: list[str]
    warnings: list[str]
    score: int
    timing_issues: list[str]
    completeness: Completeness

    @property
    def is_valid(self) -> bool:
        return self.is_structurally_valid and not self.timing_issues


@dataclass
class IngestionResult:
    """Summary of one roster walk."""

    records: list[AthleteRecord] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)  # athlete names
    parse_failures: int = 0
    unmapped_labels: list[str] = field(default_factory=list)
    stopped_early: bool = False
    roster_metadata: dict[str, str] = field(default_factory=dict)  # page title/heading

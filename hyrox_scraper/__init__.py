"""HYROX results scraper: fetch, normalize and score athlete split times."""

from .errors import ConfigError, ScraperError, TransientFetchFailure, ValidationInputError
from .fetch import ResultFetcher, parse_athlete_events, parse_athlete_info, parse_roster, parse_roster_metadata
from .models import (
    AthleteRecord,
    CanonicalEvent,
    IngestionResult,
    ParsedTime,
    QualityReport,
    RawAthleteReference,
    RawEventEntry,
)
from .timing import cleanse_scraped, parse_time
from .transform import CANONICAL_SCHEDULE, MissingSlotPolicy, ResultTransformer
from .validation import quality_report, validate_structure, validate_timing

__all__ = [
    "ConfigError",
    "ScraperError",
    "TransientFetchFailure",
    "ValidationInputError",
    "ResultFetcher",
    "parse_athlete_events",
    "parse_athlete_info",
    "parse_roster",
    "parse_roster_metadata",
    "AthleteRecord",
    "CanonicalEvent",
    "IngestionResult",
    "ParsedTime",
    "QualityReport",
    "RawAthleteReference",
    "RawEventEntry",
    "cleanse_scraped",
    "parse_time",
    "CANONICAL_SCHEDULE",
    "MissingSlotPolicy",
    "ResultTransformer",
    "quality_report",
    "validate_structure",
    "validate_timing",
]

"""
Data-quality checks for athlete records.

All functions are pure: they accept an AthleteRecord or its plain mapping
(as stored, see AthleteRecord.to_dict) and never raise on bad data. Defects
are reported, not fixed; the record is always kept.
"""

from collections import Counter
from dataclasses import asdict, dataclass
from datetime import datetime, timezone

from .config import MAX_ATHLETES_LIMIT
from .errors import ValidationInputError
from .models import AthleteRecord, Completeness, QualityReport, StructureReport, TimingReport

EXPECTED_EVENT_COUNT = 16
MAX_BATCH_SIZE = 50

# Mandatory station families: (completeness flag, substring of event name)
COMPONENT_FAMILIES = (
    ("has_ski_erg", "skierg"),
    ("has_sled_push", "sled push"),
    ("has_sled_pull", "sled pull"),
    ("has_burpees", "burpee"),
    ("has_wall_balls", "wall ball"),
)

QUERY_CATEGORIES = ("all", "men", "women", "mixed")


@dataclass(frozen=True)
class QualityWeights:
    """Score penalties and thresholds. Heuristic, tune freely."""

    error_penalty: int = 25
    warning_penalty: int = 10
    missing_event_penalty: int = 3
    suspicious_event_penalty: int = 5
    total_mismatch_penalty: int = 10
    min_event_seconds: float = 30.0
    max_event_seconds: float = 1800.0
    total_tolerance_seconds: float = 60.0
    expected_event_count: int = EXPECTED_EVENT_COUNT


DEFAULT_WEIGHTS = QualityWeights()


def _as_mapping(record) -> dict:
    if isinstance(record, AthleteRecord):
        return record.to_dict()
    return record if isinstance(record, dict) else {}


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _total_time(data: dict):
    if "total_time_seconds" in data:
        return data["total_time_seconds"]
    return data.get("total_time")


def _duration(event) -> object:
    if not isinstance(event, dict):
        return None
    if "duration_seconds" in event:
        return event["duration_seconds"]
    return event.get("duration")


def _event_name(event) -> str:
    if isinstance(event, dict) and isinstance(event.get("name"), str):
        return event["name"]
    return ""


def _events(data: dict):
    events = data.get("events")
    return events if isinstance(events, (list, tuple)) else None


def calculate_quality_score(record, errors=(), warnings=(), weights: QualityWeights = DEFAULT_WEIGHTS) -> int:
    """100 minus penalties, clamped to [0, 100]."""
    data = _as_mapping(record)
    score = 100
    score -= len(errors) * weights.error_penalty
    score -= len(warnings) * weights.warning_penalty

    events = _events(data)
    if events is None:
        return max(0, min(100, score))

    if len(events) < weights.expected_event_count:
        score -= (weights.expected_event_count - len(events)) * weights.missing_event_penalty

    durations = [d for d in (_duration(e) for e in events) if _is_number(d)]
    suspicious = sum(
        1 for d in durations if d < weights.min_event_seconds or d > weights.max_event_seconds
    )
    score -= suspicious * weights.suspicious_event_penalty

    total = _total_time(data)
    if _is_number(total) and abs(sum(durations) - total) > weights.total_tolerance_seconds:
        score -= weights.total_mismatch_penalty

    return max(0, min(100, score))


def validate_structure(record, weights: QualityWeights = DEFAULT_WEIGHTS) -> StructureReport:
    data = _as_mapping(record)
    errors = []
    warnings = []

    name = data.get("name")
    if not name or not isinstance(name, str):
        errors.append("Missing or invalid athlete name")
    if not data.get("id"):
        errors.append("Missing athlete ID")

    category = data.get("category")
    if not category or not isinstance(category, str):
        warnings.append("Missing or invalid category")

    total = _total_time(data)
    if not total or not _is_number(total):
        errors.append("Missing or invalid total_time")

    events = _events(data)
    if events is None:
        errors.append("Events must be an array")
    else:
        for i, event in enumerate(events, start=1):
            if not _event_name(event):
                errors.append(f"Event {i}: Missing event name")
            duration = _duration(event)
            if not _is_number(duration) or duration <= 0:
                errors.append(f"Event {i}: Invalid duration")

    return StructureReport(
        is_valid=not errors,
        errors=errors,
        warnings=warnings,
        score=calculate_quality_score(data, errors, warnings, weights),
    )


def validate_timing(record, expected_events: int = EXPECTED_EVENT_COUNT) -> TimingReport:
    data = _as_mapping(record)
    events = _events(data)
    if events is None:
        return TimingReport(
            is_valid=False,
            issues=["No events to validate"],
            completeness=Completeness(total_events=0, expected_events=expected_events),
        )

    issues = []
    seen = set()
    for event in events:
        name = _event_name(event)
        if name in seen:
            issues.append(f"Duplicate event: {name}")
        seen.add(name)

    lowered = [_event_name(e).lower() for e in events]
    flags = {flag: any(token in n for n in lowered) for flag, token in COMPONENT_FAMILIES}
    missing = sum(1 for present in flags.values() if not present)
    if missing:
        issues.append(f"Missing {missing} major HYROX components")

    return TimingReport(
        is_valid=not issues,
        issues=issues,
        completeness=Completeness(total_events=len(events), expected_events=expected_events, **flags),
    )


def quality_report(record, weights: QualityWeights = DEFAULT_WEIGHTS) -> QualityReport:
    structure = validate_structure(record, weights)
    timing = validate_timing(record, weights.expected_event_count)
    return QualityReport(
        is_structurally_valid=structure.is_valid,
        errors=structure.errors,
        warnings=structure.warnings,
        score=structure.score,
        timing_issues=timing.issues,
        completeness=timing.completeness,
    )


def generate_recommendations(structure: StructureReport, timing: TimingReport) -> list[dict]:
    recommendations = []
    if not structure.is_valid:
        recommendations.append(
            {"type": "error", "message": "Fix data structure issues", "details": structure.errors}
        )
    if structure.warnings:
        recommendations.append(
            {"type": "warning", "message": "Address data quality warnings", "details": structure.warnings}
        )
    if not timing.is_valid:
        recommendations.append(
            {"type": "timing", "message": "Review event timing data", "details": timing.issues}
        )
    if structure.score < 70:
        recommendations.append(
            {
                "type": "improvement",
                "message": "Consider re-scraping this athlete data for better quality",
                "details": [f"Current quality score: {structure.score}/100"],
            }
        )
    return recommendations


def enrich_record(record, validated_at: datetime | None = None) -> dict:
    """Record mapping plus a "validation" block."""
    data = dict(_as_mapping(record))
    structure = validate_structure(data)
    timing = validate_timing(data)
    validated_at = validated_at or datetime.now(timezone.utc)
    data["validation"] = {
        "structure": asdict(structure),
        "timing": asdict(timing),
        "data_quality_score": structure.score,
        "recommendations": generate_recommendations(structure, timing),
        "last_validated": validated_at.isoformat(),
    }
    return data


def validate_batch(records, athlete_ids) -> dict:
    """Validate the records whose id is in athlete_ids (at most MAX_BATCH_SIZE)."""
    if not isinstance(athlete_ids, (list, tuple)):
        raise ValidationInputError(["athlete_ids must be a list"])
    if len(athlete_ids) > MAX_BATCH_SIZE:
        raise ValidationInputError([f"Maximum {MAX_BATCH_SIZE} athletes can be validated at once"])

    by_id = {}
    for record in records:
        data = _as_mapping(record)
        by_id.setdefault(data.get("id"), data)

    results = []
    not_found = []
    for raw_id in athlete_ids:
        try:
            athlete_id = int(raw_id)
        except (TypeError, ValueError):
            not_found.append(raw_id)
            continue
        data = by_id.get(athlete_id)
        if data is None:
            not_found.append(raw_id)
            continue
        structure = validate_structure(data)
        timing = validate_timing(data)
        results.append(
            {
                "athlete_id": athlete_id,
                "athlete_name": data.get("name"),
                "data_quality_score": structure.score,
                "is_valid": structure.is_valid and timing.is_valid,
                "error_count": len(structure.errors),
                "warning_count": len(structure.warnings),
                "issue_count": len(timing.issues),
            }
        )

    valid = sum(1 for r in results if r["is_valid"])
    average = sum(r["data_quality_score"] for r in results) / len(results) if results else 0
    return {
        "results": results,
        "not_found": not_found,
        "summary": {"total": len(results), "valid": valid, "average_score": average},
    }


def quality_stats(records) -> dict:
    """Score distribution and most common structural issues over records."""
    distribution = {"excellent": 0, "good": 0, "fair": 0, "poor": 0}
    issues = Counter()
    total_score = 0
    count = 0
    for record in records:
        report = validate_structure(record)
        count += 1
        total_score += report.score
        if report.score >= 90:
            distribution["excellent"] += 1
        elif report.score >= 70:
            distribution["good"] += 1
        elif report.score >= 50:
            distribution["fair"] += 1
        else:
            distribution["poor"] += 1
        issues.update(report.errors + report.warnings)
    return {
        "total_athletes": count,
        "average_quality_score": total_score / count if count else 0,
        "quality_distribution": distribution,
        "common_issues": dict(issues.most_common()),
    }


def validate_query_params(category=None, year=None, limit=None, now: datetime | None = None) -> None:
    """Boundary checks for listing parameters. Raises ValidationInputError."""
    errors = []
    if category is not None and str(category).lower() not in QUERY_CATEGORIES:
        errors.append("Invalid category. Must be: all, men, women, or mixed")
    if year is not None:
        max_year = (now or datetime.now()).year + 1
        try:
            year_num = int(year)
        except (TypeError, ValueError):
            year_num = None
        if year_num is None or year_num < 2020 or year_num > max_year:
            errors.append("Invalid year. Must be between 2020 and current year + 1")
    if limit is not None:
        try:
            limit_num = int(limit)
        except (TypeError, ValueError):
            limit_num = None
        if limit_num is None or limit_num < 1 or limit_num > MAX_ATHLETES_LIMIT:
            errors.append(f"Invalid limit. Must be between 1 and {MAX_ATHLETES_LIMIT}")
    if errors:
        raise ValidationInputError(errors)


def validate_athlete_id(value) -> int:
    try:
        athlete_id = int(value)
    except (TypeError, ValueError):
        athlete_id = 0
    if athlete_id < 1:
        raise ValidationInputError(["Invalid athlete ID. Must be a positive integer"])
    return athlete_id

"""
Time-string parsing for scraped split tables.
Converts "1:05:23.4", "4:32", "272.5", "4,32" and friends to seconds.
A failed parse is None, never 0.0.
"""
import logging
import re

from .models import ParsedTime

logger = logging.getLogger(__name__)

# Plausible durations (seconds) per event family, matched by substring of the
# lowercased label. Order matters: station names are checked before "run" so
# e.g. "1000m Row" never falls into the running band. Unknown labels pass.
EVENT_TIME_RANGE_SEC = [
    ("skierg", (180.0, 600.0)),
    ("ski erg", (180.0, 600.0)),
    ("sled push", (30.0, 300.0)),
    ("sled pull", (30.0, 300.0)),
    ("burpee", (180.0, 900.0)),
    ("row", (180.0, 600.0)),
    ("farmer", (60.0, 400.0)),
    ("lunge", (120.0, 600.0)),
    ("wall ball", (180.0, 900.0)),
    ("run", (180.0, 900.0)),
]

# Dash-like characters. En/em dash is how the results site writes "no result".
DASHES = "-–—"
NO_RESULT_DASHES = "–—"


def _normalize_fraction(frac: str | None) -> int:
    """Fraction digits -> milliseconds: "5" -> 500, "50" -> 500, "5001" -> 500."""
    if not frac:
        return 0
    if len(frac) == 1:
        return int(frac) * 100
    if len(frac) == 2:
        return int(frac) * 10
    return int(frac[:3])


def _hms(m):
    return int(m.group(1)), int(m.group(2)), int(m.group(3)), m.group(4)


def _ms(m):
    return 0, int(m.group(1)), int(m.group(2)), m.group(3)


def _s(m):
    return 0, 0, int(m.group(1)), m.group(2)


# (label, pattern, extractor) tried in order; first match wins.
# Extractors return (hours, minutes, seconds, fraction_digits).
TIME_PATTERNS = [
    ("H:MM:SS.fff", re.compile(r"^(\d{1,2}):(\d{2}):(\d{2})\.(\d{1,3})$"), _hms),
    ("H:MM:SS", re.compile(r"^(\d{1,2}):(\d{2}):(\d{2})()$"), _hms),
    ("M:SS.fff", re.compile(r"^(\d{1,2}):(\d{2})\.(\d{1,3})$"), _ms),
    ("M:SS", re.compile(r"^(\d{1,2}):(\d{2})()$"), _ms),
    ("SSS.fff", re.compile(r"^(\d{1,3})\.(\d{1,3})$"), _s),
    ("SSSS", re.compile(r"^(\d{1,4})()$"), _s),
]


def _fallback_seconds(text: str) -> float | None:
    """Use bare digit runs: 1 -> s, 2 -> m:s, 3+ -> h:m:s (first three)."""
    numbers = re.findall(r"\d+", text)
    if not numbers:
        return None
    if len(numbers) == 1:
        return float(int(numbers[0]))
    if len(numbers) == 2:
        return float(int(numbers[0]) * 60 + int(numbers[1]))
    h, m, s = (int(n) for n in numbers[:3])
    return float(h * 3600 + m * 60 + s)


def parse_time_to_seconds(text) -> float | None:
    """Parse a time string to unrounded seconds. None if unparseable or <= 0."""
    if not text or not isinstance(text, str):
        return None
    clean = re.sub(r"\s+", " ", text.strip())
    if not clean:
        return None
    seconds = None
    for label, pattern, extract in TIME_PATTERNS:
        m = pattern.match(clean)
        if m:
            h, mins, s, frac = extract(m)
            seconds = h * 3600 + mins * 60 + s + _normalize_fraction(frac) / 1000
            break
    if seconds is None:
        logger.debug("Unrecognized time format %r, trying digit fallback", text)
        seconds = _fallback_seconds(clean)
    if seconds is None or seconds <= 0:
        return None
    return seconds


def is_plausible(event_label: str | None, seconds: float, bands=None) -> bool:
    """Advisory range check. Unknown events are always plausible."""
    if not event_label:
        return True
    label = event_label.lower()
    for token, (lo, hi) in bands if bands is not None else EVENT_TIME_RANGE_SEC:
        if token in label:
            if seconds < lo or seconds > hi:
                logger.warning(
                    "Suspicious time for %s: %ss (expected %s-%ss)", event_label, seconds, lo, hi
                )
                return False
            return True
    return True


def parse_time(text, event_label: str | None = None) -> ParsedTime | None:
    """Parse a time string into a ParsedTime (seconds rounded to 2 decimals)."""
    seconds = parse_time_to_seconds(text)
    if seconds is None:
        return None
    cleaned = re.sub(r"\s+", " ", text.strip())
    return ParsedTime(
        original_text=text,
        cleaned_text=cleaned,
        seconds=round(seconds, 2),
        is_plausible=is_plausible(event_label, seconds),
    )


def cleanse_scraped(text, event_label: str | None) -> ParsedTime | None:
    """
    Clean a time cell from a results page and parse it.
    Handles annotations ("4:32 (PB)"), comma decimals ("4,32") and boundary
    hyphens ("- 4:32"). Any en/em dash, or a hyphen left inside the text,
    marks "no result" and yields None.
    """
    if not text or not isinstance(text, str):
        return None
    if any(ch in text for ch in NO_RESULT_DASHES):
        return None
    stripped = re.sub(rf"^\s*[{DASHES}]\s*", "", text)
    stripped = re.sub(rf"\s*[{DASHES}]\s*$", "", stripped)
    if any(ch in stripped for ch in DASHES):
        return None
    cleaned = re.sub(r"[^\d:.,]", "", stripped).replace(",", ".").strip()
    if not cleaned or cleaned in (".", ":"):
        return None
    seconds = parse_time_to_seconds(cleaned)
    if seconds is None:
        logger.warning("Invalid parsed time for %s: %r", event_label, text)
        return None
    return ParsedTime(
        original_text=text,
        cleaned_text=cleaned,
        seconds=round(seconds, 2),
        is_plausible=is_plausible(event_label, seconds),
    )


def format_seconds(seconds: float, pattern: str = "H:MM:SS") -> str:
    """Format seconds back to "H:MM:SS", "M:SS" or bare seconds ("SSSS")."""
    whole = int(round(seconds))
    if pattern == "H:MM:SS":
        h, rem = divmod(whole, 3600)
        m, s = divmod(rem, 60)
        return f"{h}:{m:02d}:{s:02d}"
    if pattern == "M:SS":
        m, s = divmod(whole, 60)
        return f"{m}:{s:02d}"
    return str(whole)

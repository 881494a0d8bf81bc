"""
Fetch roster and athlete detail pages from the results site and extract raw
(event label, time text, place) rows.
Retries each request with a linear backoff; paces athlete pages serially.
"""
import logging
import re
import threading
import time
from urllib.parse import parse_qs, urljoin, urlparse

import requests
from bs4 import BeautifulSoup

from .config import ScrapeConfig
from .errors import TransientFetchFailure
from .models import RawAthleteReference, RawEventEntry

logger = logging.getLogger(__name__)

# Athlete result pages look like ?content=detail&fpid=search&idp=JGDMS4JI62E4B
DETAIL_LINK_PATTERN = re.compile(r"content=detail")
ID_PARAM = "idp"
# Anchors that match the detail pattern but are site navigation, not athletes
SKIP_LINK_LABELS = {
    "Details", "Detail", "Results", "Result", "Leaderboard", "Overview",
    "Search", "Home", "Back", "Favorites", "Login", "Next", "Previous",
    ">", "<", ">>", "<<",
}
TIME_CELL_CLASS = "f-time_"


def _normalize_text(text: str) -> str:
    return re.sub(r"\s+", " ", (text or "").strip())


def _external_id(href: str, detail_url: str) -> str:
    qs = parse_qs(urlparse(href).query)
    values = qs.get(ID_PARAM)
    if values and values[0]:
        return values[0]
    return detail_url


def parse_roster(html: str, base_url: str = "") -> list[RawAthleteReference]:
    """
    Parse a roster (list) page. Returns athlete references in document order,
    one per external id.
    """
    soup = BeautifulSoup(html, "lxml")
    refs = []
    seen = set()
    for link in soup.find_all("a", href=DETAIL_LINK_PATTERN):
        name = _normalize_text(link.get_text())
        if not name or name in SKIP_LINK_LABELS:
            continue
        href = link.get("href") or ""
        detail_url = urljoin(base_url, href)
        external_id = _external_id(href, detail_url)
        if external_id in seen:
            continue
        seen.add(external_id)
        refs.append(RawAthleteReference(name=name, external_id=external_id, detail_url=detail_url))
    return refs


def parse_roster_metadata(html: str) -> dict[str, str]:
    """
    Page title and first heading of a roster page, e.g.
    {"title": "HYROX Results - Elite 15 Men"}. Empty values are left out.
    """
    soup = BeautifulSoup(html, "lxml")
    metadata = {}
    if soup.title is not None:
        title = _normalize_text(soup.title.get_text())
        if title:
            metadata["title"] = title
    heading = soup.find(["h1", "h2"])
    if heading is not None:
        text = _normalize_text(heading.get_text())
        if text:
            metadata["heading"] = text
    return metadata


def _header_texts(table) -> list[str]:
    """Header labels from thead; falls back to the first row's th cells."""
    thead = table.find("thead")
    if thead:
        return [_normalize_text(th.get_text()) for th in thead.find_all("th")]
    first_row = table.find("tr")
    if not first_row:
        return []
    return [_normalize_text(th.get_text()) for th in first_row.find_all("th")]


def _is_splits_table(table) -> bool:
    headers = _header_texts(table)
    return "Split" in headers and "Time" in headers


def _time_cell(row):
    """The formatted time cell (class f-time_*), else the first data cell."""
    cell = row.find("td", class_=lambda c: c and TIME_CELL_CLASS in c)
    if cell is not None:
        return cell
    return row.find("td")


def parse_athlete_events(html: str) -> list[RawEventEntry]:
    """
    Parse an athlete detail page. Only the first table with both a "Split"
    and a "Time" header is read; rows without a time (or with the "–" no
    result marker) are skipped.
    """
    soup = BeautifulSoup(html, "lxml")
    table = None
    for candidate in soup.find_all("table"):
        if _is_splits_table(candidate):
            table = candidate
            break
    if table is None:
        logger.debug("No Split/Time table found")
        return []
    body = table.find("tbody") or table
    entries = []
    for row in body.find_all("tr"):
        event_cell = row.find("th", class_="desc")
        if event_cell is None:
            continue
        label = _normalize_text(event_cell.get_text())
        cells = row.find_all("td")
        time_cell = _time_cell(row)
        time_text = _normalize_text(time_cell.get_text()) if time_cell is not None else ""
        place_text = _normalize_text(cells[-1].get_text()) if cells else ""
        if not label or not time_text or "–" in time_text:
            logger.debug("Skipping row %r: time=%r", label, time_text)
            continue
        if "–" in place_text or place_text in ("-", "—"):
            place_text = ""
        entries.append(RawEventEntry(event_label=label, time_text=time_text, place_text=place_text))
    return entries


def parse_athlete_info(html: str) -> dict[str, str]:
    """
    Label/value rows (th.desc + td) outside the split table, e.g.
    {"Division": "HYROX PRO", "Age Group": "30-34"}. First value per label wins.
    """
    soup = BeautifulSoup(html, "lxml")
    info = {}
    for table in soup.find_all("table"):
        if _is_splits_table(table):
            continue
        for row in table.find_all("tr"):
            label_cell = row.find("th", class_="desc")
            value_cell = row.find("td")
            if label_cell is None or value_cell is None:
                continue
            label = _normalize_text(label_cell.get_text())
            value = _normalize_text(value_cell.get_text())
            if label and value and label not in info:
                info[label] = value
    return info


class ResultFetcher:
    """HTTP access to the results site with retries and pacing."""

    def __init__(self, config: ScrapeConfig | None = None, session: requests.Session | None = None):
        self.config = config or ScrapeConfig()
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": self.config.user_agent})

    def fetch_html(self, url: str) -> str:
        """GET url; retry on network errors and non-2xx, then raise TransientFetchFailure."""
        attempts = max(1, self.config.retry_count)
        last_error = None
        for attempt in range(1, attempts + 1):
            try:
                resp = self.session.get(url, timeout=self.config.request_timeout)
                if 200 <= resp.status_code < 300:
                    return resp.text
                last_error = f"HTTP {resp.status_code}"
            except requests.RequestException as e:
                last_error = str(e)
            logger.warning("Attempt %d/%d failed for %s: %s", attempt, attempts, url, last_error)
            if attempt < attempts:
                time.sleep(attempt * self.config.retry_base_delay)
        raise TransientFetchFailure(url, attempts, last_error)

    def fetch_roster_page(self, url: str) -> tuple[list[RawAthleteReference], dict[str, str]]:
        """Athlete references plus page metadata (title/heading naming the division)."""
        html = self.fetch_html(url)
        refs = parse_roster(html, base_url=url)
        logger.info("Roster %s: %d athletes", url, len(refs))
        return refs, parse_roster_metadata(html)

    def fetch_roster(self, url: str) -> list[RawAthleteReference]:
        return self.fetch_roster_page(url)[0]

    def fetch_athlete_events(self, url: str) -> list[RawEventEntry]:
        html = self.fetch_html(url)
        return parse_athlete_events(html)

    def iter_athlete_events(self, references, stop_event: threading.Event | None = None):
        """
        Fetch each athlete in turn, sleeping request_delay between athletes.
        Yields (reference, entries) or (reference, TransientFetchFailure).
        Setting stop_event ends the walk before the next athlete.
        """
        for i, ref in enumerate(references):
            if i > 0 and self.config.request_delay > 0:
                if stop_event is not None:
                    if stop_event.wait(self.config.request_delay):
                        return
                else:
                    time.sleep(self.config.request_delay)
            if stop_event is not None and stop_event.is_set():
                return
            try:
                entries = self.fetch_athlete_events(ref.detail_url)
            except TransientFetchFailure as e:
                yield ref, e
                continue
            yield ref, entries

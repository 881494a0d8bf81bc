"""
Tests for the roster walk end to end, with the HTTP session mocked.
"""

import threading
from unittest.mock import MagicMock

import pytest

from hyrox_scraper.config import ScrapeConfig
from hyrox_scraper.errors import TransientFetchFailure
from hyrox_scraper.fetch import ResultFetcher
from hyrox_scraper.fetch_rendered_html import fixture_name
from hyrox_scraper.models import IngestionResult
from hyrox_scraper.run import _records_json, build_transformer, main, scrape_roster
from hyrox_scraper.transform import MissingSlotPolicy
from tests.conftest import ROSTER_URL

BROKEN_ID = "JGDMS4JI6311B"


def _response(status=200, text=""):
    resp = MagicMock()
    resp.status_code = status
    resp.text = text
    return resp


@pytest.fixture
def config():
    return ScrapeConfig(request_delay=0, retry_base_delay=0, retry_count=2, season_year=2025, location="Berlin")


@pytest.fixture
def site(roster_html, detail_html):
    """Session routing the roster URL, one broken athlete and healthy athletes."""
    def get(url, timeout):
        if url == ROSTER_URL:
            return _response(200, roster_html)
        if BROKEN_ID in url:
            return _response(503)
        return _response(200, detail_html)

    session = MagicMock()
    session.get.side_effect = get
    return session


class TestScrapeRoster:

    def test_walk_skips_failed_athlete(self, config, site):
        fetcher = ResultFetcher(config, session=site)
        result = scrape_roster(ROSTER_URL, config, fetcher=fetcher)

        assert [r.name for r in result.records] == ["Hunter McIntyre", "Tim Wenisch"]
        assert [r.ranking for r in result.records] == [1, 3]
        assert [r.id for r in result.records] == [1, 3]
        assert result.skipped == ["Alexander Rončević"]
        assert result.unmapped_labels == ["Roxzone Time"]
        assert result.parse_failures == 0
        assert not result.stopped_early

    def test_record_fields(self, config, site):
        result = scrape_roster(ROSTER_URL, config, fetcher=ResultFetcher(config, session=site))
        record = result.records[0]
        assert record.external_id == "JGDMS4JI62E4B"
        assert record.year == 2025
        assert record.location == "Berlin"
        assert len(record.events) == 16
        assert record.total_time_seconds == 4252.0

    def test_max_athletes(self, config, site):
        config.max_athletes = 1
        result = scrape_roster(ROSTER_URL, config, fetcher=ResultFetcher(config, session=site))
        assert len(result.records) == 1
        # roster + one athlete
        assert site.get.call_count == 2

    def test_roster_failure_raises(self, config):
        session = MagicMock()
        session.get.return_value = _response(500)
        with pytest.raises(TransientFetchFailure):
            scrape_roster(ROSTER_URL, config, fetcher=ResultFetcher(config, session=session))

    def test_stop_event(self, config, site):
        stop = threading.Event()
        route = site.get.side_effect

        def get(url, timeout):
            if url != ROSTER_URL:
                stop.set()
            return route(url, timeout)

        site.get.side_effect = get
        result = scrape_roster(ROSTER_URL, config, fetcher=ResultFetcher(config, session=site), stop_event=stop)
        assert len(result.records) == 1
        assert result.stopped_early

    def test_category_from_roster_title(self, config, site):
        result = scrape_roster(ROSTER_URL, config, fetcher=ResultFetcher(config, session=site))
        assert result.roster_metadata == {"title": "HYROX Results - Elite 15 Men"}
        assert [r.category for r in result.records] == ["men", "men"]

    def test_json_output(self, config, site):
        result = scrape_roster(ROSTER_URL, config, fetcher=ResultFetcher(config, session=site))
        out = _records_json(result)
        assert '"quality"' in out
        assert '"score": 100' in out


class TestCli:

    def test_build_transformer_policy(self):
        assert build_transformer(ScrapeConfig()).missing_slots is MissingSlotPolicy.OMIT
        filled = build_transformer(ScrapeConfig(fill_missing_slots=True))
        assert filled.missing_slots is MissingSlotPolicy.FILL_DEFAULT

    def test_bad_year_exits(self, monkeypatch):
        monkeypatch.setattr("hyrox_scraper.run.ScrapeConfig.from_env", classmethod(lambda cls: cls()))
        with pytest.raises(SystemExit) as exc:
            main([ROSTER_URL, "--year", "2001", "--dry-run"])
        assert exc.value.code == 2

    def test_missing_roster_url_exits(self, monkeypatch):
        monkeypatch.setattr("hyrox_scraper.run.ScrapeConfig.from_env", classmethod(lambda cls: cls()))
        with pytest.raises(SystemExit) as exc:
            main(["--dry-run"])
        assert exc.value.code == 2

    @pytest.mark.parametrize(
        "url, name",
        [
            ("https://results.hyrox.com/season-7/?content=detail&idp=JGDMS4JI62E4B", "athlete_JGDMS4JI62E4B.html"),
            ("https://results.hyrox.com/season-7/?pid=list&page=3", "roster_3.html"),
            ("https://results.hyrox.com/season-7/", "roster_1.html"),
        ],
    )
    def test_fixture_name(self, url, name):
        assert fixture_name(url) == name


class TestRunBookkeeping:

    @pytest.fixture
    def store(self, monkeypatch):
        """Patch the db collaborator; returns (conn, calls in order)."""
        monkeypatch.setattr(
            "hyrox_scraper.run.ScrapeConfig.from_env",
            classmethod(lambda cls: cls(database_url="postgresql://localhost/hyrox")),
        )
        calls = []
        conn = MagicMock()
        conn.rollback.side_effect = lambda: calls.append(("rollback",))
        monkeypatch.setattr("hyrox_scraper.db.get_db", lambda url=None: conn)
        monkeypatch.setattr("hyrox_scraper.db.start_run", lambda conn, roster_url=None: 5)
        monkeypatch.setattr("hyrox_scraper.db.upsert_athlete_records", lambda conn, records: len(records))
        monkeypatch.setattr(
            "hyrox_scraper.db.finish_run",
            lambda conn, run_id, status, processed, error_message=None: calls.append(
                ("finish", run_id, status, error_message)
            ),
        )
        return conn, calls

    def test_success(self, monkeypatch, store):
        conn, calls = store
        monkeypatch.setattr("hyrox_scraper.run.scrape_roster", lambda url, config: IngestionResult())
        main([ROSTER_URL])
        assert calls == [("finish", 5, "success", None)]
        conn.close.assert_called_once()

    def test_write_error_marks_run_failed(self, monkeypatch, store):
        conn, calls = store
        monkeypatch.setattr("hyrox_scraper.run.scrape_roster", lambda url, config: IngestionResult())

        def upsert(conn, records):
            raise RuntimeError("db write failed")

        monkeypatch.setattr("hyrox_scraper.db.upsert_athlete_records", upsert)
        with pytest.raises(RuntimeError):
            main([ROSTER_URL])
        assert calls == [("rollback",), ("finish", 5, "failed", "db write failed")]
        conn.close.assert_called_once()

    def test_roster_failure_marks_run_failed(self, monkeypatch, store):
        _, calls = store

        def scrape(url, config):
            raise TransientFetchFailure(url, 3, "HTTP 503")

        monkeypatch.setattr("hyrox_scraper.run.scrape_roster", scrape)
        with pytest.raises(TransientFetchFailure):
            main([ROSTER_URL])
        assert calls[-1][:3] == ("finish", 5, "failed")
        assert "HTTP 503" in calls[-1][3]

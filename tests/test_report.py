"""
Tests for the stored-athlete quality report.
"""

from datetime import datetime
from unittest.mock import MagicMock

import pytest

from hyrox_scraper.config import ScrapeConfig
from hyrox_scraper.errors import ValidationInputError
from hyrox_scraper.report import build_report, main
from hyrox_scraper.transform import ResultTransformer
from tests.conftest import DETAIL_DURATIONS, parsed

STATS = {"total_athletes": 2, "men_count": 1, "women_count": 1, "last_update": datetime(2025, 3, 1, 12, 0)}


@pytest.fixture
def records():
    full = {name: parsed(s) for name, s in DETAIL_DURATIONS.items()}
    transformer = ResultTransformer()
    return [
        transformer.transform(1, "Hunter McIntyre", full, metadata={"title": "Elite 15 Men"}),
        transformer.transform(2, "Lauren Weeks", {"Running 1": parsed(250.0)}, metadata={"title": "Elite 15 Women"}),
    ]


class TestBuildReport:

    def test_summary(self, records):
        report = build_report(records, STATS)
        assert report["stats"] == STATS
        assert report["quality"]["total_athletes"] == 2
        assert report["quality"]["quality_distribution"]["excellent"] == 1
        assert "batch" not in report

    def test_batch(self, records):
        report = build_report(records, STATS, athlete_ids=["2", "7"])
        batch = report["batch"]
        assert [r["athlete_id"] for r in batch["results"]] == [2]
        assert batch["not_found"] == [7]
        assert batch["summary"]["valid"] == 0

    def test_bad_id(self, records):
        with pytest.raises(ValidationInputError):
            build_report(records, STATS, athlete_ids=["abc"])


class TestMain:

    @pytest.fixture
    def store(self, monkeypatch, records):
        monkeypatch.setattr(
            "hyrox_scraper.report.ScrapeConfig.from_env",
            classmethod(lambda cls: ScrapeConfig(database_url="postgresql://localhost/hyrox")),
        )
        conn = MagicMock()
        monkeypatch.setattr("hyrox_scraper.db.get_db", lambda url=None: conn)
        monkeypatch.setattr("hyrox_scraper.db.load_athlete_records", lambda conn: records)
        monkeypatch.setattr("hyrox_scraper.db.get_stats", lambda conn: STATS)
        return conn

    def test_prints_counts_and_batch(self, store, capsys):
        main(["--ids", "1", "2"])
        out = capsys.readouterr().out
        assert "Athletes: 2 (men 1, women 1)" in out
        assert "Validated 2 athlete(s), 1 valid" in out
        assert "#1 Hunter McIntyre: 100/100 OK" in out
        store.close.assert_called_once()

    def test_json(self, store, capsys):
        main(["--ids", "2", "--json"])
        out = capsys.readouterr().out
        assert '"Lauren Weeks"' in out
        assert '"data_quality_score": 55' in out
        assert "Hunter McIntyre" not in out

    def test_invalid_id_exits(self, store):
        with pytest.raises(SystemExit) as exc:
            main(["--ids", "0"])
        assert exc.value.code == 2

"""Tests for the tunable parsing heuristics."""

from packages.statement_ingestion.config import IngestionSettings


class TestIngestionSettings:
    def test_defaults(self, monkeypatch):
        for name in ("STATEMENT_LINE_TOLERANCE", "STATEMENT_SERIAL_NUMBER_MAX", "STATEMENT_MARKER_WINDOW"):
            monkeypatch.delenv(name, raising=False)

        settings = IngestionSettings()
        assert settings.LINE_TOLERANCE == 4.0
        assert settings.HEADER_SCAN_ROWS == 100
        assert settings.HEADER_SCORE_THRESHOLD == 2.0
        assert settings.SERIAL_NUMBER_MAX == 1000
        assert settings.REFERENCE_NUMBER_MIN == 1000
        assert (settings.YEAR_MIN, settings.YEAR_MAX) == (1990, 2030)
        assert settings.MARKER_WINDOW == 15

    def test_env_prefix_overrides(self, monkeypatch):
        monkeypatch.setenv("STATEMENT_LINE_TOLERANCE", "5.5")
        monkeypatch.setenv("STATEMENT_MARKER_WINDOW", "20")

        settings = IngestionSettings()
        assert settings.LINE_TOLERANCE == 5.5
        assert settings.MARKER_WINDOW == 20

    def test_unprefixed_vars_are_ignored(self, monkeypatch):
        monkeypatch.setenv("MARKER_WINDOW", "99")
        monkeypatch.delenv("STATEMENT_MARKER_WINDOW", raising=False)
        assert IngestionSettings().MARKER_WINDOW == 15

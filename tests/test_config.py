"""Tests for the config module."""

from rollmark.config import Settings, _parse_cors_origins, _parse_sentinel
from rollmark.mapping import DetectionPolicy


class TestParseCorsOrigins:
    """Test CORS origins parsing."""

    def test_parse_cors_origins_with_value(self, monkeypatch):
        """Test parsing CORS origins from environment variable."""
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://localhost:3000,http://localhost:8080")
        assert _parse_cors_origins() == ["http://localhost:3000", "http://localhost:8080"]

    def test_parse_cors_origins_without_value(self, monkeypatch):
        """Test default CORS origins when not set."""
        monkeypatch.delenv("CORS_ALLOW_ORIGINS", raising=False)
        assert _parse_cors_origins() == ["*"]


class TestParseSentinel:
    """Test attendance sentinel parsing."""

    def test_default_is_integer_one(self, monkeypatch):
        monkeypatch.delenv("ATTENDANCE_SENTINEL", raising=False)
        assert _parse_sentinel() == 1
        assert isinstance(_parse_sentinel(), int)

    def test_numbers_stay_numeric(self, monkeypatch):
        monkeypatch.setenv("ATTENDANCE_SENTINEL", "0.5")
        assert _parse_sentinel() == 0.5

    def test_text_sentinel(self, monkeypatch):
        monkeypatch.setenv("ATTENDANCE_SENTINEL", " P ")
        assert _parse_sentinel() == "P"


class TestSettings:
    """Test Settings configuration."""

    def test_defaults(self):
        """Test the heuristic and apply defaults."""
        s = Settings()
        assert s.section_marker == "attendance section"
        assert s.lecture_marker == "attendance lecture"
        assert s.name_likeness_threshold == 0.5
        assert s.id_likeness_threshold == 0.5
        assert s.scan_window_rows == 50
        assert s.highlight_color == "FFFF00"
        assert s.search_result_limit == 30

    def test_explicit_overrides(self):
        """Test settings can be overridden explicitly."""
        s = Settings(min_id_length=8, highlight_enabled=False, port=9000)
        assert s.min_id_length == 8
        assert s.highlight_enabled is False
        assert s.port == 9000

    def test_detection_policy_from_settings(self):
        """Test the detection policy mirrors settings."""
        s = Settings(scan_window_rows=10, id_likeness_threshold=0.7, lecture_marker="lecture")
        policy = DetectionPolicy.from_settings(s)
        assert policy.scan_window_rows == 10
        assert policy.id_likeness_threshold == 0.7
        assert policy.lecture_marker == "lecture"

"""Tests for configuration parsing and shared utilities."""
from unittest.mock import patch

import pytest

from adwall.core import utils
from adwall.core.config import Settings


class TestGenerateAdId:

    @pytest.fixture(autouse=True)
    def fresh_sequence(self, monkeypatch):
        monkeypatch.setattr(utils, "_last_ad_id", 0)

    def test_is_millisecond_timestamp(self):
        with patch.object(utils.time, "time", return_value=4_000_000_000.125):
            assert utils.generate_ad_id() == "4000000000125"

    def test_same_millisecond_still_unique(self):
        with patch.object(utils.time, "time", return_value=5_000_000_000.0):
            ids = [utils.generate_ad_id() for _ in range(3)]

        assert ids == ["5000000000000", "5000000000001", "5000000000002"]

    def test_never_goes_backwards(self):
        with patch.object(utils.time, "time", return_value=6_000_000_000.0):
            first = utils.generate_ad_id()
        with patch.object(utils.time, "time", return_value=1.0):
            second = utils.generate_ad_id()

        assert int(second) == int(first) + 1


@pytest.mark.parametrize("original, suffix", [
    ("clip.MP4", ".mp4"),
    ("../../etc/passwd", ""),
    ("movie.tar.webm", ".webm"),
    ("weird.m$v", ""),
    (None, ""),
])
def test_build_upload_name(original, suffix):
    name = utils.build_upload_name(original)
    stem, _, random_part = name.partition("-")

    assert stem.isdigit()
    assert "/" not in name
    assert name.endswith(suffix)
    assert random_part[:8].isalnum()


class TestSettings:

    def test_defaults(self, make_settings):
        settings = make_settings()

        assert settings.storage.backend == "memory"
        assert settings.upload.max_files == 5
        assert settings.upload.max_bytes == 50 * 1024 * 1024
        assert settings.json_limit_bytes == 10 * 1024 * 1024
        assert settings.cors_origins == ["*"]
        assert settings.form_config_file is None
        assert settings.upstash.configured is False

    def test_environment_overrides(self, make_settings):
        settings = make_settings(
            ADWALL_CORS_ORIGINS="https://a.example, https://b.example",
            ADWALL_STORE=" Async-File ",
            ADWALL_UPLOAD_MAX_FILES=2,
            UPSTASH_REDIS_REST_URL="https://x.upstash.io",
            UPSTASH_REDIS_REST_TOKEN="t",
        )

        assert settings.storage.backend == "async-file"
        assert settings.upload.max_files == 2
        assert settings.cors_origins == ["https://a.example", "https://b.example"]
        assert settings.upstash.configured is True
        assert settings.upstash.headers["Authorization"] == "Bearer t"

    def test_unknown_backend(self, make_settings):
        with pytest.raises(ValueError, match="Unknown ADWALL_STORE"):
            make_settings(ADWALL_STORE="postgres")

    def test_port(self, monkeypatch):
        monkeypatch.setenv("PORT", "9001")

        assert Settings().server_port == 9001

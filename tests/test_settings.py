from contribgraph.settings import Settings


def test_settings_defaults_match_contribution_window() -> None:
    settings = Settings()

    assert settings.contributions_api_url.startswith("https://")
    assert settings.cache_ttl_seconds == 1800
    assert settings.calendar_window_weeks == 39
    assert settings.calendar_week_start == 6


def test_settings_reads_upstream_url_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("CONTRIBUTIONS_API_URL", "https://mirror.example.test/v4")
    monkeypatch.setenv("CACHE_TTL_SECONDS", "60")

    settings = Settings()

    assert settings.contributions_api_url == "https://mirror.example.test/v4"
    assert settings.cache_ttl_seconds == 60

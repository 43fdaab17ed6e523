from doccollab.core.config import Settings


def test_settings_fields():
    assert set(Settings.model_fields) == {
        "database_url",
        "database_echo",
        "jwt_secret",
        "jwt_algorithm",
        "max_versions",
        "min_version_interval_seconds",
        "presence_stale_seconds",
        "maintenance_interval_seconds",
        "search_limit",
        "log_level",
    }


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("MAX_VERSIONS", "7")
    monkeypatch.setenv("PRESENCE_STALE_SECONDS", "15")

    configured = Settings(_env_file=None)

    assert configured.max_versions == 7
    assert configured.presence_stale_seconds == 15

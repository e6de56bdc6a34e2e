from unittest.mock import patch

from frictionless import config


def test_get_secret_prefers_environment(monkeypatch):
    monkeypatch.setenv("CRON_SECRET", "from-env")
    assert config._get_secret("CRON_SECRET") == "from-env"


def test_get_secret_without_gcp_project_is_empty(monkeypatch):
    monkeypatch.delenv("CRON_SECRET", raising=False)
    with patch.object(config, "GCP_PROJECT_ID", ""):
        assert config._get_secret("CRON_SECRET") == ""


def test_get_secret_unknown_name_is_empty(monkeypatch):
    monkeypatch.delenv("SOMETHING_ELSE", raising=False)
    with patch.object(config, "GCP_PROJECT_ID", "my-project"):
        assert config._get_secret("SOMETHING_ELSE") == ""


def test_get_int(monkeypatch):
    monkeypatch.setenv("RECALC_MAX_WORKERS", "4")
    assert config._get_int("RECALC_MAX_WORKERS", 1) == 4
    monkeypatch.setenv("RECALC_MAX_WORKERS", "four")
    assert config._get_int("RECALC_MAX_WORKERS", 1) == 1
    monkeypatch.delenv("RECALC_MAX_WORKERS")
    assert config._get_int("RECALC_MAX_WORKERS", 1) == 1

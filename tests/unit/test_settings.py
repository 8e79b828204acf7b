"""Unit tests for operator settings."""

import importlib
import logging
import argonaut
from argonaut.types.settings import Settings, _getenv


class TestGetenv:
    def test_booleans_are_parsed(self, monkeypatch):
        monkeypatch.setenv("ARGONAUT_FLAG", "yes")
        assert _getenv("ARGONAUT_FLAG", False) is True
        monkeypatch.setenv("ARGONAUT_FLAG", "0")
        assert _getenv("ARGONAUT_FLAG", True) is False

    def test_plain_value(self, monkeypatch):
        monkeypatch.setenv("ARGONAUT_VALUE", "quay.io/argoproj/argocd")
        assert _getenv("ARGONAUT_VALUE") == "quay.io/argoproj/argocd"

    def test_default_when_unset(self, monkeypatch):
        monkeypatch.delenv("ARGONAUT_MISSING", raising=False)
        assert _getenv("ARGONAUT_MISSING", 60.0) == 60.0


class TestSettings:
    def test_defaults(self):
        conf = Settings()
        assert conf.conflict_retry_delay_seconds < conf.transient_retry_delay_seconds
        assert conf.cluster_secret_label_selector == "argocd.argoproj.io/secret-type=cluster"
        assert conf.controller_default_replicas == 1

    def test_overrides_apply_to_instance_only(self):
        conf = Settings(controller_default_replicas=3, default_argocd_version="v2.11.0")
        assert conf.controller_default_replicas == 3
        assert conf.default_argocd_version == "v2.11.0"
        assert Settings().controller_default_replicas == Settings.controller_default_replicas


class TestEnvFile:
    def test_loaded_env_file_is_logged(self, tmp_path, monkeypatch, caplog):
        env_file = tmp_path / "operator.env"
        env_file.write_text("# no overrides\n")
        monkeypatch.setenv("ENV_FILE", str(env_file))

        with caplog.at_level(logging.INFO, logger="argonaut"):
            importlib.reload(argonaut)

        assert f"Loading environment variables from {env_file}" in caplog.text

"""
Tests for the configuration manager.
"""
import json

import yaml

from modkernel.config.defaults import build_default_config
from modkernel.config.manager import CONFIG_ENV_VAR, ConfigManager, default_config_path


class TestConfigManager:

    def test_missing_file_uses_defaults_and_persists(self, tmp_path):
        path = tmp_path / "nested" / "config.json"
        manager = ConfigManager(defaults=build_default_config(), config_path=str(path))

        manager.load()

        assert manager.get("web.port") == 3000
        assert json.loads(path.read_text(encoding="utf-8"))["web"]["host"] == "0.0.0.0"

    def test_load_without_persist_writes_nothing(self, tmp_path):
        path = tmp_path / "config.json"
        manager = ConfigManager(defaults={"a": 1}, config_path=str(path))

        manager.load(persist=False)

        assert manager.get("a") == 1
        assert not path.exists()

    def test_file_values_win_over_defaults(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"web": {"port": 8080}}), encoding="utf-8")
        manager = ConfigManager(defaults=build_default_config(), config_path=str(path))

        manager.load(persist=False)

        assert manager.get("web.port") == 8080
        assert manager.get("web.host") == "0.0.0.0"

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("modules:\n  enabled:\n    - modkernel.modules.logger\n", encoding="utf-8")
        manager = ConfigManager(defaults=build_default_config(), config_path=str(path))

        manager.load()

        assert manager.get("modules.enabled") == ["modkernel.modules.logger"]
        assert yaml.safe_load(path.read_text(encoding="utf-8"))["logging"]["level"] == "INFO"

    def test_corrupt_file_falls_back_to_defaults(self, tmp_path, caplog):
        path = tmp_path / "config.json"
        path.write_text("{not json", encoding="utf-8")
        manager = ConfigManager(defaults={"web": {"port": 3000}}, config_path=str(path))

        manager.load(persist=False)

        assert manager.get("web.port") == 3000
        assert any(r.levelname == "WARNING" for r in caplog.records)

    def test_non_mapping_file_falls_back(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")
        manager = ConfigManager(defaults={"a": 1}, config_path=str(path))

        manager.load(persist=False)

        assert manager.as_dict() == {"a": 1}

    def test_set_and_save_round_trip(self, tmp_path):
        path = tmp_path / "config.json"
        manager = ConfigManager(defaults={}, config_path=str(path))
        manager.load(persist=False)

        manager.set("web.port", 9000)
        manager.save()

        reloaded = ConfigManager(config_path=str(path))
        reloaded.load(persist=False)
        assert reloaded.get("web.port") == 9000

    def test_defaults_are_not_shared_between_managers(self, tmp_path):
        defaults = build_default_config()
        first = ConfigManager(defaults=defaults, config_path=str(tmp_path / "a.json"))
        first.load(persist=False)

        first.get("modules.enabled").append("extra")

        assert "extra" not in defaults["modules"]["enabled"]

    def test_env_var_overrides_path(self, monkeypatch, tmp_path):
        target = str(tmp_path / "env.json")
        monkeypatch.setenv(CONFIG_ENV_VAR, target)

        assert default_config_path() == target
        assert ConfigManager().path == target

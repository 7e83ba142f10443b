import json
import logging

import yaml

from ai_archive_mcp.tools.catalog_config import (
    DEFAULT_CONFIG_PATH,
    DEFAULT_MODULE_ORDER,
    ToolsConfig,
    default_tools_config,
    load_tools_config,
    save_tools_config,
)


class TestLoadToolsConfig:
    """Reading the configuration document."""

    def test_shipped_document(self):
        config = load_tools_config(DEFAULT_CONFIG_PATH)
        assert config.load_order() == DEFAULT_MODULE_ORDER
        assert all(config.is_enabled(name) for name in DEFAULT_MODULE_ORDER)
        assert config.enabled_modules["search"].description

    def test_missing_file_falls_back(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING):
            config = load_tools_config(tmp_path / "absent.yaml")
        assert config == default_tools_config()
        assert "Using defaults" in caplog.text

    def test_malformed_yaml_falls_back(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("enabledModules: [unclosed\n")
        assert load_tools_config(path).load_order() == DEFAULT_MODULE_ORDER

    def test_non_mapping_document_falls_back(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- search\n- papers\n")
        assert load_tools_config(path).load_order() == DEFAULT_MODULE_ORDER

    def test_json_document_accepted(self, tmp_path):
        path = tmp_path / "tools-config.json"
        path.write_text(json.dumps({"enabledModules": {"papers": {"enabled": True}}}))
        config = load_tools_config(path)
        assert config.load_order() == ["papers"]

    def test_non_mapping_entries_are_disabled(self):
        config = ToolsConfig.model_validate({
            "enabledModules": {"search": True, "papers": {"enabled": "yes"}, "agents": {}},
        })
        assert not config.is_enabled("search")
        assert config.is_enabled("papers")
        assert not config.is_enabled("agents")
        assert config.enabled_modules["agents"].name == "agents"

    def test_load_order_may_reference_unknown_names(self):
        config = ToolsConfig.model_validate({
            "enabledModules": {"search": {"enabled": True}},
            "moduleLoadOrder": ["ghost", "search"],
        })
        assert config.load_order() == ["ghost", "search"]
        assert not config.is_enabled("ghost")


class TestSaveToolsConfig:
    """Persisting the configuration document."""

    def test_yaml_round_trip_keeps_order_and_extras(self, tmp_path):
        path = tmp_path / "tools-config.yaml"
        config = ToolsConfig.model_validate({
            "enabledModules": {
                "platform": {"enabled": True, "description": "Guidance", "owner": "docs"},
                "search": {"enabled": False},
            },
        })
        assert save_tools_config(config, path) is True

        document = yaml.safe_load(path.read_text())
        assert list(document["enabledModules"]) == ["platform", "search"]
        assert document["enabledModules"]["platform"] == {
            "enabled": True, "description": "Guidance", "owner": "docs"
        }
        assert "moduleLoadOrder" not in document

    def test_json_suffix_writes_json(self, tmp_path):
        path = tmp_path / "tools-config.json"
        assert save_tools_config(default_tools_config(), path) is True
        assert json.loads(path.read_text())["moduleLoadOrder"] == DEFAULT_MODULE_ORDER

    def test_unwritable_path_returns_false(self, tmp_path):
        assert save_tools_config(default_tools_config(), tmp_path / "missing-dir" / "x.yaml") is False

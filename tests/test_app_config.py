"""Tests for the application routing table."""

import json

import pytest
from pydantic import ValidationError

from deeplink_router.core.app_config import ConfigTable, load_config_table
from deeplink_router.services.exceptions import ConfigTableError
from tests.conftest import APPS_CONFIG, DEFAULT_FALLBACK


class TestConfigTable:
    """Test lookups on a loaded table."""

    def test_get_known_app(self, config_table):
        app = config_table.get("acmeApp")
        assert app is not None
        assert app.fallback_url == "https://acme.test/open?src=link&r=old"
        assert app.ios.app_identifier == "T1.com.acme.app"
        assert app.android.sha256_cert_fingerprints == ("AA:BB", "CC:DD")

    def test_get_unknown_app(self, config_table):
        assert config_table.get("nope") is None

    def test_default_route(self, config_table):
        assert config_table.get("acmeApp").default_route == "/"
        assert config_table.get("shopApp").default_route == "/home"

    def test_fallback_for(self, config_table):
        assert config_table.fallback_for("shopApp") == "https://shop.test"
        assert config_table.fallback_for("nope") == DEFAULT_FALLBACK

    def test_is_immutable(self, config_table):
        with pytest.raises(ValidationError):
            config_table.domain = "evil.test"
        with pytest.raises(ValidationError):
            config_table.get("acmeApp").fallback_url = "https://evil.test"

    def test_rejects_duplicate_app_ids(self):
        config = dict(APPS_CONFIG, apps=[APPS_CONFIG["apps"][0], APPS_CONFIG["apps"][0]])
        with pytest.raises(ValidationError, match="Duplicate appId"):
            ConfigTable.model_validate(config)


class TestLoadConfigTable:
    """Test loading the table from disk."""

    def test_loads_json_file(self, tmp_path):
        path = tmp_path / "apps.config.json"
        path.write_text(json.dumps(APPS_CONFIG), encoding="utf-8")

        table = load_config_table(path)

        assert table.domain == "links.test"
        assert [app.app_id for app in table.apps] == ["acmeApp", "shopApp"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigTableError, match="Cannot read"):
            load_config_table(tmp_path / "missing.json")

    def test_invalid_content(self, tmp_path):
        path = tmp_path / "apps.config.json"
        path.write_text(json.dumps({"apps": []}), encoding="utf-8")
        with pytest.raises(ConfigTableError, match="Invalid app config"):
            load_config_table(path)

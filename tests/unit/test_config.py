"""Unit tests for configuration management."""

import orjson
import pytest
import yaml
from pathlib import Path

from stork_validator.config.defaults import get_default_config
from stork_validator.config.loader import AppConfig, ConfigLoader
from stork_validator.config.validation import ConfigValidator
from stork_validator.errors import ConfigurationError


def _write_yaml(path: Path, data) -> Path:
    path.write_text(yaml.safe_dump(data))
    return path


class TestDefaultConfig:
    """Test suite for default configuration."""

    def test_default_config_creation(self) -> None:
        """Test that default configuration can be created."""
        config = get_default_config()
        assert config.stork.intervalSeconds == 10
        assert config.threads.maxWorkers == 10
        assert config.session.rotationSeconds == 3600
        assert config.validation.freshnessSeconds == 3600
        assert config.stork.statsPerValidation is False
        assert config.accounts == []

    def test_defaults_pass_validation(self) -> None:
        """Test that the defaults on their own are a valid configuration."""
        loader = ConfigLoader.create()
        config = loader._dataclass_to_dict(loader.defaults)
        assert ConfigValidator.validate_config(config) == []


class TestConfigLoader:
    """Test suite for configuration loader."""

    def test_missing_file_writes_starter(self, tmp_path) -> None:
        """Test that a missing config file is created with a template account."""
        path = tmp_path / "config.json"
        loader = ConfigLoader.create(path)

        config = loader.load()

        assert path.exists()
        starter = orjson.loads(path.read_bytes())
        assert starter["accounts"][0]["region"] == "ap-northeast-1"
        assert starter["accounts"][0]["username"] == ""
        assert starter["threads"]["maxWorkers"] == 10
        assert len(config.accounts) == 1
        assert not config.accounts[0].has_credentials

    def test_missing_yaml_file_writes_yaml_starter(self, tmp_path) -> None:
        """Test that non-JSON config paths get a YAML starter file."""
        path = tmp_path / "config.yaml"
        ConfigLoader.create(path).load()

        starter = yaml.safe_load(path.read_text())
        assert starter["stork"]["intervalSeconds"] == 10

    def test_json_file_is_read(self, tmp_path) -> None:
        """Test that a JSON config file loads through the YAML parser."""
        path = tmp_path / "config.json"
        path.write_bytes(orjson.dumps({
            "accounts": [{
                "region": "ap-northeast-1",
                "clientId": "client",
                "userPoolId": "pool",
                "username": "alice@example.com",
                "password": "pw",
                "maxProxies": 3,
            }],
            "threads": {"maxWorkers": 4},
        }))

        config = ConfigLoader.create(path).load()

        assert config.max_workers == 4
        assert config.accounts[0].username == "alice@example.com"
        assert config.accounts[0].max_proxies == 3
        assert config.interval_seconds == 10.0

    def test_merge_config_with_overrides(self, tmp_path) -> None:
        """Test 3-tier precedence: overrides beat the file, the file beats defaults."""
        path = _write_yaml(tmp_path / "config.yaml", {
            "stork": {"intervalSeconds": 30},
            "logging": {"level": "DEBUG"},
        })
        loader = ConfigLoader.create(path)

        config = loader.merge_config({"logging": {"level": "WARNING"}})

        assert config["stork"]["intervalSeconds"] == 30
        assert config["logging"]["level"] == "WARNING"
        assert config["logging"]["json"] is False
        assert config["stork"]["requestTimeoutSeconds"] == 30

    def test_relative_paths_resolve_against_config_dir(self, tmp_path) -> None:
        """Test that session and proxy paths are relative to the config file."""
        path = _write_yaml(tmp_path / "config.yaml", {
            "session": {"directory": "sessions"},
            "proxies": {"file": "/etc/proxies.txt"},
        })

        config = ConfigLoader.create(path).load()

        assert config.session_directory == tmp_path / "sessions"
        assert config.proxy_file == Path("/etc/proxies.txt")

    def test_zero_max_proxies_becomes_one(self, tmp_path) -> None:
        """Test that a zero proxy quota falls back to one proxy."""
        path = _write_yaml(tmp_path / "config.yaml", {
            "accounts": [{"region": "r", "clientId": "c", "userPoolId": "p", "maxProxies": 0}],
        })

        config = ConfigLoader.create(path).load()
        assert config.accounts[0].max_proxies == 1

    def test_empty_file_uses_defaults(self, tmp_path) -> None:
        """Test that an empty config file yields the defaults."""
        path = tmp_path / "config.yaml"
        path.write_text("")

        config = ConfigLoader.create(path).load()

        assert isinstance(config, AppConfig)
        assert config.accounts == ()
        assert config.base_url == "https://app-api.jp.stork-oracle.network/v1"

    def test_unparseable_file(self, tmp_path) -> None:
        """Test that a syntax error is reported as a configuration error."""
        path = tmp_path / "config.yaml"
        path.write_text("accounts: [unclosed")

        with pytest.raises(ConfigurationError):
            ConfigLoader.create(path).load()

    def test_non_mapping_file(self, tmp_path) -> None:
        """Test that a top-level list is rejected."""
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigurationError):
            ConfigLoader.create(path).load()

    def test_invalid_values_are_collected(self, tmp_path) -> None:
        """Test that every validation error is reported at once."""
        path = _write_yaml(tmp_path / "config.yaml", {
            "stork": {"intervalSeconds": 0},
            "threads": {"maxWorkers": "many"},
        })

        with pytest.raises(ConfigurationError) as exc_info:
            ConfigLoader.create(path).load()

        fields = {error.field for error in exc_info.value.errors}
        assert fields == {"stork.intervalSeconds", "threads.maxWorkers"}


class TestConfigValidator:
    """Test suite for configuration validator."""

    def test_valid_stork_params(self) -> None:
        errors = ConfigValidator.validate_stork_params({
            "baseURL": "https://example.test/v1",
            "intervalSeconds": 5,
            "statsPerValidation": True,
        })
        assert errors == []

    def test_invalid_stork_params(self) -> None:
        errors = ConfigValidator.validate_stork_params({
            "baseURL": "not a url",
            "requestTimeoutSeconds": -1,
            "statsPerValidation": "yes",
        })
        assert [e.field for e in errors] == [
            "stork.baseURL",
            "stork.requestTimeoutSeconds",
            "stork.statsPerValidation",
        ]

    def test_boolean_is_not_a_worker_count(self) -> None:
        errors = ConfigValidator.validate_thread_params({"maxWorkers": True})
        assert len(errors) == 1

    def test_session_params(self) -> None:
        errors = ConfigValidator.validate_session_params({"rotationSeconds": 0, "directory": ""})
        assert {e.field for e in errors} == {"session.rotationSeconds", "session.directory"}

    def test_account_missing_pool_settings(self) -> None:
        errors = ConfigValidator.validate_account(2, {"region": "", "clientId": "c", "maxProxies": -1})
        assert [e.field for e in errors] == [
            "accounts[2].region",
            "accounts[2].userPoolId",
            "accounts[2].maxProxies",
        ]

    def test_account_without_credentials_is_valid(self) -> None:
        errors = ConfigValidator.validate_account(0, {"region": "r", "clientId": "c", "userPoolId": "p"})
        assert errors == []

    def test_account_must_be_mapping(self) -> None:
        errors = ConfigValidator.validate_account(0, "alice")
        assert errors[0].field == "accounts[0]"

    def test_accounts_must_be_list(self) -> None:
        errors = ConfigValidator.validate_config({"accounts": {"region": "r"}})
        assert errors[0].field == "accounts"

    def test_freshness_window(self) -> None:
        errors = ConfigValidator.validate_config({"validation": {"freshnessSeconds": -5}})
        assert errors[0].field == "validation.freshnessSeconds"

    def test_sections_must_be_mappings(self) -> None:
        errors = ConfigValidator.validate_config({"stork": None, "validation": [], "threads": {"maxWorkers": 2}})
        assert [(e.field, e.message) for e in errors] == [
            ("stork", "Must be a mapping"),
            ("validation", "Must be a mapping"),
        ]

    def test_logging_params(self) -> None:
        errors = ConfigValidator.validate_logging_params({"level": "LOUD", "json": "yes"})
        assert [e.field for e in errors] == ["logging.level", "logging.json"]
        assert ConfigValidator.validate_logging_params({"level": "debug", "json": True}) == []

    def test_proxy_params(self) -> None:
        errors = ConfigValidator.validate_proxy_params({"file": ""})
        assert errors[0].field == "proxies.file"


class TestMalformedSections:
    """Test that malformed sections surface as configuration errors."""

    def test_null_section_is_a_configuration_error(self, tmp_path) -> None:
        """Test that a section set to null is reported, not crashed on."""
        path = tmp_path / "config.yaml"
        path.write_text("stork: null\n")

        with pytest.raises(ConfigurationError) as exc_info:
            ConfigLoader.create(path).load()

        assert [e.field for e in exc_info.value.errors] == ["stork"]

    def test_list_section_is_a_configuration_error(self, tmp_path) -> None:
        """Test that a section given as a list is reported."""
        path = _write_yaml(tmp_path / "config.yaml", {"validation": [], "logging": "INFO"})

        with pytest.raises(ConfigurationError) as exc_info:
            ConfigLoader.create(path).load()

        assert {e.field for e in exc_info.value.errors} == {"validation", "logging"}

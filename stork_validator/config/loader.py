"""Configuration loader with 3-tier parameter precedence."""

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Optional

import orjson
import yaml

from ..data.models import AccountIdentity
from ..errors import ConfigurationError
from ..logging.config import get_logger
from .defaults import AccountTemplate, DefaultConfig, get_default_config

logger = get_logger(__name__)

DEFAULT_CONFIG_FILE = "config.json"


@dataclass(frozen=True)
class AppConfig:
    """Resolved runtime configuration."""

    accounts: tuple[AccountIdentity, ...]
    base_url: str
    auth_url: str
    interval_seconds: float
    request_timeout_seconds: float
    user_agent: str
    origin: str
    stats_per_validation: bool
    max_workers: int
    session_directory: Path
    rotation_seconds: float
    freshness_seconds: float
    proxy_file: Path
    log_level: str
    log_json: bool

    @classmethod
    def from_dict(cls, config: dict[str, Any], base_dir: Optional[Path] = None) -> "AppConfig":
        """Build a typed view over a merged configuration mapping."""
        base_dir = base_dir or Path.cwd()
        stork = config["stork"]

        return cls(
            accounts=tuple(
                AccountIdentity.from_config(entry) for entry in config.get("accounts") or []
            ),
            base_url=str(stork["baseURL"]).rstrip("/"),
            auth_url=str(stork["authURL"]),
            interval_seconds=float(stork["intervalSeconds"]),
            request_timeout_seconds=float(stork["requestTimeoutSeconds"]),
            user_agent=str(stork["userAgent"]),
            origin=str(stork["origin"]),
            stats_per_validation=bool(stork["statsPerValidation"]),
            max_workers=int(config["threads"]["maxWorkers"]),
            session_directory=_resolve(base_dir, config["session"]["directory"]),
            rotation_seconds=float(config["session"]["rotationSeconds"]),
            freshness_seconds=float(config["validation"]["freshnessSeconds"]),
            proxy_file=_resolve(base_dir, config["proxies"]["file"]),
            log_level=str(config["logging"]["level"]),
            log_json=bool(config["logging"]["json"]),
        )


def _resolve(base_dir: Path, value: str) -> Path:
    path = Path(value)
    return path if path.is_absolute() else base_dir / path


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 3-tier precedence."""

    config_path: Path
    defaults: DefaultConfig

    @classmethod
    def create(cls, config_path: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_path is None:
            config_path = Path.cwd() / DEFAULT_CONFIG_FILE

        return cls(
            config_path=Path(config_path),
            defaults=get_default_config(),
        )

    def load_file_config(self) -> dict[str, Any]:
        """
        Load the user configuration file.

        A missing file is created with a template account so the operator
        only has to fill in credentials. JSON files are accepted since YAML
        is a superset of JSON.
        """
        if not self.config_path.exists():
            logger.warning("No config file found, creating a default one", path=str(self.config_path))
            self.write_default_file()

        try:
            with open(self.config_path) as f:
                file_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Could not parse {self.config_path}: {e}",
                context={"path": str(self.config_path)},
            ) from e

        if file_config is None:
            return {}

        if not isinstance(file_config, dict):
            raise ConfigurationError(
                f"Top level of {self.config_path} must be a mapping",
                context={"path": str(self.config_path)},
            )

        logger.info("Configuration loaded", path=str(self.config_path))
        return file_config

    def write_default_file(self) -> None:
        """Write a starter configuration file."""
        starter = {
            "accounts": [asdict(AccountTemplate())],
            "stork": {
                "baseURL": self.defaults.stork.baseURL,
                "authURL": self.defaults.stork.authURL,
                "intervalSeconds": self.defaults.stork.intervalSeconds,
            },
            "threads": {
                "maxWorkers": self.defaults.threads.maxWorkers,
            },
        }

        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        if self.config_path.suffix.lower() == ".json":
            self.config_path.write_bytes(orjson.dumps(starter, option=orjson.OPT_INDENT_2))
        else:
            with open(self.config_path, "w") as f:
                yaml.safe_dump(starter, f, default_flow_style=False, sort_keys=False)

    def merge_config(self, overrides: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Command line overrides (highest priority)
        2. Config file values
        3. Global defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)

        config = self._deep_merge(config, self.load_file_config())

        if overrides:
            config = self._deep_merge(config, overrides)

        return config

    def load(self, overrides: Optional[dict[str, Any]] = None) -> AppConfig:
        """Merge, validate and resolve configuration into an AppConfig."""
        from .validation import ConfigValidator

        config = self.merge_config(overrides)

        errors = ConfigValidator.validate_config(config)
        if errors:
            raise ConfigurationError(
                f"{len(errors)} configuration error(s) in {self.config_path}",
                errors=errors,
            )

        return AppConfig.from_dict(config, base_dir=self.config_path.parent)

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name, _field in obj.__dataclass_fields__.items():
                value = getattr(obj, field_name)
                if hasattr(value, '__dataclass_fields__'):
                    result[field_name] = self._dataclass_to_dict(value)
                else:
                    result[field_name] = value
            return result
        return obj  # type: ignore[no-any-return]

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

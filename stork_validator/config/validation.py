"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

_SECTIONS = ("stork", "threads", "session", "validation", "proxies", "logging")

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_positive_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def _is_url(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    parsed = urlparse(value)
    return bool(parsed.scheme) and bool(parsed.netloc)


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_stork_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate remote API parameters."""
        errors = []

        for key in ("baseURL", "authURL"):
            if key in params and not _is_url(params[key]):
                errors.append(ValidationError(
                    field=f"stork.{key}",
                    message="Must be an absolute URL with scheme and host",
                    value=params[key]
                ))

        if "intervalSeconds" in params:
            value = params["intervalSeconds"]
            if not _is_positive_number(value):
                errors.append(ValidationError(
                    field="stork.intervalSeconds",
                    message="Must be a positive number",
                    value=value
                ))

        if "requestTimeoutSeconds" in params:
            value = params["requestTimeoutSeconds"]
            if not _is_positive_number(value):
                errors.append(ValidationError(
                    field="stork.requestTimeoutSeconds",
                    message="Must be a positive number",
                    value=value
                ))

        if "statsPerValidation" in params:
            value = params["statsPerValidation"]
            if not isinstance(value, bool):
                errors.append(ValidationError(
                    field="stork.statsPerValidation",
                    message="Must be a boolean",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_thread_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate dispatch fan-out parameters."""
        errors = []

        if "maxWorkers" in params:
            value = params["maxWorkers"]
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                errors.append(ValidationError(
                    field="threads.maxWorkers",
                    message="Must be a positive integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_session_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate session persistence parameters."""
        errors = []

        if "rotationSeconds" in params:
            value = params["rotationSeconds"]
            if not _is_positive_number(value):
                errors.append(ValidationError(
                    field="session.rotationSeconds",
                    message="Must be a positive number",
                    value=value
                ))

        if "directory" in params:
            value = params["directory"]
            if not isinstance(value, str) or not value:
                errors.append(ValidationError(
                    field="session.directory",
                    message="Must be a non-empty path",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_proxy_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate proxy pool source parameters."""
        if "file" in params:
            value = params["file"]
            if not isinstance(value, str) or not value:
                return [ValidationError(
                    field="proxies.file",
                    message="Must be a non-empty path",
                    value=value
                )]
        return []

    @staticmethod
    def validate_logging_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate logging output parameters."""
        errors = []

        if "level" in params:
            value = params["level"]
            if not isinstance(value, str) or value.upper() not in _LOG_LEVELS:
                errors.append(ValidationError(
                    field="logging.level",
                    message=f"Must be one of {sorted(_LOG_LEVELS)}",
                    value=value
                ))

        if "json" in params and not isinstance(params["json"], bool):
            errors.append(ValidationError(
                field="logging.json",
                message="Must be a boolean",
                value=params["json"]
            ))

        return errors

    @staticmethod
    def validate_account(index: int, account: Any) -> list[ValidationError]:
        """
        Validate a single account entry.

        Missing username or password is not an error here: such accounts
        are skipped at startup instead.
        """
        prefix = f"accounts[{index}]"

        if not isinstance(account, dict):
            return [ValidationError(
                field=prefix,
                message="Must be a mapping",
                value=account
            )]

        errors = []

        for key in ("region", "clientId", "userPoolId"):
            value = account.get(key)
            if not isinstance(value, str) or not value:
                errors.append(ValidationError(
                    field=f"{prefix}.{key}",
                    message="Must be a non-empty string",
                    value=value
                ))

        if "maxProxies" in account:
            value = account["maxProxies"]
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                errors.append(ValidationError(
                    field=f"{prefix}.maxProxies",
                    message="Must be a non-negative integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []

        for section in _SECTIONS:
            if section in config and not isinstance(config[section], dict):
                errors.append(ValidationError(
                    field=section,
                    message="Must be a mapping",
                    value=config[section]
                ))

        if isinstance(config.get("stork"), dict):
            errors.extend(ConfigValidator.validate_stork_params(config["stork"]))

        if isinstance(config.get("threads"), dict):
            errors.extend(ConfigValidator.validate_thread_params(config["threads"]))

        if isinstance(config.get("session"), dict):
            errors.extend(ConfigValidator.validate_session_params(config["session"]))

        if isinstance(config.get("proxies"), dict):
            errors.extend(ConfigValidator.validate_proxy_params(config["proxies"]))

        if isinstance(config.get("logging"), dict):
            errors.extend(ConfigValidator.validate_logging_params(config["logging"]))

        if isinstance(config.get("validation"), dict):
            value = config["validation"].get("freshnessSeconds")
            if value is not None and not _is_positive_number(value):
                errors.append(ValidationError(
                    field="validation.freshnessSeconds",
                    message="Must be a positive number",
                    value=value
                ))

        accounts = config.get("accounts", [])
        if not isinstance(accounts, list):
            errors.append(ValidationError(
                field="accounts",
                message="Must be a list",
                value=accounts
            ))
        else:
            for index, account in enumerate(accounts):
                errors.extend(ConfigValidator.validate_account(index, account))

        return errors

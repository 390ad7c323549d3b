"""
Application bootstrap.

Loads configuration and the proxy pool, assigns proxies to accounts and
starts one supervisor per account with credentials, then blocks until a
shutdown signal arrives.
"""

import argparse
import signal
import sys
import threading
from pathlib import Path
from typing import Optional, Sequence

from .client.stork_api import StorkApiClient
from .config.loader import AppConfig, ConfigLoader
from .dispatch.dispatcher import ValidationDispatcher
from .egress.proxies import assign_proxies, load_proxy_pool
from .errors import ConfigurationError
from .logging.config import configure_logging, get_logger
from .session.authenticator import Authenticator, CognitoAuthenticator
from .session.manager import TokenManager
from .session.store import SessionStore
from .supervisor import AccountSupervisor

logger = get_logger(__name__)


def build_supervisors(
    config: AppConfig,
    pool: Sequence[str],
    authenticator: Optional[Authenticator] = None,
    api: Optional[StorkApiClient] = None,
) -> list[AccountSupervisor]:
    """
    Create one supervisor per account that has a username and password.

    Proxies are assigned over every configured account, so an account
    skipped for missing credentials still consumes its share of the pool.
    """
    authenticator = authenticator or CognitoAuthenticator()
    api = api or StorkApiClient(
        config.base_url,
        timeout=config.request_timeout_seconds,
        user_agent=config.user_agent,
        origin=config.origin,
    )
    store = SessionStore(config.session_directory)

    supervisors = []
    for assignment in assign_proxies(config.accounts, pool):
        account = assignment.account
        if not account.has_credentials:
            logger.error("Missing username/password for an account, skipping", region=account.region)
            continue

        supervisors.append(AccountSupervisor(
            identity=account,
            proxies=assignment.proxies,
            token_manager=TokenManager(account, authenticator, store),
            api=api,
            dispatcher=ValidationDispatcher(
                api,
                account.username,
                freshness_seconds=config.freshness_seconds,
                fetch_points=config.stats_per_validation,
            ),
            interval_seconds=config.interval_seconds,
            max_workers=config.max_workers,
            rotation_seconds=config.rotation_seconds,
        ))

    return supervisors


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="stork-validator",
        description="Validate Stork oracle signed prices for one or more accounts.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("config.json"),
        help="Config file, YAML or JSON (created with a template when missing)")
    parser.add_argument(
        "--proxies",
        type=Path,
        default=None,
        help="Proxy list file, one URI per line (overrides proxies.file)")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (overrides logging.level)")
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit JSON log lines")
    return parser.parse_args(argv)


def _overrides(args: argparse.Namespace) -> dict:
    overrides: dict = {}
    if args.proxies is not None:
        overrides.setdefault("proxies", {})["file"] = str(args.proxies.resolve())
    if args.log_level is not None:
        overrides.setdefault("logging", {})["level"] = args.log_level
    if args.json_logs:
        overrides.setdefault("logging", {})["json"] = True
    return overrides


def _install_signal_handlers(shutdown: threading.Event) -> None:
    def _handler(sig, _frame):
        logger.info("Shutdown signal received", signal=sig)
        shutdown.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            signal.signal(sig, _handler)
        except (OSError, ValueError):
            pass


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)

    # structlog defaults apply until the config file is loaded
    try:
        config = ConfigLoader.create(args.config.resolve()).load(_overrides(args))
    except ConfigurationError as e:
        logger.error("Invalid configuration", error=str(e))
        for err in e.errors:
            logger.error("Configuration error", field=err.field, message=err.message, value=err.value)
        return 1

    configure_logging(level=config.log_level, format_json=config.log_json)

    pool = load_proxy_pool(config.proxy_file)
    supervisors = build_supervisors(config, pool)
    if not supervisors:
        logger.error("No account with credentials configured", config=str(args.config))
        return 1

    shutdown = threading.Event()
    _install_signal_handlers(shutdown)

    for supervisor in supervisors:
        supervisor.start()

    try:
        while not shutdown.wait(1.0):
            if all(s.stopped and not s.running for s in supervisors):
                logger.error("Every account has stopped")
                break
    finally:
        for supervisor in supervisors:
            supervisor.stop(timeout=5.0)
        logger.info("Shutdown complete")

    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Unit tests for application bootstrap."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import yaml

from stork_validator import app
from stork_validator.config.loader import ConfigLoader


def _config(tmp_path, accounts):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"accounts": accounts, "threads": {"maxWorkers": 3}}))
    return ConfigLoader.create(path).load()


def _account(username, password="pw", max_proxies=1):
    return {
        "region": "ap-northeast-1",
        "clientId": "client",
        "userPoolId": "pool",
        "username": username,
        "password": password,
        "maxProxies": max_proxies,
    }


class TestBuildSupervisors:
    """Test supervisor construction from configuration."""

    def test_one_supervisor_per_account(self, tmp_path, authenticator):
        config = _config(tmp_path, [_account("alice", max_proxies=2), _account("bob")])
        pool = ["http://p1:1", "http://p2:2", "http://p3:3"]

        supervisors = app.build_supervisors(config, pool, authenticator=authenticator, api=MagicMock())

        assert [s.identity.username for s in supervisors] == ["alice", "bob"]
        assert supervisors[0].proxies == ("http://p1:1", "http://p2:2")
        assert supervisors[1].proxies == ("http://p3:3",)
        assert all(s.max_workers == 3 for s in supervisors)

    def test_accounts_without_credentials_are_skipped(self, tmp_path, authenticator):
        config = _config(tmp_path, [_account("", password=""), _account("bob"), _account("carol", password="")])
        pool = ["http://p1:1", "http://p2:2", "http://p3:3"]

        supervisors = app.build_supervisors(config, pool, authenticator=authenticator, api=MagicMock())

        assert [s.identity.username for s in supervisors] == ["bob"]
        # skipped accounts still consume their share of the pool
        assert supervisors[0].proxies == ("http://p2:2",)

    def test_sessions_stored_next_to_config(self, tmp_path, authenticator):
        config = _config(tmp_path, [_account("alice")])

        supervisor = app.build_supervisors(config, [], authenticator=authenticator, api=MagicMock())[0]

        assert supervisor.token_manager.store.directory == tmp_path
        assert supervisor.proxies == ()


class TestParseArgs:
    """Test command line parsing."""

    def test_defaults(self):
        args = app.parse_args([])
        assert args.config == Path("config.json")
        assert args.proxies is None
        assert args.log_level is None
        assert args.json_logs is False

    def test_overrides(self, tmp_path):
        args = app.parse_args([
            "--config", str(tmp_path / "c.yaml"),
            "--proxies", str(tmp_path / "p.txt"),
            "--log-level", "DEBUG",
            "--json-logs",
        ])

        overrides = app._overrides(args)

        assert overrides == {
            "proxies": {"file": str((tmp_path / "p.txt").resolve())},
            "logging": {"level": "DEBUG", "json": True},
        }


class TestMain:
    """Test the entry point exit codes."""

    def test_invalid_config_exits_nonzero(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({"threads": {"maxWorkers": 0}}))

        assert app.main(["--config", str(path)]) == 1

    def test_no_credentials_exits_nonzero(self, tmp_path):
        path = tmp_path / "config.json"

        with patch.object(app, "configure_logging"):
            assert app.main(["--config", str(path), "--proxies", str(tmp_path / "proxies.txt")]) == 1

        assert path.exists()
        assert (tmp_path / "proxies.txt").exists()

    def test_malformed_section_exits_nonzero(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("stork: null\n")

        assert app.main(["--config", str(path)]) == 1

"""Tests for CLI argument parsing and the process entry point."""

import curses
import json
from unittest.mock import MagicMock, patch

import pytest

from sqs_monitor.main import _parse_args, build_config, main


class TestArgParsing:

    def test_parse_default_args(self):
        args = _parse_args([])
        assert args.interval is None
        assert args.poll_timeout is None
        assert args.filter is None
        assert args.prefix is None
        assert args.debug is False

    def test_parse_overrides(self):
        args = _parse_args(["--interval", "15", "--poll-timeout", "250",
                            "--filter", "dlq_only", "--prefix", "orders-",
                            "--region", "eu-west-1"])
        assert args.interval == 15.0
        assert args.poll_timeout == 250
        assert args.filter == "dlq_only"
        assert args.prefix == "orders-"
        assert args.region == "eu-west-1"

    @pytest.mark.parametrize("argv", [
        ["--interval", "0"],
        ["--poll-timeout", "-1"],
        ["--filter", "everything"],
    ])
    def test_invalid_values_rejected(self, argv):
        with pytest.raises(SystemExit) as excinfo:
            _parse_args(argv)
        assert excinfo.value.code == 2


class TestBuildConfig:

    def test_cli_overrides_file(self, tmp_config):
        tmp_config.write_text(json.dumps({"refresh_interval": 60,
                                          "queue_name_prefix": "billing"}))
        args = _parse_args(["--config", str(tmp_config), "--interval", "5"])
        config = build_config(args)
        assert config.refresh_interval == 5
        assert config.get("queue_name_prefix") == "billing"

    def test_file_values_kept_without_flags(self, tmp_config):
        tmp_config.write_text(json.dumps({"poll_timeout_ms": 200}))
        config = build_config(_parse_args(["--config", str(tmp_config)]))
        assert config.poll_timeout_ms == 200


class TestMain:

    def _argv(self, tmp_path, *extra):
        return ["--config", str(tmp_path / "settings.json"),
                "--log-file", str(tmp_path / "monitor.log"), *extra]

    def test_clean_quit_exits_zero(self, tmp_path):
        with patch("sqs_monitor.aws.sqs_client.SqsQueueClient") as client_cls, \
                patch("sqs_monitor.tui.app.MonitorApp.run") as run:
            client_cls.return_value = MagicMock(region="us-east-1")
            assert main(self._argv(tmp_path)) == 0
            run.assert_called_once()

    def test_terminal_failure_exits_nonzero(self, tmp_path):
        with patch("sqs_monitor.aws.sqs_client.SqsQueueClient"), \
                patch("sqs_monitor.tui.app.MonitorApp.run",
                      side_effect=curses.error("setupterm: could not find terminal")):
            assert main(self._argv(tmp_path)) == 1

    def test_keyboard_interrupt_is_clean_quit(self, tmp_path):
        with patch("sqs_monitor.aws.sqs_client.SqsQueueClient"), \
                patch("sqs_monitor.tui.app.MonitorApp.run",
                      side_effect=KeyboardInterrupt):
            assert main(self._argv(tmp_path)) == 0

    def test_invalid_filter_in_config_exits_two(self, tmp_path):
        (tmp_path / "settings.json").write_text(json.dumps({"filter": "bogus"}))
        with patch("sqs_monitor.aws.sqs_client.SqsQueueClient"):
            assert main(self._argv(tmp_path)) == 2

    def test_null_threshold_in_config_falls_back(self, tmp_path):
        (tmp_path / "settings.json").write_text(json.dumps(
            {"filter": "min_messages", "filter_threshold": None}))
        with patch("sqs_monitor.aws.sqs_client.SqsQueueClient"), \
                patch("sqs_monitor.tui.app.MonitorApp.run") as run:
            assert main(self._argv(tmp_path)) == 0
        run.assert_called_once()

"""
SQS Monitor - Main Entry Point

Terminal dashboard that polls Amazon SQS and shows queue depth, in-flight
counts, and queue configuration in real time.

Usage:
  sqs-monitor [--prefix orders-] [--interval 15] [--filter dlq_only]
  python -m sqs_monitor.main

Exit codes: 0 on quit, 1 if the terminal or AWS client cannot be set up,
2 on invalid arguments or configuration.
"""

import argparse
import curses
import datetime
import logging
import sys
import traceback
from pathlib import Path
from typing import List, Optional

from botocore.exceptions import BotoCoreError

from .utils.config import MonitorConfig
from .utils.filters import FILTER_NAMES

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


def _positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value}")
    return number


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value}")
    return number


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="sqs-monitor",
        description="Real-time terminal dashboard for Amazon SQS queues.",
    )
    parser.add_argument("--config", type=Path, default=None,
                        help="settings file (default ~/.config/sqs-monitor/settings.json)")
    parser.add_argument("--interval", type=_positive_float, default=None,
                        help="auto-refresh interval in seconds (default 30)")
    parser.add_argument("--poll-timeout", type=_positive_int, default=None,
                        help="keyboard poll timeout in milliseconds (default 100)")
    parser.add_argument("--filter", choices=FILTER_NAMES, default=None,
                        help="predicate applied when the filter is toggled with 'f'")
    parser.add_argument("--threshold", type=int, default=None,
                        help="message count for the min_messages filter")
    parser.add_argument("--pattern", default=None,
                        help="queue name glob for the name_glob filter")
    parser.add_argument("--prefix", default=None,
                        help="only list queues whose name starts with this prefix")
    parser.add_argument("--region", default=None, help="AWS region")
    parser.add_argument("--profile", default=None, help="AWS profile name")
    parser.add_argument("--endpoint-url", default=None,
                        help="custom SQS endpoint (e.g. LocalStack)")
    parser.add_argument("--log-file", type=Path, default=None,
                        help="log file (default ~/.cache/sqs-monitor/logs/sqs_monitor.log)")
    parser.add_argument("--debug", action="store_true",
                        help="log at DEBUG level")
    return parser.parse_args(argv)


def _get_log_path() -> Path:
    """Get the path to the log file."""
    try:
        log_dir = Path.home() / ".cache" / "sqs-monitor" / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)
        return log_dir / "sqs_monitor.log"
    except OSError:
        return Path("/tmp/sqs_monitor.log")


def _setup_logging(log_file: Optional[Path], debug: bool) -> Path:
    """Log to a file; the terminal belongs to curses."""
    path = log_file or _get_log_path()
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
        filename=str(path),
    )
    # botocore is chatty at DEBUG
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    return path


def build_config(args: argparse.Namespace) -> MonitorConfig:
    """Load the settings file and apply command-line overrides."""
    config = MonitorConfig(config_path=args.config)
    config.update({
        "refresh_interval": args.interval,
        "poll_timeout_ms": args.poll_timeout,
        "filter": args.filter,
        "filter_threshold": args.threshold,
        "filter_pattern": args.pattern,
        "queue_name_prefix": args.prefix,
        "aws_region": args.region,
        "aws_profile": args.profile,
        "endpoint_url": args.endpoint_url,
    })
    return config


def _record_fatal(log_path: Path) -> None:
    try:
        with open(log_path, "a") as f:
            f.write(f"\n{'=' * 60}\n")
            f.write(f"[{datetime.datetime.now().isoformat()}] FATAL ERROR\n")
            f.write(traceback.format_exc())
            f.write(f"{'=' * 60}\n")
    except OSError:
        pass


def main(argv: Optional[List[str]] = None) -> int:
    """Standalone entry point. Returns the process exit code."""
    args = _parse_args(argv)
    log_path = _setup_logging(args.log_file, args.debug)

    from .aws.sqs_client import SqsQueueClient
    from .tui.app import MonitorApp

    config = build_config(args)
    logger.debug("Effective settings from %s: %s", config.path, config.to_dict())
    try:
        app_client = SqsQueueClient(
            region=config.get("aws_region"),
            profile=config.get("aws_profile"),
            endpoint_url=config.get("endpoint_url"),
        )
        app = MonitorApp(config, app_client)
    except ValueError as e:
        print(f"sqs-monitor: invalid configuration: {e}", file=sys.stderr)
        return 2
    except BotoCoreError as e:
        logger.error("Could not create SQS client: %s", e)
        print(f"sqs-monitor: could not create SQS client: {e}", file=sys.stderr)
        return 1

    try:
        app.run()
    except KeyboardInterrupt:
        logger.info("Interrupted")
    except curses.error as e:
        _record_fatal(log_path)
        print(f"sqs-monitor: terminal error: {e}", file=sys.stderr)
        print(f"Full error details saved to:\n  {log_path}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

import yaml
from pydantic import ValidationError

from .app import IrcSleuthApp
from .commands import correlate as cmd_correlate
from .commands import doctor as cmd_doctor
from .commands import inspect as cmd_inspect
from .config import Settings, find_config
from .core.hostmask import HostMask, HostMaskError, parse_hostmask
from .store import StoreError

LOG_FORMAT = "%(levelname).1s | %(asctime)s | %(name)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

C_RESET = "\033[0m"
LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",  # Cyan
    logging.INFO: "\033[37m",  # Light gray
    logging.WARNING: "\033[33m",  # Yellow
    logging.ERROR: "\033[31m",  # Red
    logging.CRITICAL: "\033[35m",  # Magenta
}


class ColorFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color = LEVEL_COLORS.get(record.levelno)
        if not color:
            return message
        return f"{color}{message}{C_RESET}"


class WarningBufferHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.WARNING)
        self.records: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
        except Exception:  # pragma: no cover
            msg = record.getMessage()
        self.records.append(msg)


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ircsleuth",
        description="Correlate IRC identities recorded in a Quassel log database",
    )
    parser.add_argument("--config", type=Path, help="Path to ircsleuth.yaml")
    parser.add_argument("--log-level", default="INFO", help="Python logging level")

    subparsers = parser.add_subparsers(dest="command", required=True)
    correlate_parser = subparsers.add_parser(
        "correlate", help="Find every identity linked to a mask"
    )
    correlate_parser.add_argument("mask", help="libera style host mask NICK!IDENT@HOST")
    correlate_parser.add_argument(
        "-s",
        "--subnet",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="for hosts that are also an IPv4 address, search the whole /24 (default from config)",
    )
    correlate_parser.add_argument(
        "-d",
        "--depth",
        type=_positive_int,
        default=None,
        help="how many iterations to traverse (default from config, 3)",
    )
    correlate_parser.add_argument(
        "-i",
        "--ident",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="also follow idents, not just nicks and hosts (default from config)",
    )
    correlate_parser.add_argument(
        "--json",
        action="store_true",
        help="Emit machine-readable JSON to stdout",
    )
    inspect_parser = subparsers.add_parser(
        "inspect", help="Show how a mask is parsed and which patterns it searches for"
    )
    inspect_parser.add_argument("mask", help="libera style host mask NICK!IDENT@HOST")
    inspect_parser.add_argument(
        "-s",
        "--subnet",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="show the /24 pattern for IPv4 hosts",
    )
    subparsers.add_parser("doctor", help="Check configuration and database access")
    return parser


def _configure_logging(level_name: str) -> WarningBufferHandler:
    log_level = getattr(logging, level_name.upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(log_level)

    color_handler = logging.StreamHandler()
    color_handler.setFormatter(ColorFormatter(LOG_FORMAT, LOG_DATEFMT))
    root_logger.addHandler(color_handler)

    warn_buffer = WarningBufferHandler()
    warn_buffer.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATEFMT))
    root_logger.addHandler(warn_buffer)

    warn_log_path = Path.cwd() / "ircsleuth-warnings.log"
    file_handler = logging.FileHandler(warn_log_path, mode="w", encoding="utf-8", delay=True)
    file_handler.setLevel(logging.WARNING)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATEFMT))
    root_logger.addHandler(file_handler)

    logging.getLogger("asyncpg").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    return warn_buffer


def _parse_mask(parser: argparse.ArgumentParser, text: str, subnet: bool) -> HostMask:
    try:
        return parse_hostmask(text).with_subnet(subnet)
    except HostMaskError as exc:
        parser.error(f"invalid mask {text!r}: {exc}")


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config_path = find_config(args.config)
        settings = Settings.load(config_path)
    except FileNotFoundError as exc:
        raise SystemExit(str(exc))
    except (ValidationError, yaml.YAMLError) as exc:
        raise SystemExit(f"Invalid configuration in {config_path}:\n{exc}")

    mask: HostMask | None = None
    if args.command in {"correlate", "inspect"}:
        subnet = settings.correlation.subnet if args.subnet is None else args.subnet
        mask = _parse_mask(parser, args.mask, subnet)

    warn_buffer = _configure_logging(args.log_level)
    logging.getLogger(__name__).debug("args: %s", args)

    try:
        match args.command:
            case "correlate":
                app = IrcSleuthApp(settings)
                options = app.correlation_options(
                    depth=args.depth,
                    subnet=mask.subnet,
                    follow_idents=args.ident,
                )
                try:
                    cmd_correlate.run(app, mask, options, json_output=args.json)
                except StoreError as exc:
                    raise SystemExit(f"Cannot open log database: {exc}")
                except KeyboardInterrupt:
                    raise SystemExit(130)
            case "inspect":
                cmd_inspect.run(mask)
            case "doctor":
                report = cmd_doctor.run(settings, config_path=config_path)
                for line in report.checks:
                    print(line)
                if not report.ok:
                    raise SystemExit(1)
            case _:
                parser.error("Unknown command")
    finally:
        if warn_buffer.records:
            print("\n\033[33mWarnings/Errors summary:\033[0m", file=sys.stderr)
            for line in warn_buffer.records:
                print(f" - {line}", file=sys.stderr)


if __name__ == "__main__":  # pragma: no cover
    main()

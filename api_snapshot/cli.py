"""CLI entry point for api-snapshot.

Handles argument parsing and dispatches to the list, show, check and clean
commands. Every command works on one snapshot directory, taken from
--directory, the --config file, or the default "__snapshots__".
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path

from api_snapshot.canonical import decode
from api_snapshot.config_loader import ConfigError, load_snapshot_config
from api_snapshot.engine import SnapshotEngine
from api_snapshot.errors import SnapshotError
from api_snapshot.field_path import redact_all
from api_snapshot.models import SnapshotConfig

STDIN_PATH = Path("-")


@dataclass
class ListArgs:
    """Parsed arguments for list mode."""

    config: Path | None
    directory: Path | None


@dataclass
class ShowArgs:
    """Parsed arguments for show mode."""

    config: Path | None
    directory: Path | None
    key: str


@dataclass
class CheckArgs:
    """Parsed arguments for check mode."""

    config: Path | None
    directory: Path | None
    name: str
    body: Path
    ignore: list[str]
    update_all: bool


@dataclass
class CleanArgs:
    """Parsed arguments for clean mode."""

    config: Path | None
    directory: Path | None


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to YAML config file (directory, update_all, suffix, body_key_suffix)",
    )
    parser.add_argument(
        "--directory",
        type=Path,
        default=None,
        help="Snapshot directory (overrides config)",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with list, show, check and clean subcommands."""
    parser = argparse.ArgumentParser(
        prog="api-snapshot",
        description="Record and compare JSON response bodies against stored snapshots.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True, help="Command")

    list_parser = subparsers.add_parser("list", help="List stored snapshot keys")
    _add_common_arguments(list_parser)

    show_parser = subparsers.add_parser("show", help="Print a stored snapshot")
    _add_common_arguments(show_parser)
    show_parser.add_argument("key", help="Snapshot key (e.g., get-user-body)")

    check_parser = subparsers.add_parser(
        "check",
        help="Compare a JSON body file against its body snapshot",
    )
    _add_common_arguments(check_parser)
    check_parser.add_argument("name", help="Snapshot name (the body key suffix is appended)")
    check_parser.add_argument(
        "--body",
        type=Path,
        required=True,
        help="JSON file holding the response body ('-' reads stdin)",
    )
    check_parser.add_argument(
        "--ignore",
        action="append",
        default=[],
        metavar="FIELD_PATH",
        help="Dot-separated field path to drop before comparing (can be repeated)",
    )
    check_parser.add_argument(
        "--update-all",
        action="store_true",
        default=False,
        help="Overwrite the snapshot instead of comparing",
    )

    clean_parser = subparsers.add_parser("clean", help="Remove the snapshot directory")
    _add_common_arguments(clean_parser)

    return parser


def parse_args(args: list[str] | None = None) -> ListArgs | ShowArgs | CheckArgs | CleanArgs:
    """Parse command-line arguments and return typed args dataclass.

    Args:
        args: Command-line arguments to parse. If None, uses sys.argv[1:].

    Raises:
        SystemExit: If arguments are invalid (argparse behavior).
    """
    parser = build_parser()
    namespace = parser.parse_args(args)

    if namespace.command == "list":
        return ListArgs(config=namespace.config, directory=namespace.directory)
    elif namespace.command == "show":
        return ShowArgs(config=namespace.config, directory=namespace.directory, key=namespace.key)
    elif namespace.command == "check":
        return CheckArgs(
            config=namespace.config,
            directory=namespace.directory,
            name=namespace.name,
            body=namespace.body,
            ignore=namespace.ignore or [],
            update_all=namespace.update_all,
        )
    elif namespace.command == "clean":
        return CleanArgs(config=namespace.config, directory=namespace.directory)
    else:
        # Should not happen with required=True on subparsers
        parser.error(f"Unknown command: {namespace.command}")


def build_config(
    config_path: Path | None,
    directory: Path | None,
    update_all: bool = False,
) -> SnapshotConfig:
    """Load config and apply command-line overrides."""
    config = load_snapshot_config(config_path)
    overrides: dict[str, object] = {}
    if directory is not None:
        overrides["directory"] = directory
    if update_all:
        overrides["update_all"] = True
    if overrides:
        config = config.model_copy(update=overrides)
    return config


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parsed = parse_args(argv)
    try:
        if isinstance(parsed, ListArgs):
            return run_list(parsed)
        elif isinstance(parsed, ShowArgs):
            return run_show(parsed)
        elif isinstance(parsed, CheckArgs):
            return run_check(parsed)
        else:
            return run_clean(parsed)
    except ConfigError as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1
    except SnapshotError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 1


def run_list(args: ListArgs) -> int:
    """Print every stored key, one per line."""
    engine = SnapshotEngine(build_config(args.config, args.directory))
    keys = engine.store.keys()
    for key in keys:
        print(key)
    print(f"\n{len(keys)} snapshots in {engine.store.directory}", file=sys.stderr)
    return 0


def run_show(args: ShowArgs) -> int:
    """Print the stored bytes for one key."""
    engine = SnapshotEngine(build_config(args.config, args.directory))
    data = engine.store.read(args.key)
    # Hand-edited files may not be valid UTF-8
    print(data.decode("utf-8", errors="replace"))
    return 0


def run_check(args: CheckArgs) -> int:
    """Run the body snapshot flow on a JSON file.

    Returns 0 when the body matches (or was recorded), 1 on mismatch.
    """
    config = build_config(args.config, args.directory, args.update_all)
    engine = SnapshotEngine(config)

    try:
        raw = sys.stdin.buffer.read() if args.body == STDIN_PATH else args.body.read_bytes()
    except OSError as e:
        print(f"Error reading body: {e}", file=sys.stderr)
        return 1

    data = decode(raw)
    redact_all(data, args.ignore, "Field in body snap")
    result = engine.shot(args.name + config.body_key_suffix, data)

    if result.matched:
        status = "recorded" if result.recorded else "matched"
        print(f"Snapshot {status}: {result.key}")
        return 0

    print(f"Snapshot mismatch: {result.key}", file=sys.stderr)
    print(result.diff, end="")
    return 1


def run_clean(args: CleanArgs) -> int:
    """Remove the snapshot directory."""
    engine = SnapshotEngine(build_config(args.config, args.directory))
    engine.store.clear()
    print(f"Removed snapshots in {engine.store.directory}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

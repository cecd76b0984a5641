"""
Command-line interface for ledger-sync.

Provides CLI commands for operating the ledger reconciler:
- run-once: Run a single reconciliation pass and exit
- watch: Watch the ledger file and run a pass on every change
- pending: List pending records without touching the store or the file
- check-store: Open the configured record store and check it answers
- show-config: Print the effective configuration

Usage:
    ledger-sync run-once [--file PATH]
    ledger-sync watch [--file PATH]
    ledger-sync pending [--file PATH]
    ledger-sync check-store
    ledger-sync show-config

Environment Variables:
    LEDGER_SYNC_FILE: Ledger file to reconcile (default: data/ledger.txt)
    LEDGER_SYNC_STORE: Record store backend, sqlite or http (default: sqlite)
    LEDGER_SYNC_DB_PATH: SQLite record store path (default: data/records.db)
    LEDGER_SYNC_STORE_URL: HTTP record store base URL
    LEDGER_SYNC_LOG_LEVEL: Log level (default: INFO)
"""

import argparse
import sys
from pathlib import Path

from ledger_sync import __version__
from ledger_sync.errors import LedgerSyncError


def _ledger_path(args: argparse.Namespace) -> Path:
    """Resolve the ledger path from ``--file`` or configuration."""
    from ledger_sync.config import config

    file_arg = getattr(args, "file", None)
    return Path(file_arg) if file_arg else config.ledger.absolute_path


def cmd_run_once(args: argparse.Namespace) -> int:
    """
    Run one reconciliation pass.

    Returns:
        0 when the pass completed (even if some records failed), 1 when the
        pass was aborted or the store could not be opened.
    """
    from ledger_sync.config import config
    from ledger_sync.store import create_store
    from ledger_sync.sync import run_pass

    path = _ledger_path(args)
    try:
        with create_store(config.store) as store:
            report = run_pass(
                path,
                store,
                read_attempts=config.ledger.read_attempts,
                read_delay_seconds=config.ledger.read_delay_seconds,
            )
    except LedgerSyncError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"{path}: {report.summary()}")
    return 0


def cmd_watch(args: argparse.Namespace) -> int:
    """
    Watch the ledger file and run a pass on every create/change event.

    The record store is opened once for the lifetime of the watcher and
    closed on shutdown (Ctrl+C).

    Returns:
        0 on clean shutdown, 1 if the store could not be opened.
    """
    from ledger_sync.config import config
    from ledger_sync.store import create_store
    from ledger_sync.sync import LedgerWatcher, run_pass

    path = _ledger_path(args)
    store = create_store(config.store)
    try:
        store.open()
    except LedgerSyncError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    def _pass() -> None:
        run_pass(
            path,
            store,
            read_attempts=config.ledger.read_attempts,
            read_delay_seconds=config.ledger.read_delay_seconds,
        )

    watcher = LedgerWatcher(
        path,
        _pass,
        debounce_seconds=config.watcher.debounce_seconds,
        run_on_start=config.watcher.run_on_start,
    )
    try:
        watcher.start()
        print(f"Watching file: {path}")
        watcher.wait()
        return 0
    except KeyboardInterrupt:
        print("\nShutting down watcher...")
        return 0
    except OSError as e:
        print(f"Error watching {path}: {e}", file=sys.stderr)
        return 1
    finally:
        watcher.stop()
        store.close()


def cmd_pending(args: argparse.Namespace) -> int:
    """
    Print the pending records of the ledger, one per line.

    Returns:
        0 on success, 1 if the ledger could not be read.
    """
    from ledger_sync.config import config
    from ledger_sync.fs import read_ledger
    from ledger_sync.ledger import decode, select_pending

    path = _ledger_path(args)
    try:
        text = read_ledger(
            path,
            attempts=config.ledger.read_attempts,
            delay_seconds=config.ledger.read_delay_seconds,
        )
    except LedgerSyncError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    pending = select_pending(decode(text))
    for record in pending:
        print(f"{record.id};{record.payload}")
    print(f"{len(pending)} pending record(s)", file=sys.stderr)
    return 0


def cmd_check_store(args: argparse.Namespace) -> int:
    """
    Open the configured record store and ping it.

    Returns:
        0 when the store answers, 1 otherwise.
    """
    from ledger_sync.config import config
    from ledger_sync.store import create_store

    try:
        with create_store(config.store) as store:
            store.ping()
    except LedgerSyncError as e:
        print(f"Connection test failed: {e}", file=sys.stderr)
        return 1

    print(f"Connection successful! ({config.store.backend})")
    return 0


def cmd_show_config(args: argparse.Namespace) -> int:
    """Print the effective configuration and where it was loaded from."""
    from ledger_sync.config import print_config_summary

    print_config_summary()
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        prog="ledger-sync",
        description="Reconcile a flat-text work ledger against a record store",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        type=str,
        help="Override the configured log level (or LEDGER_SYNC_LOG_LEVEL env var)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    file_help = "Ledger file (default: configured ledger.path or LEDGER_SYNC_FILE env var)"

    run_once_parser = subparsers.add_parser(
        "run-once",
        help="Run one reconciliation pass",
        description="Push pending records to the store and mark the accepted ones OK.",
    )
    run_once_parser.add_argument("--file", "-f", type=str, help=file_help)
    run_once_parser.set_defaults(func=cmd_run_once)

    watch_parser = subparsers.add_parser(
        "watch",
        help="Watch the ledger and reconcile on every change",
        description="Run a pass when the ledger file is created or changed. Ctrl+C stops.",
    )
    watch_parser.add_argument("--file", "-f", type=str, help=file_help)
    watch_parser.set_defaults(func=cmd_watch)

    pending_parser = subparsers.add_parser(
        "pending",
        help="List pending records",
        description="Print pending records without contacting the store or editing the file.",
    )
    pending_parser.add_argument("--file", "-f", type=str, help=file_help)
    pending_parser.set_defaults(func=cmd_pending)

    check_parser = subparsers.add_parser(
        "check-store",
        help="Check the record store connection",
        description="Open the configured record store and run a trivial query.",
    )
    check_parser.set_defaults(func=cmd_check_store)

    show_config_parser = subparsers.add_parser(
        "show-config",
        help="Show the effective configuration",
        description="Print configuration values and the file they were loaded from.",
    )
    show_config_parser.set_defaults(func=cmd_show_config)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    from ledger_sync.config import config
    from ledger_sync.logging_config import configure_logging

    if args.log_level:
        config.logging.level = args.log_level.upper()
    configure_logging(config.logging)

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())

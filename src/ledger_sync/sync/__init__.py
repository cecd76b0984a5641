"""Pass orchestration: one-shot passes and the file watcher."""

from ledger_sync.sync.runner import (
    PassReport,
    StoreFailure,
    push_records,
    run_pass,
    select_terminated_pending,
)
from ledger_sync.sync.watcher import LedgerEventHandler, LedgerWatcher, PassScheduler

__all__ = [
    "LedgerEventHandler",
    "LedgerWatcher",
    "PassReport",
    "PassScheduler",
    "StoreFailure",
    "push_records",
    "run_pass",
    "select_terminated_pending",
]

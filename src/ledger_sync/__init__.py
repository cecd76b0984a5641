"""ledger-sync: flat-text work ledger reconciliation.

Watches a ledger file of ``id;payload[;status].`` records, pushes every
pending record's payload to an external record store, and marks the records
that the store accepted by inserting ``" ; OK"`` before their terminator.

Version Management
------------------
``__version__`` is read from the installed package metadata at import time.
The single source of truth is the ``version`` field in ``pyproject.toml``.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

# ---------------------------------------------------------------------------
# Package version: read from pyproject.toml via importlib.metadata.
#
# If the package is imported without being installed we fall back to the
# last released version so the CLI can still report something sensible.
# ---------------------------------------------------------------------------
try:
    __version__: str = version("ledger-sync")
except PackageNotFoundError:
    __version__ = "0.1.0"

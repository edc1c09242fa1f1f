"""
AR Kernel - weekly Accounts-Receivable record store

Provides:
- Typed weekly records keyed by week start
- Atomic, single-writer batch upserts with whole-row replacement
- Snapshot-consistent reads for the metric engines
- Structured JSON logging and typed exceptions
"""

__version__ = "0.1.0"

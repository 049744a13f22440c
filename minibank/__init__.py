"""
MiniBank

A single-process account ledger with PIN-gated operations, an append-only
transaction log, and flat-file persistence using Decimal currency amounts.
"""

__version__ = "1.0.0"

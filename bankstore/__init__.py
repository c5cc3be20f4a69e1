"""A bank ledger of accounts, entries and transactional transfers in SQLite."""

__version__ = "0.1.0"
__all__ = ["models", "queries", "store", "util"]
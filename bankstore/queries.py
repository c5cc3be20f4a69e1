"""Typed queries over the accounts, entries and transfers tables."""

import sqlite3
from datetime import datetime, timezone

from .models import Account, Entry, Transfer

NO_ROWS_MESSAGE = "sql: no rows in result set"

_TIMESTAMP_DEFAULT = "(strftime('%Y-%m-%d %H:%M:%f', 'now'))"

_SCHEMA = f"""
CREATE TABLE IF NOT EXISTS accounts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    owner TEXT NOT NULL,
    balance INTEGER NOT NULL,
    currency TEXT NOT NULL,
    create_at TEXT NOT NULL DEFAULT {_TIMESTAMP_DEFAULT}
);
CREATE TABLE IF NOT EXISTS entries (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    account_id INTEGER NOT NULL REFERENCES accounts (id),
    amount INTEGER NOT NULL,
    create_at TEXT NOT NULL DEFAULT {_TIMESTAMP_DEFAULT}
);
CREATE TABLE IF NOT EXISTS transfers (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    from_account_id INTEGER NOT NULL REFERENCES accounts (id),
    to_account_id INTEGER NOT NULL REFERENCES accounts (id),
    amount INTEGER NOT NULL,
    create_at TEXT NOT NULL DEFAULT {_TIMESTAMP_DEFAULT}
);
CREATE INDEX IF NOT EXISTS accounts_owner_idx ON accounts (owner);
CREATE INDEX IF NOT EXISTS entries_account_id_idx ON entries (account_id);
CREATE INDEX IF NOT EXISTS transfers_from_account_id_idx ON transfers (from_account_id);
CREATE INDEX IF NOT EXISTS transfers_to_account_id_idx ON transfers (to_account_id);
CREATE INDEX IF NOT EXISTS transfers_from_to_idx ON transfers (from_account_id, to_account_id);
"""

_ACCOUNT_COLUMNS = "id, owner, balance, currency, create_at"
_ENTRY_COLUMNS = "id, account_id, amount, create_at"
_TRANSFER_COLUMNS = "id, from_account_id, to_account_id, amount, create_at"


class NoRowsError(LookupError):
    """Raised when a query that returns one row finds none."""

    def __init__(self, message=NO_ROWS_MESSAGE):
        super().__init__(message)


def create_schema(connection):
    """Create the bank tables and indexes and turn on foreign key checks."""
    connection.executescript(_SCHEMA)
    connection.execute("PRAGMA foreign_keys = ON")


def _parse_timestamp(value):
    if isinstance(value, datetime):
        moment = value
    else:
        moment = datetime.fromisoformat(value)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def _build(model, row):
    *values, create_at = row
    return model(*values, _parse_timestamp(create_at))


class Queries:
    """Queries run on a database connection.

    The connection is used as given: open it with ``isolation_level=None`` so
    that each statement commits on its own unless an explicit transaction is
    in progress.
    """

    def __init__(self, connection):
        self.connection = connection

    def _one(self, model, sql, params):
        rows = self.connection.execute(sql, params).fetchall()
        if not rows:
            raise NoRowsError()
        return _build(model, rows[0])

    def _many(self, model, sql, params):
        return [_build(model, row) for row in self.connection.execute(sql, params)]

    # Accounts

    def create_account(self, owner, balance, currency):
        """Insert an account and return it."""
        return self._one(
            Account,
            "INSERT INTO accounts (owner, balance, currency) VALUES (?, ?, ?) "
            f"RETURNING {_ACCOUNT_COLUMNS}",
            (owner, balance, currency),
        )

    def get_account(self, account_id):
        """Return the account with the given id."""
        return self._one(
            Account,
            f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE id = ? LIMIT 1",
            (account_id,),
        )

    def get_account_for_update(self, account_id):
        """Return the account with the given id, for use inside a transaction.

        The database locks for writing at transaction level, so no row lock is
        taken here.
        """
        return self._one(
            Account,
            f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE id = ? LIMIT 1",
            (account_id,),
        )

    def list_accounts(self, limit, offset):
        """Return a page of accounts ordered by id."""
        return self._many(
            Account,
            f"SELECT {_ACCOUNT_COLUMNS} FROM accounts ORDER BY id LIMIT ? OFFSET ?",
            (limit, offset),
        )

    def update_account(self, account_id, balance):
        """Set an account's balance and return the updated account."""
        return self._one(
            Account,
            f"UPDATE accounts SET balance = ? WHERE id = ? RETURNING {_ACCOUNT_COLUMNS}",
            (balance, account_id),
        )

    def add_account_balance(self, account_id, amount):
        """Add amount to an account's balance and return the updated account."""
        return self._one(
            Account,
            "UPDATE accounts SET balance = balance + ? WHERE id = ? "
            f"RETURNING {_ACCOUNT_COLUMNS}",
            (amount, account_id),
        )

    def delete_account(self, account_id):
        """Delete the account with the given id, if there is one."""
        self.connection.execute("DELETE FROM accounts WHERE id = ?", (account_id,))

    # Entries

    def create_entry(self, account_id, amount):
        """Insert a balance entry and return it."""
        return self._one(
            Entry,
            "INSERT INTO entries (account_id, amount) VALUES (?, ?) "
            f"RETURNING {_ENTRY_COLUMNS}",
            (account_id, amount),
        )

    def get_entry(self, entry_id):
        """Return the entry with the given id."""
        return self._one(
            Entry,
            f"SELECT {_ENTRY_COLUMNS} FROM entries WHERE id = ? LIMIT 1",
            (entry_id,),
        )

    def list_entries(self, account_id, limit, offset):
        """Return a page of one account's entries ordered by id."""
        return self._many(
            Entry,
            f"SELECT {_ENTRY_COLUMNS} FROM entries WHERE account_id = ? "
            "ORDER BY id LIMIT ? OFFSET ?",
            (account_id, limit, offset),
        )

    # Transfers

    def create_transfer(self, from_account_id, to_account_id, amount):
        """Insert a transfer record and return it."""
        return self._one(
            Transfer,
            "INSERT INTO transfers (from_account_id, to_account_id, amount) "
            f"VALUES (?, ?, ?) RETURNING {_TRANSFER_COLUMNS}",
            (from_account_id, to_account_id, amount),
        )

    def get_transfer(self, transfer_id):
        """Return the transfer with the given id."""
        return self._one(
            Transfer,
            f"SELECT {_TRANSFER_COLUMNS} FROM transfers WHERE id = ? LIMIT 1",
            (transfer_id,),
        )

    def list_transfers(self, from_account_id, to_account_id, limit, offset):
        """Return a page of transfers leaving from_account_id or reaching to_account_id."""
        return self._many(
            Transfer,
            f"SELECT {_TRANSFER_COLUMNS} FROM transfers "
            "WHERE from_account_id = ? OR to_account_id = ? "
            "ORDER BY id LIMIT ? OFFSET ?",
            (from_account_id, to_account_id, limit, offset),
        )


__all__ = ["NoRowsError", "Queries", "create_schema", "sqlite3"]
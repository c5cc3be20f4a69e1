"""Transactions over the bank tables, including money transfers."""

import threading
from contextlib import contextmanager
from dataclasses import dataclass

from .models import Account, Entry, Transfer
from .queries import Queries


class _LockedConnection:
    """Connection wrapper that runs each statement under the store's lock."""

    def __init__(self, connection, lock):
        self._connection = connection
        self._lock = lock

    def execute(self, sql, params=()):
        with self._lock:
            return self._connection.execute(sql, params)


@dataclass(frozen=True)
class TransferTxResult:
    """Everything a transfer transaction created or changed."""

    transfer: Transfer
    from_account_id: int
    to_account_id: int
    from_entry: Entry
    to_entry: Entry
    from_account: Account
    to_account: Account


class Store(Queries):
    """Queries plus transactions on one database connection.

    The connection should be opened with ``isolation_level=None`` and, when
    the store is shared between threads, ``check_same_thread=False``. The
    store serialises access to the connection so that a transaction in one
    thread never sees statements from another.
    """

    def __init__(self, connection):
        self._lock = threading.RLock()
        self._raw_connection = connection
        super().__init__(_LockedConnection(connection, self._lock))

    @contextmanager
    def transaction(self):
        """Run the block in a database transaction and yield its queries.

        The transaction commits when the block ends normally and rolls back
        when it raises; the exception is then raised again.
        """
        with self._lock:
            connection = self._raw_connection
            connection.execute("BEGIN IMMEDIATE")
            try:
                yield Queries(connection)
            except BaseException as exc:
                try:
                    connection.rollback()
                except Exception as rb_exc:
                    raise RuntimeError(f"tx err: {exc}, rb err: {rb_exc}") from exc
                raise
            connection.commit()

    def transfer_tx(self, from_account_id, to_account_id, amount):
        """Move amount from one account to another in a single transaction.

        Records the transfer, one entry for each account, and updates both
        balances. Balances are always updated in order of account id, so
        opposite transfers running at the same time cannot deadlock.
        """
        with self.transaction() as q:
            transfer = q.create_transfer(from_account_id, to_account_id, amount)
            from_entry = q.create_entry(from_account_id, -amount)
            to_entry = q.create_entry(to_account_id, amount)

            if from_account_id < to_account_id:
                from_account, to_account = _add_money(
                    q, from_account_id, -amount, to_account_id, amount
                )
            else:
                to_account, from_account = _add_money(
                    q, to_account_id, amount, from_account_id, -amount
                )

        return TransferTxResult(
            transfer=transfer,
            from_account_id=from_account_id,
            to_account_id=to_account_id,
            from_entry=from_entry,
            to_entry=to_entry,
            from_account=from_account,
            to_account=to_account,
        )


def _add_money(queries, account_id1, amount1, account_id2, amount2):
    account1 = queries.add_account_balance(account_id1, amount1)
    account2 = queries.add_account_balance(account_id2, amount2)
    return account1, account2


__all__ = ["Store", "TransferTxResult"]
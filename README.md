# bankstore

A small bank ledger kept in an SQLite database. It stores accounts, the
entries that record changes to an account's balance, and the transfers
between accounts. `Store.transfer_tx` moves money between two accounts
inside a single database transaction, so a transfer either happens
completely or not at all.

It needs only the standard library. The queries use `RETURNING`, so the
SQLite library that Python is linked against must be version 3.35 or
later.

## Installation

From a checkout of the project:

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Data model

`bankstore.models` holds three frozen dataclasses:

- `Account`: `id`, `owner`, `balance` (whole units), `currency` and
  `create_at`.
- `Entry`: `id`, `account_id`, `amount` (positive or negative) and
  `create_at`.
- `Transfer`: `id`, `from_account_id`, `to_account_id`, `amount` and
  `create_at`.

`create_at` is set by the database when the row is inserted and comes
back as a timezone-aware `datetime` in UTC.

## Queries

`bankstore.queries.create_schema(connection)` creates the `accounts`,
`entries` and `transfers` tables and their indexes if they do not exist,
and turns on SQLite foreign key checks for the connection.

`Queries(connection)` gives one method per query. Open the connection
with `isolation_level=None`, so that each statement commits on its own
unless a transaction has been started explicitly.

```python
import sqlite3

from bankstore.queries import NoRowsError, Queries, create_schema

connection = sqlite3.connect(":memory:", isolation_level=None)
create_schema(connection)
queries = Queries(connection)

alice = queries.create_account("alice", 100, "EUR")
bob = queries.create_account("bob", 50, "EUR")

queries.add_account_balance(alice.id, 25)   # balance becomes 125
queries.update_account(bob.id, 80)          # balance set to 80
first_page = queries.list_accounts(limit=5, offset=0)

queries.delete_account(bob.id)
try:
    queries.get_account(bob.id)
except NoRowsError:
    print("gone")
```

Accounts:

- `create_account(owner, balance, currency)`
- `get_account(account_id)`
- `get_account_for_update(account_id)`: the same lookup, meant for use
  inside a transaction; SQLite locks at transaction level, so it takes
  no row lock of its own.
- `list_accounts(limit, offset)`: ordered by id.
- `update_account(account_id, balance)`: sets the balance.
- `add_account_balance(account_id, amount)`: adds to the balance.
- `delete_account(account_id)`: does nothing if there is no such
  account. With foreign keys on, deleting an account that entries or
  transfers still refer to raises `sqlite3.IntegrityError`.

Entries: `create_entry(account_id, amount)`, `get_entry(entry_id)` and
`list_entries(account_id, limit, offset)`.

Transfers: `create_transfer(from_account_id, to_account_id, amount)`,
`get_transfer(transfer_id)` and
`list_transfers(from_account_id, to_account_id, limit, offset)`, which
returns transfers leaving `from_account_id` or reaching `to_account_id`,
ordered by id.

A method that returns one row raises `NoRowsError` (a `LookupError`,
with the message `sql: no rows in result set`) when there is none; this
includes updating an account that does not exist. List methods return a
list, empty when nothing matches.

## Transfers

`bankstore.store.Store` is a `Queries` that adds transactions.

```python
from bankstore.store import Store

store = Store(connection)
result = store.transfer_tx(from_account_id=alice.id, to_account_id=bob.id, amount=10)
print(result.from_account.balance, result.to_account.balance)
```

`transfer_tx` records the transfer, an entry of `-amount` on the sending
account and one of `amount` on the receiving account, and updates both
balances, all in one transaction. It returns a `TransferTxResult` with
`transfer`, `from_account_id`, `to_account_id`, `from_entry`,
`to_entry`, `from_account` and `to_account` (the accounts as they are
after the update). The two balance updates always run in order of
account id.

`Store.transaction()` is a context manager that starts the transaction
with `BEGIN IMMEDIATE` and yields a `Queries` bound to it. It commits
when the block ends and rolls back if the block raises, then raises the
exception again; if the rollback itself fails, a `RuntimeError` naming
both errors is raised instead.

```python
with store.transaction() as q:
    q.add_account_balance(alice.id, -5)
    q.create_entry(alice.id, -5)
```

A `Store` can be shared between threads: it serialises every statement
and every transaction on its connection with a lock. Open the
connection with `check_same_thread=False` as well as
`isolation_level=None` in that case.

## Test data helpers

`bankstore.util` builds random test data:

- `random_int(min_value, max_value)`: both ends included; raises
  `ValueError` if `max_value` is less than `min_value`.
- `random_string(n)`: `n` lower-case letters; raises `ValueError` for a
  negative `n`.
- `random_money()`: an integer from 0 to 10000.
- `random_currency()`: one of `EUR`, `USD` or `CAD`.

## What it does not do

- It is a library only: there is no command-line tool, HTTP API or
  server.
- It works with SQLite through the standard `sqlite3` module; there is
  no support for other database servers and no migration tool beyond
  `create_schema`.
- `transfer_tx` does not check that the accounts share a currency, that
  the amount is positive, or that the sending account has enough money.
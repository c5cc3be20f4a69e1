import sqlite3
from datetime import timedelta

import pytest

from bankstore.models import Account, Entry, Transfer
from bankstore.queries import NoRowsError, Queries, create_schema
from bankstore.util import random_currency, random_money, random_string


@pytest.fixture
def queries():
    connection = sqlite3.connect(":memory:", isolation_level=None)
    create_schema(connection)
    yield Queries(connection)
    connection.close()


def create_random_account(queries):
    owner = random_string(8)
    balance = random_money()
    currency = random_currency()
    account = queries.create_account(owner, balance, currency)
    assert isinstance(account, Account)
    assert account.owner == owner
    assert account.balance == balance
    assert account.currency == currency
    assert account.id != 0
    assert account.create_at.year >= 2000
    return account


def create_random_entry(queries, account):
    amount = random_money()
    entry = queries.create_entry(account.id, amount)
    assert isinstance(entry, Entry)
    assert entry.account_id == account.id
    assert entry.amount == amount
    assert entry.id != 0
    assert entry.create_at.year >= 2000
    return entry


def create_random_transfer(queries, account1, account2):
    amount = random_money()
    transfer = queries.create_transfer(account1.id, account2.id, amount)
    assert isinstance(transfer, Transfer)
    assert transfer.to_account_id == account2.id
    assert transfer.from_account_id == account1.id
    assert transfer.amount == amount
    assert transfer.id != 0
    assert transfer.create_at.year >= 2000
    return transfer


def test_create_account(queries):
    account = create_random_account(queries)
    assert queries.get_account(account.id) == account


def test_get_account(queries):
    account1 = create_random_account(queries)
    account2 = queries.get_account(account1.id)
    assert account2.id == account1.id
    assert account2.owner == account1.owner
    assert account2.balance == account1.balance
    assert account2.currency == account1.currency
    assert abs(account2.create_at - account1.create_at) <= timedelta(seconds=1)


def test_get_account_for_update(queries):
    account1 = create_random_account(queries)
    assert queries.get_account_for_update(account1.id) == account1


def test_update_account(queries):
    account1 = create_random_account(queries)
    balance = random_money()
    account2 = queries.update_account(account1.id, balance)
    assert account2.id == account1.id
    assert account2.owner == account1.owner
    assert account2.balance == balance
    assert account2.currency == account1.currency
    assert abs(account2.create_at - account1.create_at) <= timedelta(seconds=1)


def test_update_missing_account_raises(queries):
    with pytest.raises(NoRowsError):
        queries.update_account(12345, 10)


def test_add_account_balance(queries):
    account1 = create_random_account(queries)
    account2 = queries.add_account_balance(account1.id, -10)
    assert account2.balance == account1.balance - 10
    assert queries.get_account(account1.id).balance == account1.balance - 10


def test_delete_account(queries):
    account1 = create_random_account(queries)
    queries.delete_account(account1.id)
    with pytest.raises(NoRowsError) as excinfo:
        queries.get_account(account1.id)
    assert str(excinfo.value) == "sql: no rows in result set"


def test_list_accounts(queries):
    created = [create_random_account(queries) for _ in range(10)]
    accounts = queries.list_accounts(5, 5)
    assert len(accounts) == 5
    assert accounts == created[5:]


def test_list_accounts_empty(queries):
    assert queries.list_accounts(5, 0) == []


def test_create_entry(queries):
    account = create_random_account(queries)
    entry = create_random_entry(queries, account)
    assert queries.get_entry(entry.id) == entry


def test_get_entry(queries):
    account = create_random_account(queries)
    entry = create_random_entry(queries, account)
    entry2 = queries.get_entry(entry.id)
    assert entry2.account_id == entry.account_id
    assert entry2.amount == entry.amount
    assert entry2.id == entry.id
    assert abs(entry2.create_at - entry.create_at) <= timedelta(seconds=1)


def test_get_missing_entry_raises(queries):
    with pytest.raises(NoRowsError):
        queries.get_entry(999)


def test_entry_for_missing_account_rejected(queries):
    with pytest.raises(sqlite3.IntegrityError):
        queries.create_entry(4242, 10)


def test_list_entries(queries):
    account = create_random_account(queries)
    other = create_random_account(queries)
    for _ in range(10):
        create_random_entry(queries, account)
        create_random_entry(queries, other)
    entries = queries.list_entries(account.id, 5, 5)
    assert len(entries) == 5
    assert all(entry.account_id == account.id for entry in entries)
    ids = [entry.id for entry in entries]
    assert ids == sorted(ids)


def test_create_transfer(queries):
    account1 = create_random_account(queries)
    account2 = create_random_account(queries)
    transfer = create_random_transfer(queries, account1, account2)
    assert queries.get_transfer(transfer.id) == transfer


def test_get_transfer(queries):
    account1 = create_random_account(queries)
    account2 = create_random_account(queries)
    transfer1 = create_random_transfer(queries, account1, account2)
    transfer2 = queries.get_transfer(transfer1.id)
    assert transfer2.to_account_id == transfer1.to_account_id
    assert transfer2.from_account_id == transfer1.from_account_id
    assert transfer2.amount == transfer1.amount
    assert transfer2.id == transfer1.id
    assert abs(transfer2.create_at - transfer1.create_at) <= timedelta(seconds=1)


def test_get_missing_transfer_raises(queries):
    with pytest.raises(NoRowsError):
        queries.get_transfer(77)


def test_list_transfers(queries):
    account1 = create_random_account(queries)
    account2 = create_random_account(queries)
    for _ in range(10):
        create_random_transfer(queries, account1, account2)
    transfers = queries.list_transfers(account1.id, account2.id, 5, 5)
    assert len(transfers) == 5
    for transfer in transfers:
        assert (
            transfer.from_account_id == account1.id
            or transfer.to_account_id == account1.id
        )


def test_list_transfers_matches_either_side(queries):
    account1 = create_random_account(queries)
    account2 = create_random_account(queries)
    account3 = create_random_account(queries)
    outgoing = create_random_transfer(queries, account1, account3)
    incoming = create_random_transfer(queries, account3, account2)
    create_random_transfer(queries, account3, account3)
    transfers = queries.list_transfers(account1.id, account2.id, 10, 0)
    assert transfers == [outgoing, incoming]
"""Records stored by the bank: accounts, balance entries and transfers."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Account:
    """A customer account holding a balance in one currency."""

    id: int
    owner: str
    balance: int
    currency: str
    create_at: datetime


@dataclass(frozen=True)
class Entry:
    """A change to one account's balance; the amount may be negative or positive."""

    id: int
    account_id: int
    amount: int
    create_at: datetime


@dataclass(frozen=True)
class Transfer:
    """Money moved from one account to another; the amount must be positive."""

    id: int
    from_account_id: int
    to_account_id: int
    amount: int
    create_at: datetime
"""Records stored by the bank: accounts, entries and transfers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Sequence
from uuid import UUID


def _as_uuid(value: Any) -> UUID:
    return value if isinstance(value, UUID) else UUID(str(value))


def _as_datetime(value: Any) -> datetime:
    return value if isinstance(value, datetime) else datetime.fromisoformat(str(value))


@dataclass(frozen=True)
class Account:
    """A bank account holding a balance in one currency."""

    id: UUID
    owner: str
    balance: int
    currency: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> Account:
        """Build an account from a (id, owner, balance, currency, created_at, updated_at) row."""
        id_, owner, balance, currency, created_at, updated_at = row
        return cls(
            id=_as_uuid(id_),
            owner=owner,
            balance=int(balance),
            currency=currency,
            created_at=_as_datetime(created_at),
            updated_at=_as_datetime(updated_at),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping."""
        return {
            "id": str(self.id),
            "owner": self.owner,
            "balance": self.balance,
            "currency": self.currency,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass(frozen=True)
class Entry:
    """A change to one account's balance; the amount may be negative or positive."""

    id: UUID
    account_id: UUID
    amount: int
    created_at: datetime

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> Entry:
        """Build an entry from a (id, account_id, amount, created_at) row."""
        id_, account_id, amount, created_at = row
        return cls(
            id=_as_uuid(id_),
            account_id=_as_uuid(account_id),
            amount=int(amount),
            created_at=_as_datetime(created_at),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping."""
        return {
            "id": str(self.id),
            "account_id": str(self.account_id),
            "amount": self.amount,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class Transfer:
    """A movement of money between two accounts; the amount must be positive."""

    id: UUID
    from_account_id: UUID
    to_account_id: UUID
    amount: int
    created_at: datetime

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> Transfer:
        """Build a transfer from a (id, from_account_id, to_account_id, amount, created_at) row."""
        id_, from_account_id, to_account_id, amount, created_at = row
        return cls(
            id=_as_uuid(id_),
            from_account_id=_as_uuid(from_account_id),
            to_account_id=_as_uuid(to_account_id),
            amount=int(amount),
            created_at=_as_datetime(created_at),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping."""
        return {
            "id": str(self.id),
            "from_account_id": str(self.from_account_id),
            "to_account_id": str(self.to_account_id),
            "amount": self.amount,
            "created_at": self.created_at.isoformat(),
        }
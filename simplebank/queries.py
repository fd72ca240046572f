"""SQL queries over accounts, entries and transfers, on a DB-API (sqlite3) connection."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Sequence, TypeVar
from uuid import UUID, uuid4

from .models import Account, Entry, Transfer

T = TypeVar("T")

_SCHEMA = """
CREATE TABLE IF NOT EXISTS accounts (
    id TEXT PRIMARY KEY,
    owner TEXT NOT NULL,
    balance INTEGER NOT NULL,
    currency TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS entries (
    id TEXT PRIMARY KEY,
    account_id TEXT REFERENCES accounts (id),
    amount INTEGER NOT NULL,
    created_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS transfers (
    id TEXT PRIMARY KEY,
    from_account_id TEXT NOT NULL REFERENCES accounts (id),
    to_account_id TEXT NOT NULL REFERENCES accounts (id),
    amount INTEGER NOT NULL,
    created_at TEXT NOT NULL
);
"""

_ACCOUNT_COLUMNS = "id, owner, balance, currency, created_at, updated_at"
_ENTRY_COLUMNS = "id, account_id, amount, created_at"
_TRANSFER_COLUMNS = "id, from_account_id, to_account_id, amount, created_at"


class NoRowsError(LookupError):
    """Raised when a query that must return one row finds none."""

    def __init__(self, message: str = "sql: no rows in result set") -> None:
        super().__init__(message)


def create_schema(connection: Any) -> None:
    """Create the accounts, entries and transfers tables if they are missing."""
    connection.executescript(_SCHEMA)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class Queries:
    """Typed queries run against a connection or an open transaction.

    Transaction control belongs to the caller; the queries never commit.
    """

    def __init__(self, db: Any) -> None:
        self._db = db

    def with_tx(self, tx: Any) -> Queries:
        """Return queries that run on ``tx`` instead."""
        return Queries(tx)

    def _one(self, sql: str, params: Sequence[Any], build: Callable[[Sequence[Any]], T]) -> T:
        row = self._db.execute(sql, tuple(params)).fetchone()
        if row is None:
            raise NoRowsError()
        return build(row)

    def _many(self, sql: str, params: Sequence[Any], build: Callable[[Sequence[Any]], T]) -> list[T]:
        return [build(row) for row in self._db.execute(sql, tuple(params)).fetchall()]

    # accounts

    def create_account(self, owner: str, balance: int, currency: str) -> Account:
        """Insert a new account and return it."""
        account_id = uuid4()
        now = _now()
        self._db.execute(
            "INSERT INTO accounts (id, owner, balance, currency, created_at, updated_at) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (str(account_id), owner, balance, currency, now, now),
        )
        return self.get_account(account_id)

    def get_account(self, account_id: UUID) -> Account:
        """Return the account with this id."""
        return self._one(
            f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE id = ? LIMIT 1",
            (str(account_id),),
            Account.from_row,
        )

    def get_account_for_update(self, account_id: UUID) -> Account:
        """Return the account with this id, for reading inside a write transaction."""
        return self.get_account(account_id)

    def list_accounts(self, limit: int, offset: int) -> list[Account]:
        """Return up to ``limit`` accounts after skipping ``offset``."""
        return self._many(
            f"SELECT {_ACCOUNT_COLUMNS} FROM accounts LIMIT ? OFFSET ?",
            (limit, offset),
            Account.from_row,
        )

    def _update_balance(self, sql: str, account_id: UUID, value: int) -> Account:
        cursor = self._db.execute(sql, (value, _now(), str(account_id)))
        if cursor.rowcount == 0:
            raise NoRowsError()
        return self.get_account(account_id)

    def update_account(self, account_id: UUID, balance: int) -> Account:
        """Set an account's balance and return the updated account."""
        return self._update_balance(
            "UPDATE accounts SET balance = ?, updated_at = ? WHERE id = ?",
            account_id,
            balance,
        )

    def add_to_account_balance(self, account_id: UUID, add_by: int) -> Account:
        """Add ``add_by`` to an account's balance and return the updated account."""
        return self._update_balance(
            "UPDATE accounts SET balance = balance + ?, updated_at = ? WHERE id = ?",
            account_id,
            add_by,
        )

    def delete_account(self, account_id: UUID) -> Account:
        """Delete an account and return what it held."""
        account = self.get_account(account_id)
        self._db.execute("DELETE FROM accounts WHERE id = ?", (str(account_id),))
        return account

    # entries

    def create_entry(self, account_id: UUID, amount: int) -> Entry:
        """Record a balance change for an account."""
        entry_id = uuid4()
        self._db.execute(
            "INSERT INTO entries (id, account_id, amount, created_at) VALUES (?, ?, ?, ?)",
            (str(entry_id), str(account_id), amount, _now()),
        )
        return self.get_entry(entry_id)

    def get_entry(self, entry_id: UUID) -> Entry:
        """Return the entry with this id."""
        return self._one(
            f"SELECT {_ENTRY_COLUMNS} FROM entries WHERE id = ?",
            (str(entry_id),),
            Entry.from_row,
        )

    def list_entries(self, limit: int, offset: int) -> list[Entry]:
        """Return up to ``limit`` entries after skipping ``offset``."""
        return self._many(
            f"SELECT {_ENTRY_COLUMNS} FROM entries LIMIT ? OFFSET ?",
            (limit, offset),
            Entry.from_row,
        )

    # transfers

    def create_transfer(self, from_account_id: UUID, to_account_id: UUID, amount: int) -> Transfer:
        """Record a transfer between two accounts."""
        transfer_id = uuid4()
        self._db.execute(
            "INSERT INTO transfers (id, from_account_id, to_account_id, amount, created_at) "
            "VALUES (?, ?, ?, ?, ?)",
            (str(transfer_id), str(from_account_id), str(to_account_id), amount, _now()),
        )
        return self.get_transfer(transfer_id)

    def get_transfer(self, transfer_id: UUID) -> Transfer:
        """Return the transfer with this id."""
        return self._one(
            f"SELECT {_TRANSFER_COLUMNS} FROM transfers WHERE id = ? LIMIT 1",
            (str(transfer_id),),
            Transfer.from_row,
        )
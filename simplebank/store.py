"""Money transfers run as single transactions over the bank's queries."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, TypeVar
from uuid import UUID

from .models import Account, Entry, Transfer
from .queries import Queries

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SAVEPOINT = "store_tx"


def _uuid(value: Any) -> UUID:
    return value if isinstance(value, UUID) else UUID(str(value))


@dataclass(frozen=True)
class TransferResult:
    """Everything a transfer created or changed."""

    transfer: Transfer
    from_account: Account
    to_account: Account
    from_entry: Entry
    to_entry: Entry

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping."""
        return {
            "transfer": self.transfer.to_dict(),
            "from_account": self.from_account.to_dict(),
            "to_account": self.to_account.to_dict(),
            "from_entry": self.from_entry.to_dict(),
            "to_entry": self.to_entry.to_dict(),
        }


class Store(Queries):
    """All queries, plus operations that must run inside one transaction.

    Transactions are serialised, so one store may be shared between threads
    (the connection must then allow use from several threads).
    """

    def __init__(self, connection: Any) -> None:
        super().__init__(connection)
        self._connection = connection
        self._lock = threading.Lock()

    def _exec_tx(self, fn: Callable[[Queries], T]) -> T:
        """Run ``fn`` in a transaction; commit on success, roll back on error."""
        with self._lock:
            self._connection.execute(f"SAVEPOINT {_SAVEPOINT}")
            try:
                result = fn(self.with_tx(self._connection))
            except Exception as err:
                try:
                    self._connection.execute(f"ROLLBACK TO {_SAVEPOINT}")
                    self._connection.execute(f"RELEASE {_SAVEPOINT}")
                except Exception as rb_err:
                    raise RuntimeError(f"tx err: {err}, rbErr: {rb_err}") from err
                raise
            self._connection.execute(f"RELEASE {_SAVEPOINT}")
            return result

    def transfer_tx(
        self,
        from_account_id: UUID,
        to_account_id: UUID,
        amount: int,
        tx_name: str | None = None,
    ) -> TransferResult:
        """Move ``amount`` from one account to another.

        Records the transfer, one entry per account, and updates both balances,
        all in one transaction.
        """
        from_id = _uuid(from_account_id)
        to_id = _uuid(to_account_id)

        def run(q: Queries) -> TransferResult:
            logger.debug("%s create transfer", tx_name)
            transfer = q.create_transfer(from_id, to_id, amount)

            logger.debug("%s create entry 1", tx_name)
            from_entry = q.create_entry(from_id, -amount)

            logger.debug("%s create entry 2", tx_name)
            to_entry = q.create_entry(to_id, amount)

            # Update balances in a fixed id order so concurrent opposite
            # transfers take their locks in the same order.
            if from_id.bytes > to_id.bytes:
                from_account = q.add_to_account_balance(from_id, -amount)
                to_account = q.add_to_account_balance(to_id, amount)
            else:
                to_account = q.add_to_account_balance(to_id, amount)
                from_account = q.add_to_account_balance(from_id, -amount)

            return TransferResult(
                transfer=transfer,
                from_account=from_account,
                to_account=to_account,
                from_entry=from_entry,
                to_entry=to_entry,
            )

        return self._exec_tx(run)


class Server:
    """Serves the bank's operations from a store."""

    def __init__(self, store: Store) -> None:
        self.store = store
        self.router: Any = None
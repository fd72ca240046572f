import logging
import sqlite3
from concurrent.futures import ThreadPoolExecutor
from uuid import uuid4

import pytest

from simplebank.models import Account
from simplebank.queries import NoRowsError, create_schema
from simplebank.random_utils import (
    random_amount,
    random_currency,
    random_int,
    random_owner,
)
from simplebank.store import Server, Store, TransferResult


@pytest.fixture
def connection():
    conn = sqlite3.connect(":memory:", isolation_level=None, check_same_thread=False)
    create_schema(conn)
    yield conn
    conn.close()


@pytest.fixture
def store(connection):
    return Store(connection)


def create_random_account(store: Store) -> Account:
    owner, balance, currency = random_owner(), random_amount(), random_currency()
    account = store.create_account(owner, balance, currency)
    assert account.owner == owner
    assert account.balance == balance
    assert account.currency == currency
    return account


def run_concurrently(calls):
    with ThreadPoolExecutor(max_workers=10) as pool:
        futures = [pool.submit(fn, *args) for fn, args in calls]
        return [future.result() for future in futures]


def check_result(store, result, account1, account2, amount):
    transfer = result.transfer
    assert transfer.from_account_id == account1.id
    assert transfer.to_account_id == account2.id
    assert transfer.amount == amount
    assert store.get_transfer(transfer.id) == transfer

    assert result.from_entry.account_id == account1.id
    assert result.from_entry.amount == -amount
    assert result.to_entry.account_id == account2.id
    assert result.to_entry.amount == amount
    assert result.from_entry.account_id != result.to_entry.account_id

    assert result.from_account.id == account1.id
    assert result.to_account.id == account2.id

    diff1 = account1.balance - result.from_account.balance
    diff2 = result.to_account.balance - account2.balance
    assert diff1 == diff2
    assert diff1 > 0
    return diff1


def test_transfer_tx(store):
    account1 = create_random_account(store)
    account2 = create_random_account(store)
    amount = 10
    n = 50

    results = run_concurrently(
        [(store.transfer_tx, (account1.id, account2.id, amount, f"tx {i + 1}")) for i in range(n)]
    )

    diffs = set()
    for result in results:
        diff = check_result(store, result, account1, account2, amount)
        assert diff % amount == 0
        diffs.add(diff // amount)
    assert diffs == set(range(1, n + 1))

    updated_from = store.get_account(account1.id)
    updated_to = store.get_account(account2.id)
    assert updated_from.balance == account1.balance - n * amount
    assert updated_to.balance == account2.balance + n * amount


def test_transfer_tx_deadlock(store):
    account1 = create_random_account(store)
    account2 = create_random_account(store)
    amount = 10
    n = 10

    calls = []
    for i in range(n):
        from_id, to_id = account1.id, account2.id
        if i % 2 == 0:
            from_id, to_id = account2.id, account1.id
        calls.append((store.transfer_tx, (from_id, to_id, amount)))
    results = run_concurrently(calls)
    assert len(results) == n

    assert store.get_account(account1.id).balance == account1.balance
    assert store.get_account(account2.id).balance == account2.balance


def test_transfer_tx_random_amounts(store):
    account1 = create_random_account(store)
    account2 = create_random_account(store)
    n = 50
    amounts = [random_int(1, 250) for _ in range(n)]

    results = run_concurrently(
        [(store.transfer_tx, (account1.id, account2.id, amount)) for amount in amounts]
    )

    for amount, result in zip(amounts, results):
        check_result(store, result, account1, account2, amount)

    total = sum(amounts)
    assert store.get_account(account1.id).balance == account1.balance - total
    assert store.get_account(account2.id).balance == account2.balance + total


def test_transfer_tx_records_entries(store):
    account1 = create_random_account(store)
    account2 = create_random_account(store)

    result = store.transfer_tx(account1.id, account2.id, 25)

    entries = store.list_entries(10, 0)
    assert {entry.id for entry in entries} == {result.from_entry.id, result.to_entry.id}
    assert sorted(entry.amount for entry in entries) == [-25, 25]


def test_transfer_tx_accepts_string_ids(store):
    account1 = create_random_account(store)
    account2 = create_random_account(store)

    result = store.transfer_tx(str(account1.id), str(account2.id), 7)

    assert result.from_account.balance == account1.balance - 7
    assert result.to_account.balance == account2.balance + 7


def test_transfer_tx_to_missing_account_rolls_back(store):
    account1 = create_random_account(store)
    missing = uuid4()

    with pytest.raises(NoRowsError):
        store.transfer_tx(account1.id, missing, 10)

    assert store.list_entries(10, 0) == []
    assert store.get_account(account1.id).balance == account1.balance


def test_store_usable_after_failed_transfer(store):
    account1 = create_random_account(store)
    account2 = create_random_account(store)

    with pytest.raises(NoRowsError):
        store.transfer_tx(uuid4(), account2.id, 10)

    result = store.transfer_tx(account1.id, account2.id, 10)
    assert store.get_account(account2.id).balance == account2.balance + 10
    assert store.get_transfer(result.transfer.id).amount == 10


def test_transfer_tx_logs_tx_name(store, caplog):
    account1 = create_random_account(store)
    account2 = create_random_account(store)
    caplog.set_level(logging.DEBUG, logger="simplebank.store")

    store.transfer_tx(account1.id, account2.id, 5, "tx 1")

    messages = [record.getMessage() for record in caplog.records]
    assert messages == ["tx 1 create transfer", "tx 1 create entry 1", "tx 1 create entry 2"]


def test_transfer_result_to_dict(store):
    account1 = create_random_account(store)
    account2 = create_random_account(store)

    result = store.transfer_tx(account1.id, account2.id, 3)
    data = result.to_dict()

    assert isinstance(result, TransferResult)
    assert data["transfer"]["amount"] == 3
    assert data["from_entry"]["amount"] == -3
    assert data["to_account"]["id"] == str(account2.id)
    assert data["from_account"]["balance"] == account1.balance - 3


def test_server_holds_store(store):
    server = Server(store)
    assert server.store is store
    assert server.router is None
# simplebank

simplebank keeps a small bank ledger in an SQLite database (any DB-API
connection that offers `execute` and `executescript` with `?` parameters
will do). It stores three kinds of record:

- **accounts**: an owner, a balance in whole units, and a currency;
- **entries**: each change to an account's balance, positive or negative;
- **transfers**: money moved from one account to another.

A transfer runs as a single unit. It writes the transfer record and one
entry for each side, and then updates both balances. If any step raises,
every change made by that transfer is rolled back and the error is raised
again.

## Installation

```
pip install .
```

Only the Python standard library is needed (Python 3.10 or later). To run
the tests:

```
pip install ".[test]"
pytest
```

## Usage

### Setting up

```python
import sqlite3

from simplebank.queries import Queries, NoRowsError, create_schema
from simplebank.store import Store

connection = sqlite3.connect("bank.db")
create_schema(connection)
```

`create_schema` creates the `accounts`, `entries` and `transfers` tables
if they do not already exist.

### Single records

`Queries` runs individual statements on a connection or on an open
transaction. It never commits, so call `connection.commit()` yourself when
the changes should be made permanent.

```python
queries = Queries(connection)

alice = queries.create_account("alice", 1000, "USD")
bob = queries.create_account("bob", 500, "EUR")

same = queries.get_account(alice.id)
page = queries.list_accounts(limit=5, offset=0)
queries.update_account(alice.id, 1200)          # set the balance
queries.add_to_account_balance(alice.id, -200)  # change the balance by an amount
connection.commit()
```

Each of these methods returns the account as it stands afterwards.
`get_account_for_update` reads an account just as `get_account` does.
`with_tx(tx)` returns a new `Queries` that runs on `tx`.

If no row matches, `get_account`, `get_account_for_update`,
`update_account`, `add_to_account_balance`, `delete_account`, `get_entry`
and `get_transfer` raise `NoRowsError` (a `LookupError`):

```python
queries.delete_account(bob.id)   # returns the deleted account
try:
    queries.get_account(bob.id)
except NoRowsError:
    print("gone")
```

You can also create and read entries and transfers one at a time:

```python
entry = queries.create_entry(alice.id, -50)
queries.get_entry(entry.id)
queries.list_entries(limit=10, offset=0)

transfer = queries.create_transfer(alice.id, carol_id, 25)
queries.get_transfer(transfer.id)
```

### Transfers

`Store` is a `Queries` on a connection, and adds `transfer_tx`:

```python
store = Store(connection)
carol = store.create_account("carol", 300, "USD")

result = store.transfer_tx(alice.id, carol.id, 10, tx_name="tx 1")
print(result.transfer.amount)     # 10
print(result.from_entry.amount)   # -10
print(result.to_entry.amount)     # 10
print(result.from_account.balance, result.to_account.balance)
connection.commit()
```

`transfer_tx` runs its steps inside an SQLite savepoint. When a step fails,
it rolls back to that savepoint and raises the error again. If the rollback
itself also fails, it raises a `RuntimeError` that names both errors.

Account ids may be given as `uuid.UUID` values or as strings. The two
balances are updated in an order fixed by the account ids' bytes. The
store also runs one transfer at a time, behind a lock. A single `Store`
may therefore be shared between threads, as long as the connection allows
it, for example `sqlite3.connect(path, check_same_thread=False)`.

Each step is logged at DEBUG level on the `simplebank.store` logger,
prefixed with `tx_name`.

`transfer_tx` returns a `TransferResult` holding `transfer`, `from_entry`,
`to_entry`, and `from_account` and `to_account` as they stand after the
update.

### Records

`simplebank.models` defines `Account`, `Entry` and `Transfer` as frozen
dataclasses:

- ids are `uuid.UUID` values;
- timestamps are timezone-aware `datetime` values in UTC;
- `from_row(row)` builds a record from a database row;
- `to_dict()` returns a JSON-ready mapping (ids and timestamps as strings).

`TransferResult.to_dict()` nests the five records in the same way.

### Test data

`simplebank.random_utils` generates test data:

- `random_int(min_value, max_value)`: an integer between the two values,
  both included. Raises `ValueError` if `max_value < min_value`.
- `random_string(n)`: `n` random lower-case letters.
- `random_owner()`: a 30-letter owner name.
- `random_amount()`: an amount from 0 to 2500.
- `random_currency()`: one of `USD`, `TRY` or `EUR`.

## What it does not do

- `simplebank.store.Server` only holds a `store`. It has no routes, and it
  neither listens on a port nor answers requests, so the package offers no
  HTTP API.
- The package installs no command-line program.
- Transfers do not check currencies, whether the amount is positive, or
  whether the balance is sufficient.
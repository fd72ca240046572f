"""A small bank ledger on SQLite: accounts, entries and transactional transfers."""

__version__ = "0.1.0"
__all__ = ["models", "queries", "random_utils", "store"]
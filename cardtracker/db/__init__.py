from cardtracker.db.database import get_session, init_db
from cardtracker.db.operations import (
    add_pending,
    clear_all_pending,
    delete_pending,
    get_all_pending,
    get_catalog,
    pending_to_model,
    put_catalog,
)
from cardtracker.db.store import DurableStore, SqlAlchemyStore

__all__ = [
    "DurableStore",
    "SqlAlchemyStore",
    "add_pending",
    "clear_all_pending",
    "delete_pending",
    "get_all_pending",
    "get_catalog",
    "get_session",
    "init_db",
    "pending_to_model",
    "put_catalog",
]

from .crate_store import SqlAlchemyCrateStore
from .ownership import SqlAlchemyOwnershipResolver
from .sqlalchemy_db import SessionProvider, create_db_engine, get_db_url

__all__ = [
    "SqlAlchemyCrateStore",
    "SqlAlchemyOwnershipResolver",
    "SessionProvider",
    "create_db_engine",
    "get_db_url",
]

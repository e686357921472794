from .models import Base
from .repository import AutomationStore, InMemoryAutomationStore
from .session import SessionContext, create_db_engine, create_schema, get_engine, make_session_factory
from .sql_store import SqlAlchemyAutomationStore

__all__ = [
    "AutomationStore",
    "Base",
    "InMemoryAutomationStore",
    "SessionContext",
    "SqlAlchemyAutomationStore",
    "create_db_engine",
    "create_schema",
    "get_engine",
    "make_session_factory",
]

from .settings import settings
from .database import async_session_manager, dispose_engine, engine
from .table_names import TableNames

__all__ = [
    "settings",
    "async_session_manager",
    "dispose_engine",
    "engine",
    "TableNames",
]

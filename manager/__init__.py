"""
Document store engine: generic CRUD, referential integrity and the
per-collection repository facade.
"""

from manager.crud import CrudEngine
from manager.database import Database, create_database, get_database
from manager.integrity import IntegrityManager

__all__ = [
    "CrudEngine",
    "Database",
    "IntegrityManager",
    "create_database",
    "get_database",
]

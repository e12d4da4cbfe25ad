"""
Database module - PostgreSQL and MongoDB connections.
"""
from careerhub.db.postgres import init_postgres_schema, test_postgres_connection
from careerhub.db.mongodb import get_mongo_db, init_mongo_indexes, test_mongo_connection

__all__ = [
    "init_postgres_schema",
    "test_postgres_connection",
    "get_mongo_db",
    "init_mongo_indexes",
    "test_mongo_connection"
]

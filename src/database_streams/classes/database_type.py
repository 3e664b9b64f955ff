from __future__ import annotations
from enum import Enum
from sqlite3 import Connection as SQLiteConnection

from mysql.connector.abstracts import MySQLConnectionAbstract
from psycopg2.extensions import connection as PSQLConnection

from ..exceptions import DatabaseTypeNotSupported


class DatabaseType(Enum): 
    """Enum of Database types for standardization and type checking."""
    MYSQL = 1
    POSTGRESQL = 2
    SQLITE = 3

    @classmethod
    def of(cls, connection:object) -> DatabaseType:
        """Returns the DatabaseType of the given DB-API connection, or raises DatabaseTypeNotSupported.
        
        NOTE: MySQLConnectionAbstract covers both the pure Python and the C extension connections
        """
        if isinstance(connection, SQLiteConnection): return cls.SQLITE
        if isinstance(connection, MySQLConnectionAbstract): return cls.MYSQL
        if isinstance(connection, PSQLConnection): return cls.POSTGRESQL
        raise DatabaseTypeNotSupported(type(connection).__name__)

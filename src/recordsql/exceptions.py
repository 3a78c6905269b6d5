"""
Exception classes and driver exception groups.
"""
import sqlite3

import pymysql


class DatabaseError(Exception):
    """Base class for all recordsql errors.
    """


class ConnectionStateError(DatabaseError):
    """Operation attempted on a missing, closed or read-only handle.

    Never retried: the caller acquired the wrong kind of handle or used one
    after releasing it.
    """


class QueryError(DatabaseError):
    """Error in query construction or execution raised by this package.
    """


class TypeConversionError(DatabaseError):
    """A stored value cannot be read as its declared column type.
    """


class ValidationError(DatabaseError):
    """Caller-contract violation, such as an empty IN list or empty batch.
    """


DbConnectionError = (
    pymysql.err.OperationalError,
    pymysql.err.InterfaceError,
    sqlite3.OperationalError,
    sqlite3.InterfaceError,
    ConnectionStateError,
    )

IntegrityError = (
    pymysql.err.IntegrityError,
    sqlite3.IntegrityError,
    )

ProgrammingError = (
    pymysql.err.ProgrammingError,
    pymysql.err.DatabaseError,
    sqlite3.ProgrammingError,
    sqlite3.DatabaseError,
    QueryError,
    )

OperationalError = (
    pymysql.err.OperationalError,
    sqlite3.OperationalError,
    )

# MySQL reports duplicate keys as a plain IntegrityError (errno 1062)
UniqueViolation = (
    pymysql.err.IntegrityError,
    sqlite3.IntegrityError,
    )

"""
Database type compatibility layer for SQLite/PostgreSQL
"""
from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import UUID as PostgresUUID
from sqlalchemy.types import TypeDecorator, CHAR
import uuid


class UUID(TypeDecorator):
    """Platform-independent UUID type.
    Uses PostgreSQL's UUID type when available,
    otherwise uses CHAR(36) for SQLite.
    Always hands ``uuid.UUID`` values back to the ORM.
    """
    impl = CHAR
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(PostgresUUID(as_uuid=True))
        return dialect.type_descriptor(CHAR(36))

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if not isinstance(value, uuid.UUID):
            value = uuid.UUID(str(value))
        if dialect.name == 'postgresql':
            return value
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None or isinstance(value, uuid.UUID):
            return value
        return uuid.UUID(value)


def as_uuid(value) -> uuid.UUID:
    """Coerce an id coming from a path, header or payload into a UUID.

    Raises ValueError for malformed ids; callers turn that into a 404 or 400.
    """
    if isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(str(value))


__all__ = ['UUID', 'JSON', 'as_uuid']

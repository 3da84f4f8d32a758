from advanced_alchemy.base import UUIDAuditBase


class Base(UUIDAuditBase):
    """Declarative base with UUID primary key and created/updated timestamps."""

    __abstract__ = True

"""Declarative bases shared by every catalog model."""

from advanced_alchemy.base import BigIntBase, UUIDAuditBase


class Base(UUIDAuditBase):
    """Base for top-level records (UUID key, created/updated timestamps)."""

    __abstract__ = True


class ChildBase(BigIntBase):
    """Base for owned child rows.

    Integer keys grow with insertion, so ordering by ``id`` returns a
    replaced collection in the order it was written.
    """

    __abstract__ = True

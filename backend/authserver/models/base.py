"""Reusable SQLAlchemy mixins and time helpers shared by the OAuth models."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import Integer
from sqlalchemy.orm import Mapped, mapped_column


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime.

    SQLite drops tzinfo on ``DateTime(timezone=True)`` columns; every value the
    application writes is UTC, so naive values read back are labelled UTC.

    :param value: Datetime read from a store or built in code.
    :type value: datetime
    :returns: Aware datetime in UTC.
    :rtype: datetime
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class PKMixin:
    """Expose an integer surrogate primary key column named ``id``.

    Attributes
    ----------
    id:
        Auto-incrementing integer primary key managed by the database.
    """

    id: Mapped[int] = mapped_column(Integer, primary_key=True)


class ReprMixin:
    """Provide a concise ``__repr__`` including the class name and id."""

    #: Extra attribute rendered after the id (never a secret)
    __repr_attr__: str | None = None

    def __repr__(self) -> str:
        """Return a short and useful string representation.

        :returns: Debug-friendly ``<ClassName id=...>``.
        :rtype: str
        """
        cls = self.__class__.__name__
        key = getattr(self, "id", None)
        if self.__repr_attr__:
            return f"<{cls} id={key} {self.__repr_attr__}={getattr(self, self.__repr_attr__, None)}>"
        return f"<{cls} id={key}>"

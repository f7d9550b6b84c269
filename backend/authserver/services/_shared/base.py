# authserver/services/_shared/base.py
from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from authserver.uow.base import UnitOfWork

UnitOfWorkFactory = Callable[[], "UnitOfWork"]


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Open a Unit of Work per use case (commit on success, rollback on error).
    * Provide the wall clock used for every expiry decision.
    * Keep services thin, orchestration-only, no web/ORM leakage.

    Notes
    -----
    - Services never touch the global session; they always go through the
      Unit of Work produced by the injected factory.
    """

    def __init__(self, *, uow_factory: UnitOfWorkFactory) -> None:
        """
        Initialize the base service.

        :param uow_factory: Zero-argument callable returning a fresh Unit of Work.
        :type uow_factory: Callable[[], UnitOfWork]
        """
        self._uow_factory = uow_factory

    # -------------------------- UoW helpers ---------------------------------

    def uow(self) -> UnitOfWork:
        """
        Create a Unit of Work for one use case.

        :returns: Unit of Work instance (use as a context manager).
        :rtype: UnitOfWork
        """
        return self._uow_factory()

    # -------------------------- Clock ---------------------------------------

    @staticmethod
    def now_utc() -> datetime:
        """Return the current time as an aware UTC datetime."""
        return datetime.now(UTC)

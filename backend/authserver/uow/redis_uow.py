"""
Unit of Work keeping clients in SQL and tokens in Redis.
"""

from __future__ import annotations

from authserver.core.extensions import get_redis
from authserver.infra.redis.redis_token_repository import RedisTokenRepository
from authserver.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork


class RedisTokenUnitOfWork(SQLAlchemyUnitOfWork):
    """
    SQL client lookups with a Redis token store.

    Every Redis write is already atomic on its own (``MULTI``/``EXEC``), so
    commit/rollback only concern the SQL session.
    """

    def __init__(self) -> None:
        super().__init__()
        self.tokens = RedisTokenRepository(get_redis())

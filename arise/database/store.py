"""Async facade over :func:`get_session` for the event-loop services.

Every call runs a synchronous unit of work in a worker thread via
:func:`asyncio.to_thread`, so each ``await store.run(...)`` is a real
suspension point for the event loop.  The work function receives an open
session; the whole function is one transaction (commit on return, rollback
on any exception).

    async def rename(store, skill_id, name):
        def work(db):
            db.get(Skill, skill_id).name = name
        await store.run(work)
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session as OrmSession

from ..errors import PersistenceFailure
from .db import get_session

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Store:
    """Transactional unit-of-work runner shared by the services."""

    async def run(self, work: Callable[[OrmSession], T]) -> T:
        return await asyncio.to_thread(self._run_sync, work)

    def _run_sync(self, work: Callable[[OrmSession], T]) -> T:
        try:
            with get_session() as db:
                return work(db)
        except SQLAlchemyError as exc:
            logger.error("Store transaction failed: %s", exc)
            raise PersistenceFailure(
                "Database operation failed", {"cause": str(exc)},
            ) from exc

    @staticmethod
    def generate_id() -> str:
        return str(uuid.uuid4())

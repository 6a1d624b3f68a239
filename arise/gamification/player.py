"""Player state: the singleton row plus today's running totals."""

from __future__ import annotations

import logging
from dataclasses import replace

from sqlalchemy import update

from ..database import Player, Store
from ..dateutils import local_datetime_string, today_string
from .records import PlayerRecord
from .timelog import day_totals

logger = logging.getLogger(__name__)


class PlayerState:
    """In-memory mirror of the player row.

    ``today_xp`` and ``today_seconds`` are re-summed from the time logs on
    every :meth:`fetch` and bumped locally as XP is awarded in between.
    """

    def __init__(self, store: Store) -> None:
        self._store = store
        self.record = PlayerRecord()
        self.today_xp = 0
        self.today_seconds = 0

    @property
    def current_streak(self) -> int:
        return self.record.current_streak

    @property
    def is_debuffed(self) -> bool:
        return self.record.is_debuffed

    @property
    def health(self) -> int:
        return self.record.health

    async def fetch(self) -> PlayerRecord:
        today = today_string()

        def work(db):
            row = db.get(Player, 1)
            record = PlayerRecord.from_row(row) if row else PlayerRecord()
            return record, day_totals(db, today)

        record, (xp, seconds) = await self._store.run(work)
        self.record = record
        self.today_xp = xp
        self.today_seconds = seconds
        return record

    def add_today(self, xp: int, seconds: int = 0) -> None:
        self.today_xp += xp
        self.today_seconds += seconds

    async def finish_recovery(self, health: int) -> None:
        """Lift the debuff and set health in one write."""
        await self._write(is_debuffed=False, health=health)
        logger.info("Recovery complete: debuff lifted, health set to %d", health)

    async def _write(self, **values) -> None:
        stamp = local_datetime_string()

        def work(db):
            db.execute(
                update(Player)
                .where(Player.id == 1)
                .values(updated_at=stamp, **values)
            )

        await self._store.run(work)
        self.record = replace(self.record, **values)

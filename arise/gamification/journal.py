"""Daily journal: one free-text entry per local calendar day."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert

from ..database import JournalEntry, Store
from ..dateutils import local_date_string, local_datetime_string

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JournalRecord:
    id: str
    content: str
    entry_date: str
    created_at: str
    updated_at: str

    @classmethod
    def from_row(cls, row: JournalEntry) -> JournalRecord:
        return cls(
            id=row.id,
            content=row.content,
            entry_date=row.entry_date,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )


def _entry_for(db, day: str) -> JournalRecord | None:
    row = db.scalars(
        select(JournalEntry).where(JournalEntry.entry_date == day)
    ).one_or_none()
    return JournalRecord.from_row(row) if row is not None else None


class Journal:
    def __init__(self, store: Store) -> None:
        self._store = store

    async def get_today_entry(self) -> JournalRecord | None:
        return await self.get_entry_by_date(date.today())

    async def get_entry_by_date(self, day: date) -> JournalRecord | None:
        key = local_date_string(day)
        return await self._store.run(lambda db: _entry_for(db, key))

    async def save_entry(self, content: str, day: date | None = None) -> JournalRecord:
        """Insert or overwrite the entry for *day* (default: today).

        An existing entry keeps its id and ``created_at``; only the content
        and ``updated_at`` change.
        """
        key = local_date_string(day)
        stamp = local_datetime_string()
        new_id = self._store.generate_id()

        def work(db):
            db.execute(
                insert(JournalEntry)
                .values(
                    id=new_id,
                    content=content,
                    entry_date=key,
                    created_at=stamp,
                    updated_at=stamp,
                )
                .on_conflict_do_update(
                    index_elements=[JournalEntry.entry_date],
                    set_={"content": content, "updated_at": stamp},
                )
            )
            return _entry_for(db, key)

        record = await self._store.run(work)
        logger.debug("Saved journal entry for %s", key)
        return record

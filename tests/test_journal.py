"""Tests for the daily journal."""

import re
from datetime import date

import pytest

from arise.database import JournalEntry
from arise.dateutils import today_string

from helpers import count_rows

TIMESTAMP = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$")


class TestJournal:

    @pytest.mark.asyncio
    async def test_no_entry_yet(self, core):
        assert await core.journal.get_today_entry() is None

    @pytest.mark.asyncio
    async def test_save_creates_todays_entry(self, core):
        saved = await core.journal.save_entry("Shipped the parser.")

        assert saved.content == "Shipped the parser."
        assert saved.entry_date == today_string()
        assert TIMESTAMP.match(saved.created_at)
        assert await core.journal.get_today_entry() == saved

    @pytest.mark.asyncio
    async def test_second_save_overwrites(self, core):
        first = await core.journal.save_entry("draft")
        second = await core.journal.save_entry("final")

        assert second.id == first.id
        assert second.created_at == first.created_at
        assert second.content == "final"
        assert count_rows(JournalEntry) == 1

    @pytest.mark.asyncio
    async def test_entries_keyed_by_local_date(self, core):
        await core.journal.save_entry("monday", date(2026, 3, 2))
        await core.journal.save_entry("tuesday", date(2026, 3, 3))

        entry = await core.journal.get_entry_by_date(date(2026, 3, 2))

        assert entry.content == "monday"
        assert entry.entry_date == "2026-03-02"
        assert await core.journal.get_entry_by_date(date(2026, 3, 4)) is None
        assert count_rows(JournalEntry) == 2

"""Tests for database setup, seeding and migrations."""

from sqlalchemy import text

from arise.database import INITIAL_SKILLS, Player, Skill, TimeLog, get_session, init_db

from helpers import count_rows, insert_quest, insert_time_log


class TestSeeding:

    def test_player_row_created(self):
        with get_session() as db:
            player = db.get(Player, 1)
            assert player.health == 100
            assert player.current_streak == 0
            assert player.is_debuffed is False
            assert player.last_processed_date is None

    def test_initial_skills(self):
        assert count_rows(Skill) == len(INITIAL_SKILLS) == 6

    def test_init_is_idempotent(self):
        init_db()
        init_db()
        assert count_rows(Player) == 1
        assert count_rows(Skill) == 6


class TestMigrations:

    def test_iso_timestamps_normalized(self):
        insert_time_log("log-1", "ai-engineering", 60, 1, "2026-03-04T22:15:00.000Z")
        insert_quest("q1", "2026-03-04", completed=True)
        with get_session() as db:
            db.execute(text(
                "UPDATE quests SET completed_at = '2026-03-04T09:30:00' WHERE id = 'q1'"
            ))

        init_db()

        with get_session() as db:
            assert db.get(TimeLog, "log-1").logged_at == "2026-03-04 22:15:00"
            completed_at = db.execute(
                text("SELECT completed_at FROM quests WHERE id = 'q1'")
            ).scalar()
            assert completed_at == "2026-03-04 09:30:00"

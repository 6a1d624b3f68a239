"""Database connection and session management."""

import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import sessionmaker, Session as OrmSession

from ..settings import APP_SUPPORT_DIR
from .models import Base, Player, Skill

logger = logging.getLogger(__name__)

# ── paths ────────────────────────────────────────────────────────────────────

DB_PATH = APP_SUPPORT_DIR / "arise.db"

# ── seed data ────────────────────────────────────────────────────────────────

INITIAL_SKILLS: list[dict] = [
    {"id": "ai-engineering", "name": "AI Engineering",
     "icon": "\U0001F916", "color": "#8B5CF6", "display_order": 1},
    {"id": "fullstack-dev", "name": "Full-Stack Development",
     "icon": "\U0001F4BB", "color": "#3B82F6", "display_order": 2},
    {"id": "product-design", "name": "Product Design",
     "icon": "\U0001F3A8", "color": "#EC4899", "display_order": 3},
    {"id": "physical-conditioning", "name": "Physical Conditioning",
     "icon": "\U0001F4AA", "color": "#10B981", "display_order": 4},
    {"id": "job-hunting", "name": "Job Hunting",
     "icon": "\U0001F3AF", "color": "#F59E0B", "display_order": 5},
    {"id": "software-engineering", "name": "Software Engineering",
     "icon": "⚙️", "color": "#6366F1", "display_order": 6},
]

# ── engine & session factory (created lazily) ─────────────────────────────

_engine = None
_SessionFactory = None


def _get_engine():
    global _engine
    if _engine is None:
        APP_SUPPORT_DIR.mkdir(parents=True, exist_ok=True)
        _engine = create_engine(
            f"sqlite:///{DB_PATH}",
            connect_args={"check_same_thread": False},
            echo=False,
        )
    return _engine


def _get_session_factory():
    global _SessionFactory
    if _SessionFactory is None:
        _SessionFactory = sessionmaker(bind=_get_engine(), expire_on_commit=False)
    return _SessionFactory


# ── public API ────────────────────────────────────────────────────────────


def configure_engine(url: str) -> None:
    """Override the database connection URL.  Used by tests to point at
    a throwaway SQLite file instead of the real one in the home directory."""
    global _engine, _SessionFactory
    if _engine is not None:
        _engine.dispose()
    _SessionFactory = None
    _engine = create_engine(
        url,
        connect_args={"check_same_thread": False},
        echo=False,
    )


def _run_migrations(engine) -> None:
    """Schema migrations for existing databases.

    Runs after ``create_all`` so new columns exist in fresh installs.
    Each migration is idempotent.
    """
    insp = inspect(engine)
    table_names = set(insp.get_table_names())

    with engine.connect() as conn:
        # ── M1: add last_processed_date to player ──────────────────────
        if "player" in table_names:
            columns = {c["name"] for c in insp.get_columns("player")}
            if "last_processed_date" not in columns:
                conn.execute(text(
                    "ALTER TABLE player ADD COLUMN last_processed_date VARCHAR(10)"
                ))

        # ── M2: normalize ISO timestamps written as 'YYYY-MM-DDTHH:MM:SS…' ──
        if "quests" in table_names:
            conn.execute(text(
                "UPDATE quests SET completed_at = "
                "substr(replace(completed_at, 'T', ' '), 1, 19) "
                "WHERE completed_at LIKE '____-__-__T%'"
            ))
        if "time_logs" in table_names:
            conn.execute(text(
                "UPDATE time_logs SET logged_at = "
                "substr(replace(logged_at, 'T', ' '), 1, 19) "
                "WHERE logged_at LIKE '____-__-__T%'"
            ))

        conn.commit()


def init_db() -> None:
    """Create all tables, run migrations, and seed defaults."""
    engine = _get_engine()
    Base.metadata.create_all(engine)
    _run_migrations(engine)

    # Seed the player row and the starter skills
    factory = _get_session_factory()
    with factory() as session:
        if session.get(Player, 1) is None:
            session.add(Player(id=1))
            logger.info("Created player record")
        for seed in INITIAL_SKILLS:
            if session.get(Skill, seed["id"]) is None:
                session.add(Skill(**seed))
        session.commit()


@contextmanager
def get_session():
    """Yield a SQLAlchemy session; commit on success, rollback on error."""
    factory = _get_session_factory()
    session: OrmSession = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

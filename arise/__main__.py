"""Allow running ARISE as a module: python -m arise."""

import asyncio
import logging
import sys

from PyQt6.QtCore import QCoreApplication

from .app import AriseCore
from .database.db import init_db
from .gamification.daily import summary_lines
from .gamification.xp import format_time, format_xp
from .settings import load_settings


def main() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    init_db()

    app = QCoreApplication(sys.argv)
    app.setApplicationName("ARISE")
    app.setOrganizationName("ARISE")

    core = AriseCore(settings=settings)
    result = asyncio.run(core.startup())

    for line in summary_lines(result):
        print(line)

    player = core.player
    status = "Weakened" if player.is_debuffed else "Healthy"
    print(
        f"Level {core.overall_level} | {format_xp(core.overall_xp)} XP | "
        f"Streak {player.current_streak} | HP {player.health} ({status})"
    )
    print(
        f"Today: {format_xp(player.today_xp)} XP, "
        f"{format_time(player.today_seconds)} logged"
    )
    if player.is_debuffed:
        progress = core.recovery.progress()
        print(
            f"Recovery: {format_time(progress.accumulated_seconds)} / "
            f"{format_time(core.recovery.required_seconds)}"
        )
    for skill in core.skills.active_skills:
        print(
            f"  {skill.icon} {skill.name:<24} Lv {skill.level:>3}  "
            f"{format_xp(skill.total_xp):>8} XP  {skill.total_hours:6.1f}h"
        )


if __name__ == "__main__":
    main()

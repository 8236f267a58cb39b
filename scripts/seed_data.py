"""
Seed Data Generator — fills the ledger with realistic fake breaks.

Run: python scripts/seed_data.py [count]
"""

import random
import sys
from datetime import datetime, timedelta
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from moyu.data.database import Database
from moyu.data.ledger import SessionLedger
from moyu.data.models import BreakKind, BreakSession
from moyu.data.store import KeyValueStore
from moyu.services.rewards import RewardResolver
from moyu.services.settings import SettingsService

LOAFING_APPS = ["Safari", "WeChat", "Music", "Steam", "Messages"]


def seed(num_sessions: int = 60) -> None:
    db = Database()
    db.connect()
    store = KeyValueStore(db.conn)
    ledger = SessionLedger(store)
    settings = SettingsService(store)
    resolver = RewardResolver()

    # ── Settings ────────────────────────────────────────────────────────
    if not settings.work_apps():
        settings.set_work_apps("Code, Terminal, Xcode")
    if settings.compensation().monthly_salary is None:
        settings.set_compensation(salary=10000, work_days=22, work_hours=8)

    # ── Generate breaks, oldest first so history ends newest-first ──────
    base_date = datetime.now() - timedelta(days=30)
    starts = sorted(
        base_date + timedelta(days=random.uniform(0, 30),
                              hours=random.randint(9, 17))
        for _ in range(num_sessions)
    )

    fish_count = 0
    for start in starts:
        roll = random.random()
        if roll < 0.4:
            kind = BreakKind.auto_detected(random.choice(LOAFING_APPS))
            duration = random.uniform(10, 900)
        elif roll < 0.7:
            kind = BreakKind.manual_poop()
            duration = random.uniform(180, 1200)
        elif roll < 0.85:
            kind = BreakKind.fake_update()
            duration = random.uniform(300, 2400)
        else:
            kind = BreakKind.fake_coding()
            duration = random.uniform(300, 1800)

        end = start + timedelta(seconds=duration)
        ledger.append(BreakSession(
            id=int(end.timestamp() * 1000),
            kind=kind,
            started_at=start,
            duration_seconds=round(duration, 1),
            recorded_on=end.date().isoformat(),
        ))

        reward = resolver.resolve(duration)
        if reward:
            ledger.add_reward(reward)
            fish_count += 1

    db.close()
    print(f"Seeded {num_sessions} breaks and {fish_count} fish.")


if __name__ == "__main__":
    count = int(sys.argv[1]) if len(sys.argv) > 1 else 60
    seed(count)

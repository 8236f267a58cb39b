"""
Moyu — paid-loafing tracker
Entry point for the background service.
"""

import faulthandler
import logging
import signal
import sys
from pathlib import Path

faulthandler.enable()

# Ensure the moyu package is importable when run from elsewhere
sys.path.insert(0, str(Path(__file__).resolve().parent))

from PySide6.QtCore import QCoreApplication, QTimer

from moyu.data.database import Database
from moyu.data.ledger import SessionLedger
from moyu.data.models import BreakResult
from moyu.data.store import KeyValueStore
from moyu.services.foreground import ForegroundAppQuery
from moyu.services.orchestrator import SessionOrchestrator
from moyu.services.rewards import RewardResolver
from moyu.services.settings import SettingsService
from moyu.services.stats import BreakStats, format_duration


def setup_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler("moyu.log", encoding="utf-8"),
        ],
    )


def main() -> None:
    setup_logging()
    logger = logging.getLogger(__name__)
    logger.info("Starting Moyu...")

    app = QCoreApplication(sys.argv)
    app.setApplicationName("Moyu")
    app.setOrganizationName("Moyu")

    db = Database()
    db.connect()
    store = KeyValueStore(db.conn)
    settings = SettingsService(store)
    ledger = SessionLedger(store)
    stats = BreakStats(ledger)

    def on_result(result: BreakResult) -> None:
        if result.reward:
            orchestrator.collect_reward(result.reward)
        logger.info(
            "Today so far: %s loafed, %s earned",
            format_duration(stats.today_seconds()),
            f"{result.currency_symbol}{stats.today_earnings(settings.compensation()):.2f}",
        )

    def on_break_due() -> None:
        # No prompt window here: the notification counts as the prompt
        logger.info("Break due; starting the next work interval.")
        orchestrator.acknowledge_break_due()

    def notify(title: str, body: str) -> None:
        logger.info("%s: %s", title, body.replace("\n", " | "))

    orchestrator = SessionOrchestrator(
        ledger=ledger,
        settings=settings,
        resolver=RewardResolver(),
        foreground_query=ForegroundAppQuery(),
        on_result=on_result,
        on_break_due=on_break_due,
        notifier=notify,
    )
    orchestrator.start()

    # Let Ctrl+C reach Python: the Qt loop otherwise swallows SIGINT
    signal.signal(signal.SIGINT, lambda *_: app.quit())
    heartbeat = QTimer()
    heartbeat.timeout.connect(lambda: None)
    heartbeat.start(500)

    logger.info("Moyu started.")
    code = app.exec()

    orchestrator.shutdown()
    db.close()
    sys.exit(code)


if __name__ == "__main__":
    main()


# ---------------------------------------------------------------------------
# Explanation
# ---------------------------------------------------------------------------
# What this file does:
#   Sets up logging, opens the SQLite store, wires the services together
#   and runs the Qt event loop that drives the work timer and detector.
#
# Key points:
#   - QCoreApplication: no windows here; the event loop only exists so the
#     QTimers in WorkTimer and ActivityDetector fire.
#   - Objects are built once in main() and torn down after app.exec()
#     returns, in reverse order (orchestrator, then database).
#   - The heartbeat QTimer wakes the loop twice a second so the Python
#     SIGINT handler gets a chance to run.

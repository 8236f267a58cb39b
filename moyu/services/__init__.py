from .detector import ActivityDetector
from .orchestrator import SessionOrchestrator
from .rewards import RewardResolver
from .settings import SettingsService
from .stats import BreakStats
from .work_timer import WorkTimer

__all__ = [
    "ActivityDetector", "SessionOrchestrator", "RewardResolver",
    "SettingsService", "BreakStats", "WorkTimer",
]

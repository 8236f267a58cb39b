"""Test doubles shared by several test modules."""

import random
from datetime import datetime, timedelta

from moyu.errors import TransientQueryFailure


class FakeClock:
    """Wall and monotonic time that only move when told to."""

    def __init__(self, start: datetime = datetime(2026, 3, 11, 15, 0, 0)) -> None:
        self._start = start
        self._offset = 0.0

    def now(self) -> datetime:
        return self._start + timedelta(seconds=self._offset)

    def monotonic(self) -> float:
        return 1000.0 + self._offset

    def advance(self, seconds: float) -> None:
        self._offset += seconds


class ScriptedRandom(random.Random):
    """random.Random whose random() returns pre-set draws in order."""

    def __init__(self, draws) -> None:
        super().__init__(0)
        self._draws = list(draws)

    def random(self) -> float:
        return self._draws.pop(0)


class FakeQuery:
    """Foreground query returning scripted app names (or raising)."""

    def __init__(self, answers=None, is_supported: bool = True) -> None:
        self.answers = list(answers or [])
        self.is_supported = is_supported
        self.calls = 0

    def query(self):
        self.calls += 1
        answer = self.answers.pop(0) if self.answers else None
        if isinstance(answer, Exception):
            raise answer
        return answer


def failing(message: str = "osascript exited 1") -> TransientQueryFailure:
    return TransientQueryFailure(message)

from __future__ import annotations

import logging
import threading

from daily_salah.config import POINTS_PER_PRAYER, PRAYER_NAMES, REWARDS, Reward
from daily_salah.errors import UnknownPrayer

logger = logging.getLogger(__name__)


class ProgressTracker:
    """Same-day completion ledger plus the session's running point total.

    Points only ever go up: each prayer is worth points once per tracker, and
    there is no way to un-complete one. A new day gets a new tracker.
    """

    def __init__(
        self,
        prayers: tuple[str, ...] = PRAYER_NAMES,
        points_per_prayer: int = POINTS_PER_PRAYER,
        rewards: tuple[Reward, ...] = REWARDS,
    ) -> None:
        self.prayers = tuple(prayers)
        self.points_per_prayer = points_per_prayer
        self.rewards = tuple(sorted(rewards, key=lambda r: r.points))
        self._completed: set[str] = set()
        self._points = 0
        self._lock = threading.Lock()

    @property
    def points(self) -> int:
        return self._points

    @property
    def completed(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._completed)

    def _check(self, name: str) -> None:
        if name not in self.prayers:
            raise UnknownPrayer(name)

    def is_completed(self, name: str) -> bool:
        self._check(name)
        with self._lock:
            return name in self._completed

    def complete(self, name: str) -> bool:
        self._check(name)
        with self._lock:
            if name in self._completed:
                return False
            self._completed.add(name)
            self._points += self.points_per_prayer
            points = self._points
        logger.info("Completed %s (+%s points, total %s)", name, self.points_per_prayer, points)
        return True

    def _rewards(self, points: int) -> list[dict]:
        return [{"points": r.points, "title": r.title, "unlocked": points >= r.points} for r in self.rewards]

    def unlocked_rewards(self) -> list[dict]:
        return self._rewards(self._points)

    def snapshot(self) -> dict:
        with self._lock:
            completed = set(self._completed)
            points = self._points
        return {
            "points": points,
            "completed": {name: name in completed for name in self.prayers},
            "rewards": self._rewards(points),
        }

from __future__ import annotations

import logging
import threading
from datetime import date, datetime, time
from typing import Callable, Mapping

from daily_salah.config import PRAYER_DETAILS, PRAYER_NAMES, Settings, load_settings
from daily_salah.errors import ScheduleError, TimingsUnavailable
from daily_salah.notifier import Notifier, build_notifier
from daily_salah.progress import ProgressTracker
from daily_salah.schedule import (
    NextPrayer,
    ZeroCrossingDetector,
    format_12_hour,
    next_prayer,
    parse_schedule,
    rakah_breakdown,
)
from daily_salah.timings import fetch_timings

logger = logging.getLogger(__name__)


class SalahSession:
    """One day of the app: a fixed schedule, a fresh ledger, one detector.

    Nothing is persisted; a new session starts from zero points. A session
    belongs to the date it was started on and is replaced, never rolled
    forward, once that date has passed.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        notifier: Notifier | None = None,
        tracker: ProgressTracker | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.settings = settings or load_settings()
        self.notifier = notifier or build_notifier(self.settings)
        self.clock = clock
        self.day: date = clock().date()
        self.tracker = tracker or ProgressTracker()
        self.detector = ZeroCrossingDetector()
        self.schedule: dict[str, time] | None = None
        self.load_error: str | None = None

    def set_timings(self, raw: Mapping[str, object]) -> dict[str, time]:
        try:
            schedule = parse_schedule(raw)
        except ScheduleError as exc:
            self.load_error = str(exc)
            raise
        self.schedule = schedule
        self.load_error = None
        self.detector = ZeroCrossingDetector()
        logger.info("Schedule loaded: %s", ", ".join(f"{n} {t:%H:%M}" for n, t in schedule.items()))
        return schedule

    def load_timings(self, latitude: float | None = None, longitude: float | None = None) -> bool:
        """Fetch and install today's timings; False (and load_error set) on failure."""
        try:
            self.set_timings(fetch_timings(self.settings, latitude, longitude))
        except (TimingsUnavailable, ScheduleError) as exc:
            self.load_error = str(exc)
            logger.warning("Prayer times unavailable: %s", exc)
            return False
        return True

    def next_prayer(self, now: datetime | None = None) -> NextPrayer:
        if self.schedule is None:
            raise TimingsUnavailable(self.load_error or "Prayer times not loaded")
        return next_prayer(self.schedule, now or self.clock())

    def expired(self, now: datetime) -> bool:
        return now.date() != self.day

    def tick(self, now: datetime | None = None) -> NextPrayer | None:
        now = now or self.clock()
        schedule, detector = self.schedule, self.detector
        if schedule is None:
            return None
        result = next_prayer(schedule, now)
        fired = detector.observe(result, now)
        if fired is not None:
            self._signal(fired.prayer)
        return result

    def _signal(self, prayer: str) -> None:
        logger.info("Adhan time for %s", prayer)
        threading.Thread(target=self._deliver, args=(prayer,), daemon=True).start()

    def _deliver(self, prayer: str) -> None:
        try:
            self.notifier.send(prayer)
        except Exception:
            logger.exception("Notifier raised while signalling %s", prayer)

    def complete(self, name: str) -> bool:
        return self.tracker.complete(name)

    def status(self, now: datetime | None = None) -> dict:
        now = now or self.clock()
        progress = self.tracker.snapshot()
        prayers = []
        for name in PRAYER_NAMES:
            detail = PRAYER_DETAILS[name]
            at = self.schedule[name] if self.schedule else None
            prayers.append(
                {
                    "name": name,
                    "time": at.strftime("%H:%M") if at else None,
                    "time_12h": format_12_hour(at) if at else "",
                    "color": detail.color,
                    "rakah": rakah_breakdown(detail),
                    "completed": progress["completed"][name],
                }
            )
        upcoming = next_prayer(self.schedule, now).as_dict() if self.schedule else None
        return {
            "available": self.schedule is not None,
            "error": self.load_error,
            "next": upcoming,
            "points": progress["points"],
            "points_per_prayer": self.tracker.points_per_prayer,
            "rewards": progress["rewards"],
            "prayers": prayers,
            "day": self.day.isoformat(),
        }


class SessionManager:
    """Holds the live SalahSession and replaces it when the date changes.

    The replacement starts from zero points and an empty ledger, and fetches
    the new day's timings for the last requested location.
    """

    def __init__(self, factory: Callable[[], SalahSession] = SalahSession) -> None:
        self._factory = factory
        self.latitude: float | None = None
        self.longitude: float | None = None
        self.current = factory()

    @property
    def settings(self) -> Settings:
        return self.current.settings

    def load_timings(self, latitude: float | None = None, longitude: float | None = None) -> bool:
        self.latitude, self.longitude = latitude, longitude
        return self.current.load_timings(latitude, longitude)

    def renew(self) -> SalahSession:
        fresh = self._factory()
        fresh.load_timings(self.latitude, self.longitude)
        previous, self.current = self.current, fresh
        logger.info("Session for %s ended with %s points; new session for %s", previous.day, previous.tracker.points, fresh.day)
        return fresh

    def tick(self, now: datetime | None = None) -> NextPrayer | None:
        session = self.current
        now = now or session.clock()
        if session.expired(now):
            session = self.renew()
        return session.tick(now)

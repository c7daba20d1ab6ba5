from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Mapping

from daily_salah.config import PRAYER_NAMES, PrayerDetail
from daily_salah.errors import MalformedTimeOfDay, MissingScheduleData

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$", re.ASCII)
_ONE_MS = timedelta(milliseconds=1)

# How long after an unfired target instant a late tick may still fire it.
CATCH_UP_GRACE = timedelta(seconds=5)


@dataclass(frozen=True)
class NextPrayer:
    name: str
    prayer: str
    at: datetime
    remaining_ms: int

    @property
    def tomorrow(self) -> bool:
        return self.name != self.prayer

    @property
    def total_seconds(self) -> int:
        return self.remaining_ms // 1000

    @property
    def hours(self) -> int:
        return self.total_seconds // 3600

    @property
    def minutes(self) -> int:
        return (self.total_seconds % 3600) // 60

    @property
    def seconds(self) -> int:
        return self.total_seconds % 60

    @property
    def countdown(self) -> str:
        return f"{self.hours}h {self.minutes}m {self.seconds}s"

    def as_dict(self) -> dict:
        return {
            "name": self.name,
            "prayer": self.prayer,
            "at": self.at.isoformat(),
            "remaining_ms": self.remaining_ms,
            "time_left": self.countdown,
        }


def parse_time_of_day(value: object, prayer: str = "?") -> time:
    if not isinstance(value, str):
        raise MalformedTimeOfDay(prayer, value)
    match = _TIME_RE.match(value.strip())
    if not match:
        raise MalformedTimeOfDay(prayer, value)
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise MalformedTimeOfDay(prayer, value)
    return time(hour, minute)


def parse_schedule(raw: Mapping[str, object]) -> dict[str, time]:
    """Turn a name -> "HH:MM" mapping into a schedule of the five prayers.

    Keys outside the five prayers (Sunrise, Midnight, ...) are ignored. A
    missing or blank entry raises MissingScheduleData and an unparseable one
    raises MalformedTimeOfDay.
    """
    schedule = {}
    for name in PRAYER_NAMES:
        value = raw.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise MissingScheduleData(name)
        schedule[name] = parse_time_of_day(value, name)
    return schedule


def _require_complete(schedule: Mapping[str, time]) -> None:
    for name in PRAYER_NAMES:
        if schedule.get(name) is None:
            raise MissingScheduleData(name)


def day_opening_prayer(schedule: Mapping[str, time]) -> str:
    _require_complete(schedule)
    return min(PRAYER_NAMES, key=lambda name: (schedule[name], PRAYER_NAMES.index(name)))


def next_prayer(schedule: Mapping[str, time], now: datetime) -> NextPrayer:
    _require_complete(schedule)
    best: NextPrayer | None = None
    for name in PRAYER_NAMES:
        candidate = datetime.combine(now.date(), schedule[name])
        diff_ms = (candidate - now) // _ONE_MS
        if diff_ms > 0 and (best is None or diff_ms < best.remaining_ms):
            best = NextPrayer(name=name, prayer=name, at=candidate, remaining_ms=diff_ms)
    if best is not None:
        return best

    opening = day_opening_prayer(schedule)
    candidate = datetime.combine(now.date() + timedelta(days=1), schedule[opening])
    return NextPrayer(
        name=f"{opening} (tomorrow)",
        prayer=opening,
        at=candidate,
        remaining_ms=(candidate - now) // _ONE_MS,
    )


class ZeroCrossingDetector:
    """Turns per-tick NextPrayer results into a fire-once signal.

    A target instant fires when its countdown floors to zero seconds, or when
    a later tick finds it already reached without having fired. Each instant
    fires at most once.
    """

    def __init__(self, grace: timedelta = CATCH_UP_GRACE) -> None:
        self.grace = grace
        self._previous: NextPrayer | None = None
        self._fired: NextPrayer | None = None

    @property
    def fired(self) -> NextPrayer | None:
        return self._fired

    @property
    def last_fired(self) -> datetime | None:
        return self._fired.at if self._fired else None

    def observe(self, result: NextPrayer, now: datetime) -> NextPrayer | None:
        """Return the NextPrayer whose instant fires on this tick, if any."""
        previous, self._previous = self._previous, result
        if result.total_seconds == 0 and result.at != self.last_fired:
            self._fired = result
            return result
        if (
            previous is not None
            and previous.at != result.at
            and previous.at != self.last_fired
            and previous.at <= now <= previous.at + self.grace
        ):
            self._fired = previous
            return previous
        return None


def format_12_hour(value: time) -> str:
    ampm = "PM" if value.hour >= 12 else "AM"
    return f"{value.hour % 12 or 12}:{value.minute:02d} {ampm}"


def rakah_breakdown(detail: PrayerDetail) -> list[str]:
    parts = []
    if detail.sunnah:
        parts.append(f"{detail.sunnah} Sunnah")
    parts.append(f"{detail.fardh} Fardh")
    if detail.sunnah_after:
        parts.append(f"{detail.sunnah_after} Sunnah")
    if detail.witr:
        parts.append(f"{detail.witr} Witr")
    return parts

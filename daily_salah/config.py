from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

PRAYER_NAMES = ("Fajr", "Dhuhr", "Asr", "Maghrib", "Isha")

POINTS_PER_PRAYER = 15


@dataclass(frozen=True)
class PrayerDetail:
    fardh: int
    color: str
    sunnah: int = 0
    sunnah_after: int = 0
    witr: int = 0


@dataclass(frozen=True)
class Reward:
    points: int
    title: str


PRAYER_DETAILS = {
    "Fajr": PrayerDetail(sunnah=2, fardh=2, color="bg-orange-400"),
    "Dhuhr": PrayerDetail(sunnah=4, fardh=4, sunnah_after=2, color="bg-yellow-400"),
    "Asr": PrayerDetail(fardh=4, color="bg-amber-500"),
    "Maghrib": PrayerDetail(fardh=3, sunnah_after=2, color="bg-purple-500"),
    "Isha": PrayerDetail(fardh=4, sunnah_after=2, witr=3, color="bg-indigo-600"),
}

REWARDS = (
    Reward(50, "Popcorn Time!"),
    Reward(150, "Park Trip!"),
    Reward(500, "Pick a New Toy!"),
)

# Washington DC, used when no location is supplied.
DEFAULT_LATITUDE = 38.9072
DEFAULT_LONGITUDE = -77.0369


@dataclass(frozen=True)
class Settings:
    latitude: float = DEFAULT_LATITUDE
    longitude: float = DEFAULT_LONGITUDE
    method: int = 2
    timings_url: str = "https://api.aladhan.com/v1/timings"
    adhan_command: str = ""
    tick_seconds: float = 1.0
    run_ticker: bool = True


def _flag(raw: str) -> bool:
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Build settings from SALAH_* environment variables.

    Unset variables keep their defaults; malformed numbers raise ValueError.
    """
    env = os.environ if env is None else env
    defaults = Settings()
    return Settings(
        latitude=float(env.get("SALAH_LATITUDE", defaults.latitude)),
        longitude=float(env.get("SALAH_LONGITUDE", defaults.longitude)),
        method=int(env.get("SALAH_METHOD", defaults.method)),
        timings_url=env.get("SALAH_TIMINGS_URL", defaults.timings_url),
        adhan_command=env.get("SALAH_ADHAN_COMMAND", "").strip(),
        tick_seconds=float(env.get("SALAH_TICK_SECONDS", defaults.tick_seconds)),
        run_ticker=_flag(env.get("SALAH_RUN_TICKER", "1")),
    )

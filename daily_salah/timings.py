from __future__ import annotations

import json
import logging
import time
import urllib.error
import urllib.parse
import urllib.request

from daily_salah.config import PRAYER_NAMES, Settings
from daily_salah.errors import TimingsUnavailable

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3
TIMEOUT_S = 5


def build_url(settings: Settings, latitude: float | None = None, longitude: float | None = None) -> str:
    query = urllib.parse.urlencode(
        {
            "latitude": settings.latitude if latitude is None else latitude,
            "longitude": settings.longitude if longitude is None else longitude,
            "method": settings.method,
        }
    )
    return f"{settings.timings_url}?{query}"


def _clean(value: object) -> object:
    # Aladhan may append a zone label, e.g. "05:12 (EST)".
    if isinstance(value, str):
        return value.split(" ", 1)[0].strip()
    return value


def extract_timings(payload: dict) -> dict:
    try:
        timings = payload["data"]["timings"]
    except (KeyError, TypeError) as exc:
        raise TimingsUnavailable(f"Unexpected timings payload: {exc!r}") from exc
    return {name: _clean(timings.get(name)) for name in PRAYER_NAMES}


def fetch_timings(
    settings: Settings,
    latitude: float | None = None,
    longitude: float | None = None,
) -> dict:
    """Fetch today's raw prayer times as a name -> "HH:MM" mapping.

    Values are not validated here; parse_schedule does that.
    """
    url = build_url(settings, latitude, longitude)
    req = urllib.request.Request(url, headers={"Accept": "application/json"})
    for attempt in range(1, MAX_ATTEMPTS + 1):
        try:
            with urllib.request.urlopen(req, timeout=TIMEOUT_S) as resp:
                payload = json.loads(resp.read().decode("utf-8"))
            break
        except (urllib.error.URLError, TimeoutError, OSError, ValueError) as exc:
            if attempt >= MAX_ATTEMPTS:
                logger.warning("Timings fetch failed after retries: %s", exc)
                raise TimingsUnavailable(str(exc)) from exc
            time.sleep(0.25 * attempt)
    return extract_timings(payload)

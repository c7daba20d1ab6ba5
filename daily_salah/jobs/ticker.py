from __future__ import annotations

import argparse
import logging
import threading

from daily_salah.config import load_settings
from daily_salah.session import SalahSession, SessionManager

logger = logging.getLogger(__name__)


def run(sessions: SessionManager, stop: threading.Event, interval: float | None = None) -> None:
    """Tick the live session until ``stop`` is set."""
    interval = sessions.settings.tick_seconds if interval is None else interval
    while not stop.is_set():
        try:
            result = sessions.tick()
            if result is not None:
                logger.debug("Next: %s in %s", result.name, result.countdown)
        except Exception:
            logger.exception("Tick failed")
        stop.wait(interval)


def start_background(sessions: SessionManager) -> tuple[threading.Thread, threading.Event]:
    stop = threading.Event()
    thread = threading.Thread(target=run, args=(sessions, stop), name="salah-ticker", daemon=True)
    thread.start()
    return thread, stop


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Count down to the next prayer and signal adhan time.")
    parser.add_argument("--lat", type=float, default=None, help="Latitude (default: SALAH_LATITUDE or Washington DC)")
    parser.add_argument("--lng", type=float, default=None, help="Longitude (default: SALAH_LONGITUDE or Washington DC)")
    parser.add_argument("--once", action="store_true", help="Print the next prayer and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log the countdown on every tick")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    settings = load_settings()
    sessions = SessionManager(lambda: SalahSession(settings=settings))
    if not sessions.load_timings(args.lat, args.lng):
        logger.error("Prayer times unavailable: %s", sessions.current.load_error)
        return 1

    if args.once:
        upcoming = sessions.current.next_prayer()
        logger.info("Next: %s in %s", upcoming.name, upcoming.countdown)
        return 0

    stop = threading.Event()
    try:
        run(sessions, stop)
    except KeyboardInterrupt:
        stop.set()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

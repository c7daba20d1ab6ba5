from __future__ import annotations

import threading
import unittest
from datetime import datetime
from unittest.mock import MagicMock, patch

from daily_salah.config import Settings
from daily_salah.jobs import ticker
from daily_salah.notifier import NoopNotifier
from daily_salah.session import SalahSession, SessionManager

RAW = {"Fajr": "05:10", "Dhuhr": "12:00", "Asr": "15:00", "Maghrib": "18:30", "Isha": "20:00"}


class RunLoopTests(unittest.TestCase):
    def test_run_ticks_until_stopped(self) -> None:
        stop = threading.Event()
        session = MagicMock()
        calls = []

        def tick():
            calls.append(1)
            if len(calls) == 3:
                stop.set()
            return None

        session.tick.side_effect = tick
        ticker.run(session, stop, interval=0)
        self.assertEqual(len(calls), 3)

    def test_tick_errors_are_logged_and_loop_continues(self) -> None:
        stop = threading.Event()
        session = MagicMock()
        session.tick.side_effect = [RuntimeError("boom"), None]

        def wait(timeout):
            if session.tick.call_count >= 2:
                stop.set()

        with patch.object(stop, "wait", side_effect=wait), self.assertLogs("daily_salah.jobs.ticker", level="ERROR"):
            ticker.run(session, stop, interval=1)
        self.assertEqual(session.tick.call_count, 2)

    def test_start_background_returns_daemon_thread(self) -> None:
        session = MagicMock()
        session.settings.tick_seconds = 0.01
        session.tick.return_value = None
        thread, stop = ticker.start_background(session)
        try:
            self.assertTrue(thread.daemon)
            self.assertEqual(thread.name, "salah-ticker")
        finally:
            stop.set()
            thread.join(timeout=2)
        self.assertFalse(thread.is_alive())

    @patch("daily_salah.session.fetch_timings", return_value=RAW)
    def test_loop_replaces_session_after_midnight(self, fetch) -> None:
        clock = [datetime(2026, 3, 1, 23, 59, 59)]
        sessions = SessionManager(
            lambda: SalahSession(settings=Settings(), notifier=NoopNotifier(), clock=lambda: clock[0])
        )
        sessions.load_timings()
        first = sessions.current
        first.complete("Isha")
        stop = threading.Event()

        def wait(timeout):
            if clock[0].day == 2:
                stop.set()
            clock[0] = datetime(2026, 3, 2, 0, 0, 1)

        with patch.object(stop, "wait", side_effect=wait):
            ticker.run(sessions, stop, interval=0)
        self.assertIsNot(sessions.current, first)
        self.assertEqual(sessions.current.tracker.points, 0)
        self.assertTrue(sessions.current.complete("Isha"))
        self.assertEqual(fetch.call_count, 2)


class TickerCliTests(unittest.TestCase):
    @patch("daily_salah.jobs.ticker.SalahSession")
    def test_exits_nonzero_when_times_unavailable(self, session_cls) -> None:
        session_cls.return_value.load_timings.return_value = False
        session_cls.return_value.load_error = "offline"
        with self.assertLogs("daily_salah.jobs.ticker", level="ERROR"):
            self.assertEqual(ticker.main(["--once"]), 1)

    @patch("daily_salah.jobs.ticker.SalahSession")
    def test_once_reports_next_prayer(self, session_cls) -> None:
        session = session_cls.return_value
        session.load_timings.return_value = True
        session.next_prayer.return_value.name = "Asr"
        session.next_prayer.return_value.countdown = "2h 0m 0s"
        self.assertEqual(ticker.main(["--once", "--lat", "51.5", "--lng", "-0.12"]), 0)
        session.load_timings.assert_called_once_with(51.5, -0.12)


if __name__ == "__main__":
    unittest.main()

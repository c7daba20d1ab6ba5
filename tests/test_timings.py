from __future__ import annotations

import io
import json
import unittest
import urllib.error
from unittest.mock import patch

from daily_salah.config import Settings
from daily_salah.errors import TimingsUnavailable
from daily_salah.timings import build_url, extract_timings, fetch_timings

PAYLOAD = {
    "code": 200,
    "data": {
        "timings": {
            "Fajr": "05:12 (EST)",
            "Sunrise": "06:40",
            "Dhuhr": "12:10",
            "Asr": "15:05",
            "Maghrib": "17:41",
            "Isha": "19:02",
        }
    },
}


class TimingsTests(unittest.TestCase):
    def test_build_url_uses_settings_or_override(self) -> None:
        settings = Settings()
        self.assertIn("latitude=38.9072", build_url(settings))
        self.assertIn("method=2", build_url(settings))
        self.assertIn("longitude=-0.12", build_url(settings, 51.5, -0.12))

    def test_extract_strips_zone_suffix_and_extra_keys(self) -> None:
        self.assertEqual(
            extract_timings(PAYLOAD),
            {"Fajr": "05:12", "Dhuhr": "12:10", "Asr": "15:05", "Maghrib": "17:41", "Isha": "19:02"},
        )

    def test_extract_keeps_missing_as_none(self) -> None:
        timings = extract_timings({"data": {"timings": {"Fajr": "05:12"}}})
        self.assertIsNone(timings["Isha"])

    def test_extract_rejects_unexpected_payload(self) -> None:
        with self.assertRaises(TimingsUnavailable):
            extract_timings({"data": None})

    @patch("daily_salah.timings.urllib.request.urlopen")
    def test_fetch_reads_json(self, urlopen) -> None:
        urlopen.return_value = io.BytesIO(json.dumps(PAYLOAD).encode("utf-8"))
        timings = fetch_timings(Settings(), 51.5, -0.12)
        self.assertEqual(timings["Fajr"], "05:12")
        req = urlopen.call_args[0][0]
        self.assertIn("latitude=51.5", req.full_url)

    @patch("daily_salah.timings.time.sleep")
    @patch("daily_salah.timings.urllib.request.urlopen")
    def test_fetch_retries_then_raises(self, urlopen, sleep) -> None:
        urlopen.side_effect = urllib.error.URLError("offline")
        with self.assertLogs("daily_salah.timings", level="WARNING"), self.assertRaises(TimingsUnavailable):
            fetch_timings(Settings())
        self.assertEqual(urlopen.call_count, 3)
        self.assertEqual(sleep.call_count, 2)

    @patch("daily_salah.timings.time.sleep")
    @patch("daily_salah.timings.urllib.request.urlopen")
    def test_fetch_recovers_after_transient_error(self, urlopen, sleep) -> None:
        urlopen.side_effect = [TimeoutError("slow"), io.BytesIO(json.dumps(PAYLOAD).encode("utf-8"))]
        self.assertEqual(fetch_timings(Settings())["Isha"], "19:02")


if __name__ == "__main__":
    unittest.main()

"""
Unit tests for date parsing and natural-language date windows.

All windows are computed against an injected `now` (Friday 2025-08-15
unless stated otherwise) so results are deterministic.
"""

import unittest
from datetime import date, datetime, timedelta, timezone

from coursefinder.dates import normalize_date_window, parse_loose_date, within_range
from coursefinder.model import DateWindow

NOW = date(2025, 8, 15)


class TestParseLooseDate(unittest.TestCase):
    def test_with_weekday_and_ordinal(self) -> None:
        self.assertEqual(parse_loose_date("Wed 20th August 2025"), date(2025, 8, 20))

    def test_plain(self) -> None:
        self.assertEqual(parse_loose_date("20 August 2025"), date(2025, 8, 20))

    def test_commas(self) -> None:
        self.assertEqual(parse_loose_date("Mon, 1st September, 2025"), date(2025, 9, 1))

    def test_abbreviated_month(self) -> None:
        self.assertEqual(parse_loose_date("20 Aug 2025"), date(2025, 8, 20))

    def test_invalid_returns_none(self) -> None:
        for text in ["", None, "TBC", "31 February 2025", "20 Smarch 2025", "August 2025"]:
            with self.subTest(text=text):
                self.assertIsNone(parse_loose_date(text))

    def test_oversized_numbers_return_none(self) -> None:
        for text in ["99999999999 August 2025", "20 August 99999999999", "9" * 5000 + " August 2025"]:
            with self.subTest(text=text[:20]):
                self.assertIsNone(parse_loose_date(text))


class TestWithinRange(unittest.TestCase):
    def test_bounds_inclusive(self) -> None:
        window = DateWindow(date(2025, 8, 1), date(2025, 8, 31), "august")
        self.assertTrue(within_range("1st August 2025", window))
        self.assertTrue(within_range("31st August 2025", window))
        self.assertFalse(within_range("1st September 2025", window))

    def test_unparsable_excluded_from_bounded_window(self) -> None:
        window = DateWindow(date(2025, 8, 1), date(2025, 8, 31), "august")
        self.assertFalse(within_range("TBC", window))

    def test_no_window_accepts_everything(self) -> None:
        self.assertTrue(within_range("TBC", None))
        self.assertTrue(within_range("TBC", DateWindow(None, None, "any")))


class TestNormalizeDateWindow(unittest.TestCase):
    def assertWindow(self, window: DateWindow, start: date, end: date) -> None:
        self.assertEqual((window.start, window.end), (start, end))
        self.assertLessEqual(window.start, window.end)

    def test_empty_is_next_8_weeks(self) -> None:
        w = normalize_date_window("", now=NOW)
        self.assertWindow(w, NOW, NOW + timedelta(days=56))
        self.assertEqual(w.label, "next 8 weeks")

    def test_unrecognized_falls_back(self) -> None:
        w = normalize_date_window("whenever suits the boss? no, soon", now=NOW)
        # "whenever" wins over the fallback
        self.assertEqual(w.label, "anytime (next 12 months)")
        w = normalize_date_window("soonish", now=NOW)
        self.assertWindow(w, NOW, NOW + timedelta(days=56))

    def test_anytime(self) -> None:
        w = normalize_date_window("any time", now=NOW)
        self.assertWindow(w, NOW, date(2026, 8, 15))

    def test_this_month(self) -> None:
        self.assertWindow(normalize_date_window("this month", now=NOW), date(2025, 8, 1), date(2025, 8, 31))

    def test_next_month(self) -> None:
        w = normalize_date_window("next month", now=NOW)
        self.assertWindow(w, date(2025, 9, 1), date(2025, 9, 30))
        self.assertEqual(w.label, "next month")

    def test_next_month_december_rollover(self) -> None:
        w = normalize_date_window("next month", now=date(2025, 12, 10))
        self.assertWindow(w, date(2026, 1, 1), date(2026, 1, 31))

    def test_next_week(self) -> None:
        self.assertWindow(normalize_date_window("next week", now=NOW), date(2025, 8, 18), date(2025, 8, 24))

    def test_next_week_from_monday_skips_a_full_week(self) -> None:
        w = normalize_date_window("next week", now=date(2025, 8, 18))
        self.assertWindow(w, date(2025, 8, 25), date(2025, 8, 31))

    def test_in_n_weeks(self) -> None:
        w = normalize_date_window("in 3 weeks", now=NOW)
        self.assertWindow(w, date(2025, 9, 5), date(2025, 9, 11))
        self.assertEqual(w.label, "in 3 week(s)")

    def test_next_n_weeks(self) -> None:
        w = normalize_date_window("next 2 weeks", now=NOW)
        self.assertWindow(w, NOW, date(2025, 8, 29))
        self.assertEqual(w.label, "next 2 week(s)")

    def test_week_count_out_of_calendar_range_falls_back(self) -> None:
        for text in ["smsts in 600000 weeks", "next 600000 weeks", "in " + "9" * 5000 + " weeks"]:
            with self.subTest(text=text[:25]):
                w = normalize_date_window(text, now=NOW)
                self.assertEqual(w.label, "next 8 weeks")
                self.assertWindow(w, NOW, date(2025, 10, 10))

    def test_after_is_exclusive(self) -> None:
        w = normalize_date_window("after 10th september", now=NOW)
        self.assertWindow(w, date(2025, 9, 11), date(2025, 9, 30))
        self.assertEqual(w.label, "after 10 september")

    def test_from_is_inclusive(self) -> None:
        self.assertWindow(normalize_date_window("from 10 september", now=NOW), date(2025, 9, 10), date(2025, 9, 30))

    def test_later_than_past_month_rolls_year(self) -> None:
        w = normalize_date_window("later than 3 march", now=NOW)
        self.assertWindow(w, date(2026, 3, 4), date(2026, 3, 31))

    def test_after_last_day_keeps_start_before_end(self) -> None:
        w = normalize_date_window("after 30 june", now=date(2025, 5, 1))
        self.assertWindow(w, date(2025, 7, 1), date(2025, 7, 31))

    def test_end_of_month(self) -> None:
        self.assertWindow(normalize_date_window("end of october", now=NOW), date(2025, 10, 25), date(2025, 10, 31))
        self.assertWindow(normalize_date_window("end of february", now=NOW), date(2026, 2, 25), date(2026, 2, 28))

    def test_end_of_non_month_falls_through(self) -> None:
        w = normalize_date_window("end of the week", now=NOW)
        self.assertEqual(w.label, "next 8 weeks")

    def test_bare_month(self) -> None:
        w = normalize_date_window("sometime in november", now=NOW)
        self.assertWindow(w, date(2025, 11, 1), date(2025, 11, 30))
        self.assertEqual(w.label, "november")

    def test_current_month_not_rolled(self) -> None:
        self.assertWindow(normalize_date_window("August", now=NOW), date(2025, 8, 1), date(2025, 8, 31))

    def test_past_month_rolls_to_next_year(self) -> None:
        self.assertWindow(normalize_date_window("july", now=NOW), date(2026, 7, 1), date(2026, 7, 31))

    def test_months_checked_in_calendar_order(self) -> None:
        w = normalize_date_window("may or march", now=NOW)
        self.assertEqual(w.label, "march")

    def test_aware_now_truncated_to_utc_day(self) -> None:
        now = datetime(2025, 8, 15, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
        w = normalize_date_window("", now=now)
        self.assertEqual(w.start, date(2025, 8, 16))


if __name__ == "__main__":
    unittest.main()

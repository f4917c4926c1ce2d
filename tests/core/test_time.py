#!/usr/bin/env python3
"""Test suite for GNSS time handling"""

import unittest
from datetime import datetime

from pynav.core.time import GNSSTime, timediff, wrap_week


class TestGNSSTime(unittest.TestCase):
    """Test GNSSTime construction and arithmetic"""

    def test_from_calendar(self):
        """2020-01-01 is Wednesday of GPS week 2086"""
        t = GNSSTime.from_calendar(2020, 1, 1, 0, 0, 0)
        self.assertEqual(t.week, 2086)
        self.assertEqual(t.tow, 259200.0)
        self.assertEqual(t.mjd, 58849)
        self.assertEqual(t.sod, 0.0)

    def test_beidou_epoch(self):
        t = GNSSTime.from_calendar(2006, 1, 1, 0, 0, 0, time_sys='BDS')
        self.assertEqual(t.week, 0)
        self.assertEqual(t.tow, 0.0)
        self.assertEqual(t.mjd, 53736)

    def test_tow_normalization(self):
        t = GNSSTime(2086, 604800.0 + 10.0)
        self.assertEqual(t.week, 2087)
        self.assertAlmostEqual(t.tow, 10.0)

        t = GNSSTime(2086, -10.0)
        self.assertEqual(t.week, 2085)
        self.assertAlmostEqual(t.tow, 604790.0)

    def test_invalid_system(self):
        with self.assertRaises(ValueError):
            GNSSTime(0, 0.0, 'XYZ')

    def test_datetime_roundtrip(self):
        dt = datetime(2021, 7, 4, 13, 30, 15)
        t = GNSSTime.from_datetime(dt, 'GAL')
        self.assertEqual(t.time_sys, 'GAL')
        self.assertEqual(t.to_datetime(), dt)

    def test_subtraction(self):
        t1 = GNSSTime.from_calendar(2020, 1, 1, 0, 0, 0)
        t2 = GNSSTime.from_calendar(2020, 1, 4, 23, 59, 0)
        self.assertEqual(t2 - t1, 3 * 86400.0 + 86340.0)
        self.assertEqual((t1 + 60.0) - t1, 60.0)
        self.assertEqual(t1 - 60.0, t1.add_seconds(-60.0))

    def test_mixed_systems_rejected(self):
        t1 = GNSSTime(2086, 0.0, 'GPS')
        t2 = GNSSTime(2086, 0.0, 'UTC')
        with self.assertRaises(ValueError):
            t1 - t2
        with self.assertRaises(ValueError):
            t1 < t2
        self.assertNotEqual(t1, t2)

    def test_week_crossing_mjd(self):
        """Saturday 23:00 and Sunday 01:00 are consecutive days"""
        sat = GNSSTime.from_calendar(2020, 1, 4, 23, 0, 0)
        sun = GNSSTime.from_calendar(2020, 1, 5, 1, 0, 0)
        self.assertEqual(sun.mjd - sat.mjd, 1)
        self.assertEqual(sun.week - sat.week, 1)
        self.assertEqual(sun.sod, 3600.0)

    def test_ordering_and_hash(self):
        t1 = GNSSTime(2086, 100.0)
        t2 = GNSSTime(2086, 200.0)
        self.assertLess(t1, t2)
        self.assertGreaterEqual(t2, t1)
        self.assertEqual(len({t1, t1.copy(), t2}), 2)


class TestTimeDifferences(unittest.TestCase):
    """Test half-week wrapping"""

    def test_wrap_week(self):
        self.assertEqual(wrap_week(100.0), 100.0)
        self.assertEqual(wrap_week(302400.0), 302400.0)
        self.assertEqual(wrap_week(302401.0), 302401.0 - 604800.0)
        self.assertEqual(wrap_week(-604600.0), 200.0)

    def test_timediff(self):
        self.assertEqual(timediff(100.0, 604700.0), 200.0)
        t1 = GNSSTime(2086, 100.0)
        t2 = GNSSTime(2085, 604700.0)
        self.assertEqual(timediff(t1, t2), 200.0)


if __name__ == '__main__':
    unittest.main()

#!/usr/bin/env python3
"""Test suite for the RINEX 3 navigation reader"""

import copy
import os
import tempfile
import unittest

import numpy as np
import pandas as pd

from pynav.core.constants import (SYS_ALL, SYS_BDS, SYS_GAL, SYS_GLO, SYS_GPS,
                                  SYS_SBS)
from pynav.core.exceptions import MalformedRecordError, RinexHeaderError
from pynav.core.time import GNSSTime
from pynav.io.rinex import NavigationRnx, nav_to_dataframe, read_nav

GPS_FIELDS = [
    -1.171352341771e-04, -1.136868377216e-12, 0.0,
    29.0, -11.40625, 4.442685055713e-09, 2.620025812014,
    -6.910413503647e-07, 8.681794116274e-03, 8.568167686462e-06, 5153.640497208,
    259200.0, 1.303851604462e-07, -1.063379387838, 1.862645149231e-08,
    0.9754105000823, 223.75, 0.8546917592062, -7.783537571817e-09,
    2.682254424707e-10, 1.0, 2086.0, 0.0,
    2.0, 0.0, 4.656612873077e-09, 29.0,
    252018.0, 4.0,
]

GAL_FIELDS = [
    -6.267207209021e-04, -8.313350008393e-12, 0.0,
    6.0, -1.875000000000e+00, 3.159774101001e-09, -2.854839519263,
    -1.005828380585e-07, 2.446102048270e-04, 7.621571421623e-06, 5440.615259171,
    259200.0, -3.725290298462e-09, -1.578036427431, 1.862645149231e-08,
    0.9705690017542, 1.800625000000e+02, -0.2838609087066, -5.687022026289e-09,
    3.421571091798e-10, 258.0, 2086.0, 0.0,
    3.120000000000, 0.0, -1.629814505577e-09, -1.862645149231e-09,
    259865.0,
]

BDS_FIELDS = [
    -2.429266460240e-04, 3.801403636316e-11, 0.0,
    1.0, -8.968750000000e+00, 4.179459230130e-09, 2.131019453543,
    -3.946665674448e-07, 1.060853060335e-03, 1.124106347561e-05, 5282.624101639,
    259186.0, 2.328306436539e-09, -2.693062868459, -1.131370663643e-07,
    0.9619963811207, 1.461875000000e+02, -0.5327468742567, -6.765996470208e-09,
    -5.753811324059e-10, 0.0, 730.0, 0.0,
    2.0, 0.0, 1.420000000000e-08, -1.040000000000e-08,
    259186.0, 1.0,
]

GLO_FIELDS = [
    7.942318916321e-05, 9.094947017729e-13, 345600.0,
    21051.83544922, 2.001206398010, 0.0, 0.0,
    13270.50585938, -1.852630615234, 1.862645149231e-09, 1.0,
    -4593.409179688, 3.818999290466, -9.313225746155e-10, 0.0,
]

GLO_305_EXTRA = [0.0, 2.793967723846e-09, 2.0, 0.0]

SBS_FIELDS = [
    -1.303944736719e-07, -1.818989403546e-12, 345664.0,
    33470.28, 1.2e-03, 1.0e-07, 0.0,
    23119.608, -8.0e-04, -1.25e-07, 32767.0,
    5.2, 2.4e-03, 0.0, 179.0,
]


def header(version: str = '3.04', sys_char: str = 'M', end: bool = True) -> str:
    """RINEX 3 navigation header with labels in columns 61-80"""
    lines = [
        f"{version:>9}{'':11}{'N: GNSS NAV DATA':<20}{sys_char + ': MIXED':<20}RINEX VERSION / TYPE",
        f"{'pynav':<20}{'test':<20}{'20200101 000000 UTC':<20}PGM / RUN BY / DATE",
        f"{'GPUT  1.8626451492E-09 1.776356839E-15 233472 2086':<60}TIME SYSTEM CORR",
        f"{'    18':<60}LEAP SECONDS",
    ]
    if end:
        lines.append(f"{'':60}END OF HEADER")
    return "\n".join(lines) + "\n"


def record(sat: str, epoch: str, values: list, nlines: int) -> str:
    """One navigation record with 19-column fields"""
    def fmt(chunk):
        return "".join(f"{v:19.12E}" for v in chunk)

    text = f"{sat} {epoch}" + fmt(values[:3]) + "\n"
    for n in range(nlines):
        text += "    " + fmt(values[3 + 4 * n:7 + 4 * n]) + "\n"
    return text


GPS_RECORD = record('G01', '2020 01 01 00 00 00', GPS_FIELDS, 7)
GAL_RECORD = record('E11', '2020 01 01 00 00 00', GAL_FIELDS, 7)
BDS_RECORD = record('C06', '2019 12 31 23 59 46', BDS_FIELDS, 7)
GLO_RECORD = record('R01', '2020 01 01 00 15 00', GLO_FIELDS, 3)
SBS_RECORD = record('S20', '2020 01 01 00 01 04', SBS_FIELDS, 3)


class RinexTestCase(unittest.TestCase):
    """Temporary directory holding navigation files"""

    def setUp(self):
        self.test_dir = tempfile.mkdtemp()
        self.files = []

    def tearDown(self):
        for file in self.files:
            if os.path.exists(file):
                os.remove(file)
        os.rmdir(self.test_dir)

    def write(self, name: str, text: str) -> str:
        path = os.path.join(self.test_dir, name)
        with open(path, 'w') as fh:
            fh.write(text)
        self.files.append(path)
        return path


class TestHeader(RinexTestCase):
    """Test header parsing"""

    def test_header_fields(self):
        path = self.write('mixed.rnx', header() + GPS_RECORD)
        with NavigationRnx(path) as nav:
            self.assertEqual(nav.version, 3.04)
            self.assertEqual(nav.satsys, SYS_ALL)
            self.assertEqual(len(nav.header), 5)
        self.assertTrue(nav.closed)

    def test_single_system(self):
        path = self.write('gps.rnx', header(sys_char='G') + GPS_RECORD)
        with NavigationRnx(path) as nav:
            self.assertEqual(nav.satsys, SYS_GPS)

    def test_missing_end_of_header(self):
        path = self.write('noend.rnx', header(end=False))
        with self.assertRaises(RinexHeaderError):
            NavigationRnx(path)

    def test_unsupported_version(self):
        path = self.write('v2.rnx', header(version='2.11') + GPS_RECORD)
        with self.assertRaises(RinexHeaderError):
            NavigationRnx(path)

    def test_not_navigation(self):
        text = header().replace('N: GNSS NAV DATA', 'O: OBSERVATION  ')
        path = self.write('obs.rnx', text)
        with self.assertRaises(RinexHeaderError):
            NavigationRnx(path)

    def test_no_version_line(self):
        path = self.write('garbage.rnx', "not a rinex file\n")
        with self.assertRaises(RinexHeaderError):
            NavigationRnx(path)

    def test_missing_file(self):
        with self.assertRaises(OSError):
            NavigationRnx(os.path.join(self.test_dir, 'missing.rnx'))

    def test_header_errors_are_value_errors(self):
        path = self.write('noend.rnx', header(end=False))
        with self.assertRaises(ValueError):
            NavigationRnx(path)


class TestRecords(RinexTestCase):
    """Test record decoding"""

    def setUp(self):
        super().setUp()
        text = header() + GPS_RECORD + GLO_RECORD + GAL_RECORD + BDS_RECORD + SBS_RECORD
        self.path = self.write('mixed.rnx', text)

    def test_gps_record(self):
        with NavigationRnx(self.path) as nav:
            frame = nav.read_next_record()
        self.assertEqual(frame.system, SYS_GPS)
        self.assertEqual(frame.prn, 1)
        self.assertEqual(frame.toc, GNSSTime(2086, 259200.0, 'GPS'))
        np.testing.assert_allclose(frame.fields[:29], GPS_FIELDS, rtol=1e-12)
        self.assertEqual(frame.data(29), 0.0)
        self.assertEqual(frame.message.week, 2086.0)
        self.assertEqual(frame.gps_toe2date(), frame.toc)

    def test_record_sequence(self):
        with NavigationRnx(self.path) as nav:
            frames = list(nav)
        self.assertEqual([f.sat_id for f in frames], ['G01', 'R01', 'E11', 'C06', 'S20'])
        self.assertEqual([f.toc.time_sys for f in frames], ['GPS', 'UTC', 'GAL', 'BDS', 'GPS'])

        glo = frames[1]
        np.testing.assert_allclose(glo.fields[:15], GLO_FIELDS, rtol=1e-12)
        np.testing.assert_array_equal(glo.fields[15:], np.zeros(16))

        bds = frames[3]
        self.assertEqual(bds.toc, GNSSTime.from_calendar(2019, 12, 31, 23, 59, 46, 'BDS'))
        self.assertEqual(bds.message.aodc, 1.0)

        sbs = frames[4]
        self.assertEqual(sbs.message.iodn, 179.0)

    def test_peek(self):
        with NavigationRnx(self.path) as nav:
            self.assertEqual(nav.peek_next_system(), (SYS_GPS, 1))
            self.assertEqual(nav.peek_next_system(), (SYS_GPS, 1))
            self.assertEqual(nav.read_next_record().sat_id, 'G01')
            self.assertEqual(nav.peek_next_system(), (SYS_GLO, 1))

    def test_ignore_block(self):
        with NavigationRnx(self.path) as nav:
            self.assertTrue(nav.ignore_next_block())
            self.assertTrue(nav.ignore_next_block())
            self.assertEqual(nav.peek_next_system(), (SYS_GAL, 11))
            self.assertEqual(nav.read_next_record().sat_id, 'E11')
            self.assertTrue(nav.ignore_next_block())
            self.assertEqual(nav.read_next_record().sat_id, 'S20')
            self.assertFalse(nav.ignore_next_block())

    def test_end_of_file(self):
        with NavigationRnx(self.path) as nav:
            for _ in range(5):
                self.assertIsNotNone(nav.read_next_record())
            self.assertIsNone(nav.read_next_record())
            self.assertIsNone(nav.peek_next_system())
            self.assertIsNone(nav.read_next_record())

    def test_rewind(self):
        with NavigationRnx(self.path) as nav:
            first = nav.read_next_record()
            nav.ignore_next_block()
            nav.rewind()
            again = nav.read_next_record()
            self.assertEqual(again.sat_id, first.sat_id)
            np.testing.assert_array_equal(again.fields, first.fields)

            list(nav)
            nav.rewind()
            self.assertEqual(len(list(nav)), 5)

    def test_new_frame_per_record(self):
        with NavigationRnx(self.path) as nav:
            frame1 = nav.read_next_record()
            nav.rewind()
            frame2 = nav.read_next_record()
        self.assertIsNot(frame1, frame2)
        frame2.fields[0] = 1.0
        self.assertNotEqual(frame1.fields[0], 1.0)

    def test_not_copyable(self):
        with NavigationRnx(self.path) as nav:
            with self.assertRaises(TypeError):
                copy.copy(nav)
            with self.assertRaises(TypeError):
                copy.deepcopy(nav)

    def test_propagation_from_file(self):
        with NavigationRnx(self.path) as nav:
            frames = list(nav)
        gps, glo = frames[0], frames[1]

        pos, dts = gps.state_and_clock(gps.toc + 900.0)
        self.assertGreater(np.linalg.norm(pos), 20000e3)
        self.assertLess(np.linalg.norm(pos), 30000e3)
        self.assertLess(abs(dts), 1e-3)

        pos, dts = glo.state_and_clock(glo.toc)
        np.testing.assert_allclose(pos, np.array(GLO_FIELDS[3:12:4]) * 1e3, rtol=1e-12)


class TestRecordFormats(RinexTestCase):
    """Test number formats and version dependent layouts"""

    def test_d_exponent(self):
        path = self.write('d.rnx', header() + GPS_RECORD.replace('E', 'D'))
        with NavigationRnx(path) as nav:
            frame = nav.read_next_record()
        self.assertAlmostEqual(frame.message.e, 8.681794116274e-03, delta=1e-15)

    def test_blank_field(self):
        lines = GPS_RECORD.splitlines(keepends=True)
        # Cus on the second data line
        lines[2] = lines[2][:42] + ' ' * 19 + lines[2][61:]
        path = self.write('blank.rnx', header() + ''.join(lines))
        with NavigationRnx(path) as nav:
            frame = nav.read_next_record()
        self.assertEqual(frame.message.cus, 0.0)
        self.assertEqual(frame.message.sqrt_a, 5153.640497208)

    def test_short_last_line(self):
        """Trailing fields omitted from the last data line read as zero"""
        lines = GPS_RECORD.splitlines(keepends=True)
        lines[7] = lines[7][:23] + "\n"
        path = self.write('short.rnx', header() + ''.join(lines))
        with NavigationRnx(path) as nav:
            frame = nav.read_next_record()
        self.assertEqual(frame.message.ttr, 252018.0)
        self.assertEqual(frame.message.fit, 0.0)

    def test_blank_data_line(self):
        """A data line with all four fields omitted reads as zeros"""
        for blank in ("\n", " " * 80 + "\n"):
            lines = GPS_RECORD.splitlines(keepends=True)
            # sva, svh, tgd and iodc
            lines[6] = blank
            path = self.write('blankline.rnx', header() + ''.join(lines) + SBS_RECORD)
            with NavigationRnx(path) as nav:
                frame = nav.read_next_record()
                self.assertEqual(nav.read_next_record().sat_id, 'S20')
            self.assertEqual(frame.message.iodc, 0.0)
            self.assertEqual(frame.message.tgd, 0.0)
            self.assertEqual(frame.message.ttr, 252018.0)

    def test_glonass_305(self):
        text = header(version='3.05') + record('R01', '2020 01 01 00 15 00',
                                               GLO_FIELDS + GLO_305_EXTRA, 4) + GPS_RECORD
        path = self.write('glo305.rnx', text)
        with NavigationRnx(path) as nav:
            glo = nav.read_next_record()
            gps = nav.read_next_record()
        self.assertAlmostEqual(glo.message.dtaun, 2.793967723846e-09, delta=1e-20)
        self.assertEqual(glo.message.urai, 2.0)
        self.assertEqual(gps.sat_id, 'G01')

    def test_blank_lines_between_records(self):
        path = self.write('blanklines.rnx', header() + GPS_RECORD + "\n" + SBS_RECORD + "\n\n")
        with NavigationRnx(path) as nav:
            self.assertEqual(len(list(nav)), 2)


class TestMalformed(RinexTestCase):
    """Test malformed record handling"""

    def test_truncated_before_next_record(self):
        lines = GPS_RECORD.splitlines(keepends=True)
        text = header() + ''.join(lines[:6]) + GLO_RECORD
        path = self.write('trunc.rnx', text)
        with NavigationRnx(path) as nav:
            with self.assertRaises(MalformedRecordError):
                nav.read_next_record()
            # the stream is left at the start of the next record
            self.assertEqual(nav.peek_next_system(), (SYS_GLO, 1))
            self.assertEqual(nav.read_next_record().sat_id, 'R01')

    def test_truncated_at_end_of_file(self):
        lines = GPS_RECORD.splitlines(keepends=True)
        path = self.write('trunc_eof.rnx', header() + ''.join(lines[:4]))
        with NavigationRnx(path) as nav:
            with self.assertRaises(MalformedRecordError):
                nav.read_next_record()
            self.assertIsNone(nav.read_next_record())

    def test_bad_number(self):
        lines = GPS_RECORD.splitlines(keepends=True)
        lines[3] = lines[3][:23] + '   not-a-number    ' + lines[3][42:]
        path = self.write('badnum.rnx', header() + ''.join(lines) + SBS_RECORD)
        with NavigationRnx(path) as nav:
            with self.assertRaises(MalformedRecordError):
                nav.read_next_record()
            self.assertEqual(nav.read_next_record().sat_id, 'S20')

    def test_bad_epoch(self):
        bad = GPS_RECORD.replace('2020 01 01 00 00 00', '2020 xx 01 00 00 00', 1)
        path = self.write('badepoch.rnx', header() + bad + SBS_RECORD)
        with NavigationRnx(path) as nav:
            with self.assertRaises(MalformedRecordError):
                nav.read_next_record()
            self.assertEqual(nav.read_next_record().sat_id, 'S20')

    def test_unknown_system(self):
        path = self.write('unknown.rnx', header() + GPS_RECORD.replace('G01', 'X01', 1))
        with NavigationRnx(path) as nav:
            with self.assertRaises(MalformedRecordError):
                nav.peek_next_system()
            with self.assertRaises(MalformedRecordError):
                nav.read_next_record()
            self.assertIsNone(nav.read_next_record())


class TestReadNav(RinexTestCase):
    """Test whole-file helpers"""

    def setUp(self):
        super().setUp()
        text = header() + GPS_RECORD + GLO_RECORD + GAL_RECORD + BDS_RECORD + SBS_RECORD
        self.path = self.write('mixed.rnx', text)

    def test_read_all(self):
        frames = read_nav(self.path)
        self.assertEqual(len(frames), 5)

    def test_system_filter(self):
        frames = read_nav(self.path, systems=SYS_GPS | SYS_GAL)
        self.assertEqual([f.system for f in frames], [SYS_GPS, SYS_GAL])
        frames = read_nav(self.path, systems=SYS_BDS | SYS_SBS)
        self.assertEqual([f.sat_id for f in frames], ['C06', 'S20'])

    def test_dataframe(self):
        df = nav_to_dataframe(read_nav(self.path))
        self.assertIsInstance(df, pd.DataFrame)
        self.assertEqual(len(df), 5)
        self.assertListEqual(list(df.columns[:4]), ['system', 'prn', 'toc', 'f00'])
        self.assertEqual(df.columns[-1], 'f30')
        self.assertListEqual(list(df['system']), ['G', 'R', 'E', 'C', 'S'])
        self.assertAlmostEqual(df['f10'].iloc[0], 5153.640497208)


if __name__ == '__main__':
    unittest.main()

# Copyright 2024 inuex35
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""RINEX 3 navigation file reading"""

import logging
from pathlib import Path
from typing import List, Optional

import numpy as np
import pandas as pd

from ..core.constants import *
from ..core.data_structures import NavDataFrame
from ..core.exceptions import MalformedRecordError, RinexHeaderError
from ..core.time import GNSSTime

logger = logging.getLogger(__name__)

_LABEL_COL = 60


def _parse_field(text: str) -> float:
    """One fixed-width RINEX float; blank reads as 0.0, D exponents accepted"""
    token = text.strip()
    if not token:
        return 0.0
    return float(token.replace('D', 'E').replace('d', 'e'))


def _is_continuation(line: str) -> bool:
    # a data line with every field omitted may be left empty
    return line != '' and not line[:1].strip()


class NavigationRnx:
    """
    Sequential reader for RINEX 3.x navigation files.

    The header is parsed on construction; records are then decoded one at a
    time. The reader owns its file handle and cannot be copied.

    Attributes
    ----------
    filename : Path
        Path of the navigation file
    version : float
        RINEX version from the header (3.00 - 3.05)
    satsys : int
        Satellite system of the file (SYS_ALL for mixed files)
    header : list of str
        Raw header lines, terminator included

    Examples
    --------
    >>> with NavigationRnx('BRDC00IGS_R_20200010000_01D_MN.rnx') as nav:
    ...     for frame in nav:
    ...         pos, dts = frame.state_and_clock(t)
    """

    def __init__(self, filename: str):
        """
        Open a navigation file and parse its header

        Parameters:
        -----------
        filename : str
            Path to RINEX 3 navigation file

        Raises:
        -------
        OSError
            If the file cannot be opened
        RinexHeaderError
            If the header is missing, not a version 3 navigation header, or
            not terminated by END OF HEADER
        """
        self.filename = Path(filename)
        self.version = 0.0
        self.satsys = SYS_NONE
        self.header = []
        self._fh = open(self.filename, 'r', encoding='ascii', errors='replace')
        try:
            self._read_header()
        except Exception:
            self._fh.close()
            raise
        self._data_start = self._fh.tell()

        logger.debug(f"Opened {self.filename.name}: RINEX {self.version:.2f}, "
                     f"system '{sys2char(self.satsys)}'")

    def _read_header(self) -> None:
        line = self._fh.readline()
        if 'RINEX VERSION / TYPE' not in line[_LABEL_COL:]:
            raise RinexHeaderError(f"{self.filename}: first line is not RINEX VERSION / TYPE")
        self.header.append(line)

        try:
            self.version = float(line[0:9])
        except ValueError:
            raise RinexHeaderError(f"{self.filename}: unreadable RINEX version '{line[0:9]}'") from None
        if not 3.0 <= self.version < 4.0:
            raise RinexHeaderError(f"{self.filename}: unsupported RINEX version {self.version}")
        if line[20:21] != 'N':
            raise RinexHeaderError(f"{self.filename}: not a navigation file (type '{line[20:21]}')")

        # RINEX 3 makes the system mandatory; a blank is read as GPS like RINEX 2
        syschar = line[40:41].strip() or 'G'
        self.satsys = char2sys(syschar)
        if self.satsys == SYS_NONE:
            raise RinexHeaderError(f"{self.filename}: unknown satellite system '{syschar}'")

        while True:
            line = self._fh.readline()
            if not line:
                raise RinexHeaderError(f"{self.filename}: END OF HEADER not found")
            self.header.append(line)
            if 'END OF HEADER' in line[_LABEL_COL:]:
                return

    def __repr__(self):
        return f"NavigationRnx('{self.filename}', version={self.version}, satsys='{sys2char(self.satsys)}')"

    def __copy__(self):
        raise TypeError("NavigationRnx owns its file handle and cannot be copied")

    def __deepcopy__(self, memo):
        raise TypeError("NavigationRnx owns its file handle and cannot be copied")

    def __enter__(self) -> 'NavigationRnx':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __iter__(self):
        while True:
            frame = self.read_next_record()
            if frame is None:
                return
            yield frame

    @property
    def closed(self) -> bool:
        return self._fh.closed

    def close(self) -> None:
        """Release the file handle"""
        self._fh.close()

    def _next_line(self) -> tuple[int, Optional[str]]:
        """Position and content of the next non-blank line (None at end)"""
        while True:
            pos = self._fh.tell()
            line = self._fh.readline()
            if not line:
                return pos, None
            if line.strip():
                return pos, line

    def _skip_continuation(self) -> int:
        """Consume continuation lines, leaving the stream before the next record"""
        count = 0
        while True:
            pos = self._fh.tell()
            line = self._fh.readline()
            if not _is_continuation(line):
                self._fh.seek(pos)
                return count
            count += 1

    def _malformed(self, msg: str) -> MalformedRecordError:
        logger.warning(f"{self.filename.name}: {msg}")
        return MalformedRecordError(msg)

    def _parse_sat(self, line: str) -> tuple[int, int]:
        sys = char2sys(line[0])
        if sys in (SYS_NONE, SYS_ALL):
            raise self._malformed(f"unknown satellite system in record line: {line.rstrip()!r}")
        try:
            prn = int(line[1:3])
        except ValueError:
            raise self._malformed(f"unreadable PRN in record line: {line.rstrip()!r}") from None
        return sys, prn

    def peek_next_system(self) -> Optional[tuple[int, int]]:
        """
        System and PRN of the next record without consuming it

        Returns:
        --------
        tuple (system, prn) or None at end of file
        """
        start = self._fh.tell()
        try:
            _, line = self._next_line()
            if line is None:
                return None
            return self._parse_sat(line)
        finally:
            self._fh.seek(start)

    def read_next_record(self) -> Optional[NavDataFrame]:
        """
        Decode the next navigation record

        Returns:
        --------
        NavDataFrame or None
            Decoded record, or None at end of file

        Raises:
        -------
        MalformedRecordError
            If the record line, a number or a continuation line cannot be
            read. The stream is left at the start of the following record.
        """
        _, line = self._next_line()
        if line is None:
            return None

        try:
            sys, prn = self._parse_sat(line)
            toc = self._parse_epoch(line, sys)
        except MalformedRecordError:
            self._skip_continuation()
            raise

        nlines = NAV_DATA_LINES[sys]
        if sys == SYS_GLO and round(self.version, 2) >= 3.05:
            nlines += 1

        fields = np.zeros(NAV_SLOTS)
        sat_id = f"{sys2char(sys)}{prn:02d}"
        try:
            for i in range(3):
                start = 23 + i * RNX_FIELD_WIDTH
                fields[i] = _parse_field(line[start:start + RNX_FIELD_WIDTH])

            for n in range(nlines):
                pos = self._fh.tell()
                data = self._fh.readline()
                if not _is_continuation(data):
                    self._fh.seek(pos)
                    raise self._malformed(
                        f"{sat_id} {toc}: record ends after {n} of {nlines} data lines")
                for j in range(4):
                    idx = 3 + 4 * n + j
                    if idx >= NAV_SLOTS:
                        break
                    start = 4 + j * RNX_FIELD_WIDTH
                    fields[idx] = _parse_field(data[start:start + RNX_FIELD_WIDTH])
        except MalformedRecordError:
            raise
        except ValueError as exc:
            self._skip_continuation()
            raise self._malformed(f"{sat_id} {toc}: {exc}") from exc

        return NavDataFrame(system=sys, prn=prn, toc=toc, fields=fields)

    def _parse_epoch(self, line: str, sys: int) -> GNSSTime:
        try:
            year = int(line[4:8])
            month = int(line[9:11])
            day = int(line[12:14])
            hour = int(line[15:17])
            minute = int(line[18:20])
            second = float(line[21:23])
            return GNSSTime.from_calendar(year, month, day, hour, minute, second,
                                          time_sys=sys2time_sys(sys))
        except ValueError as exc:
            raise self._malformed(f"unreadable epoch in record line: {line.rstrip()!r}") from exc

    def ignore_next_block(self) -> bool:
        """
        Skip the next record without decoding it

        Returns:
        --------
        bool
            True if a record was skipped, False at end of file
        """
        _, line = self._next_line()
        if line is None:
            return False
        count = self._skip_continuation()
        logger.debug(f"Skipped record {line[:3]} ({count} data lines)")
        return True

    def rewind(self) -> None:
        """Return to the first record after the header"""
        self._fh.seek(self._data_start)


def read_nav(filename: str, systems: int = SYS_ALL) -> List[NavDataFrame]:
    """
    Read all records of a navigation file

    Parameters:
    -----------
    filename : str
        Path to RINEX 3 navigation file
    systems : int
        Bitmask of satellite systems to keep (default: SYS_ALL)

    Returns:
    --------
    list of NavDataFrame
    """
    frames = []
    with NavigationRnx(filename) as nav:
        while True:
            sat = nav.peek_next_system()
            if sat is None:
                break
            if sat[0] & systems:
                frames.append(nav.read_next_record())
            else:
                nav.ignore_next_block()

    logger.info(f"Read {len(frames)} navigation records from {Path(filename).name}")
    return frames


def nav_to_dataframe(frames: List[NavDataFrame]) -> pd.DataFrame:
    """
    Tabulate navigation records

    Returns:
    --------
    pd.DataFrame
        One row per record with columns: system (RINEX character), prn,
        toc (datetime in the record's time scale) and the raw fields f00..f30
    """
    columns = ['system', 'prn', 'toc'] + [f"f{i:02d}" for i in range(NAV_SLOTS)]
    rows = [
        [sys2char(frame.system), frame.prn, frame.toc.to_datetime(), *frame.fields]
        for frame in frames
    ]
    return pd.DataFrame(rows, columns=columns)

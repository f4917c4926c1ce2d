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

"""GNSS Time Systems and Conversions"""

import math
from datetime import date, datetime, timedelta
from typing import Union

from .constants import (BDT0, GPST0, HALF_WEEK, MJD_BDT0, MJD_GPST0,
                        SECONDS_IN_DAY, SECONDS_IN_WEEK)

_MJD_EPOCH = date(1858, 11, 17)


class GNSSTime:
    """GNSS Time representation with type safety

    An instant is stored as a week number and time of week counted from the
    reference epoch of its time scale. BeiDou time counts from BDT0; every
    other scale counts from GPST0 (Galileo, QZSS and IRNSS weeks in RINEX 3
    navigation files are GPS-aligned). No leap-second handling is done here:
    times in different scales cannot be mixed.
    """

    VALID_SYSTEMS = ('GPS', 'GAL', 'BDS', 'QZS', 'IRN', 'GLO', 'UTC')

    def __init__(self, week: int = 0, tow: float = 0.0, time_sys: str = 'GPS'):
        """
        Initialize GNSS time

        Parameters:
        -----------
        week : int
            Week number
        tow : float
            Time of week in seconds
        time_sys : str
            Time system ('GPS', 'GAL', 'BDS', 'QZS', 'IRN', 'GLO', 'UTC')
        """
        self.week = int(week)
        self.tow = float(tow)
        self.time_sys = time_sys.upper()

        if self.time_sys not in self.VALID_SYSTEMS:
            raise ValueError(f"Invalid time system: {time_sys}. Must be one of {list(self.VALID_SYSTEMS)}")

        # Normalize TOW to [0, 604800)
        if not 0.0 <= self.tow < SECONDS_IN_WEEK:
            weeks = math.floor(self.tow / SECONDS_IN_WEEK)
            self.week += weeks
            self.tow -= weeks * SECONDS_IN_WEEK

    @staticmethod
    def _reference_mjd(time_sys: str) -> int:
        return MJD_BDT0 if time_sys.upper() == 'BDS' else MJD_GPST0

    @classmethod
    def from_calendar(cls, year: int, month: int, day: int, hour: int = 0,
                      minute: int = 0, second: float = 0.0,
                      time_sys: str = 'GPS') -> 'GNSSTime':
        """Create GNSSTime from a calendar date and time of day"""
        mjd = date(int(year), int(month), int(day)).toordinal() - _MJD_EPOCH.toordinal()
        days = mjd - cls._reference_mjd(time_sys)
        seconds = days * SECONDS_IN_DAY + hour * 3600.0 + minute * 60.0 + second
        week = math.floor(seconds / SECONDS_IN_WEEK)
        return cls(week, seconds - week * SECONDS_IN_WEEK, time_sys)

    @classmethod
    def from_datetime(cls, dt: datetime, time_sys: str = 'GPS') -> 'GNSSTime':
        """Create GNSSTime from datetime object"""
        second = dt.second + dt.microsecond * 1e-6
        return cls.from_calendar(dt.year, dt.month, dt.day, dt.hour, dt.minute,
                                 second, time_sys)

    @classmethod
    def from_mjd(cls, mjd: float, time_sys: str = 'GPS') -> 'GNSSTime':
        """Create GNSSTime from Modified Julian Day"""
        seconds = (mjd - cls._reference_mjd(time_sys)) * SECONDS_IN_DAY
        week = math.floor(seconds / SECONDS_IN_WEEK)
        return cls(week, seconds - week * SECONDS_IN_WEEK, time_sys)

    def to_datetime(self) -> datetime:
        """Convert to datetime object"""
        ref = BDT0 if self.time_sys == 'BDS' else GPST0
        return datetime(*ref) + timedelta(weeks=self.week, seconds=self.tow)

    def total_seconds(self) -> float:
        """Seconds since the reference epoch of the time scale"""
        return self.week * SECONDS_IN_WEEK + self.tow

    @property
    def mjd(self) -> int:
        """Integer Modified Julian Day of the calendar day holding this instant"""
        return self._reference_mjd(self.time_sys) + int(self.week * 7 + self.tow // SECONDS_IN_DAY)

    @property
    def sod(self) -> float:
        """Seconds of day"""
        return self.tow % SECONDS_IN_DAY

    def to_mjd(self) -> float:
        """Convert to fractional Modified Julian Day"""
        return self.mjd + self.sod / SECONDS_IN_DAY

    def add_seconds(self, seconds: float) -> 'GNSSTime':
        """Add seconds to time"""
        return GNSSTime(self.week, self.tow + seconds, self.time_sys)

    def _check_system(self, other: 'GNSSTime'):
        if self.time_sys != other.time_sys:
            raise ValueError(f"Cannot mix time systems: {self.time_sys} and {other.time_sys}")

    def __add__(self, seconds: float) -> 'GNSSTime':
        """Add seconds using + operator"""
        if isinstance(seconds, (int, float)):
            return self.add_seconds(seconds)
        raise TypeError(f"Cannot add {type(seconds)} to GNSSTime")

    def __sub__(self, other: Union['GNSSTime', float]) -> Union[float, 'GNSSTime']:
        """Subtract time or seconds"""
        if isinstance(other, GNSSTime):
            self._check_system(other)
            return (self.week - other.week) * SECONDS_IN_WEEK + (self.tow - other.tow)
        elif isinstance(other, (int, float)):
            return self.add_seconds(-other)
        raise TypeError(f"Cannot subtract {type(other)} from GNSSTime")

    def __lt__(self, other: 'GNSSTime') -> bool:
        if not isinstance(other, GNSSTime):
            return NotImplemented
        self._check_system(other)
        return (self.week, self.tow) < (other.week, other.tow)

    def __le__(self, other: 'GNSSTime') -> bool:
        if not isinstance(other, GNSSTime):
            return NotImplemented
        self._check_system(other)
        return (self.week, self.tow) <= (other.week, other.tow)

    def __gt__(self, other: 'GNSSTime') -> bool:
        if not isinstance(other, GNSSTime):
            return NotImplemented
        self._check_system(other)
        return (self.week, self.tow) > (other.week, other.tow)

    def __ge__(self, other: 'GNSSTime') -> bool:
        if not isinstance(other, GNSSTime):
            return NotImplemented
        self._check_system(other)
        return (self.week, self.tow) >= (other.week, other.tow)

    def __eq__(self, other: 'GNSSTime') -> bool:
        if not isinstance(other, GNSSTime):
            return NotImplemented
        return self.time_sys == other.time_sys and self.week == other.week and abs(self.tow - other.tow) < 1e-9

    def __hash__(self):
        return hash((self.time_sys, self.week, round(self.tow, 6)))

    def __str__(self):
        return f"{self.time_sys} Week: {self.week}, TOW: {self.tow:.3f}"

    def __repr__(self):
        return f"GNSSTime({self.week}, {self.tow}, '{self.time_sys}')"

    def copy(self) -> 'GNSSTime':
        """Create a copy of this time instance"""
        return GNSSTime(self.week, self.tow, self.time_sys)


def wrap_week(dt: float) -> float:
    """Fold a time difference into [-302400, 302400] seconds.

    Seconds of week wrap at 604800, so a raw difference across a week
    boundary is off by a full week.
    """
    if dt > HALF_WEEK:
        dt -= SECONDS_IN_WEEK
    elif dt < -HALF_WEEK:
        dt += SECONDS_IN_WEEK
    return dt


def timediff(t1: Union[GNSSTime, float], t2: Union[GNSSTime, float]) -> float:
    """Time difference t1 - t2 in seconds

    Two GNSSTime instances are differenced exactly; plain seconds of week
    are differenced with the half-week wrap.
    """
    if isinstance(t1, GNSSTime) and isinstance(t2, GNSSTime):
        return t1 - t2
    return wrap_week(float(t1) - float(t2))

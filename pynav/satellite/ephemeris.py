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

"""Ephemeris selection and validation"""

import logging
from typing import Iterable, Optional

from ..core.constants import *
from ..core.data_structures import KEPLER_SYSTEMS, NavDataFrame
from ..core.time import GNSSTime

__all__ = [
    'reference_time', 'max_age', 'is_record_valid', 'select_record',
    'EphemerisStore',
]

logger = logging.getLogger(__name__)


def reference_time(frame: NavDataFrame) -> GNSSTime:
    """Epoch a record is centred on: toe for Keplerian systems, toc otherwise"""
    if frame.system in KEPLER_SYSTEMS:
        return frame.gps_toe2date()
    return frame.toc


def max_age(frame: NavDataFrame) -> float:
    """
    Maximum |t - reference| for which a record may be used.

    Parameters
    ----------
    frame : NavDataFrame
        Navigation record

    Returns
    -------
    float
        Validity half-window in seconds

    Notes
    -----
    System-specific validity periods:
    - GPS/QZSS: 2 hours
    - Galileo: 3 hours
    - BeiDou: 6 hours
    - GLONASS: 30 minutes
    - SBAS: 6 minutes
    - Other systems: 1 hour default

    A positive GPS fit interval overrides the system period with half the
    fit interval. QZSS carries only a fit interval flag and keeps 2 hours.
    """
    sys = frame.system
    if sys == SYS_GPS:
        max_dt = 7200.0   # 2 hours
        fit = frame.message.fit
        if fit > 0:
            max_dt = fit * 3600.0 / 2.0
    elif sys == SYS_QZS:
        # QZSS broadcasts a fit interval flag, not hours
        max_dt = 7200.0
    elif sys == SYS_GAL:
        max_dt = 10800.0  # 3 hours
    elif sys == SYS_BDS:
        max_dt = 21600.0  # 6 hours
    elif sys == SYS_GLO:
        max_dt = 1800.0   # 30 minutes
    elif sys == SYS_SBS:
        max_dt = 360.0
    else:
        max_dt = 3600.0   # 1 hour default
    return max_dt


def is_record_valid(frame: NavDataFrame, t: GNSSTime) -> bool:
    """
    Check if a record is healthy and within its validity window at ``t``.

    ``t`` must be in the record's time scale (UTC for GLONASS).

    Examples
    --------
    >>> if is_record_valid(frame, t):
    ...     pos, dts = frame.state_and_clock(t)
    """
    if frame.message.svh != 0:
        return False
    return abs(t - reference_time(frame)) <= max_age(frame)


def select_record(frames: Iterable[NavDataFrame], system: int, prn: int,
                  t: GNSSTime) -> Optional[NavDataFrame]:
    """
    Select best record for a satellite at a given time

    Parameters:
    -----------
    frames : iterable of NavDataFrame
        Candidate records
    system : int
        Satellite system
    prn : int
        PRN
    t : GNSSTime
        Time of interest in the system's time scale

    Returns:
    --------
    NavDataFrame or None
        Valid record closest to ``t``, or None if not found
    """
    best = None
    min_dt = float('inf')

    for frame in frames:
        if frame.system != system or frame.prn != prn:
            continue
        if not is_record_valid(frame, t):
            continue

        dt = abs(t - reference_time(frame))
        if dt < min_dt:
            min_dt = dt
            best = frame

    return best


class EphemerisStore:
    """
    Keep navigation records per satellite and hand out the best one.

    Attributes
    ----------
    records : dict
        (system, prn) -> list of NavDataFrame sorted by time of clock
    max_age : float
        Age beyond which ``clean`` drops records (seconds, default: 7200)

    Examples
    --------
    >>> store = EphemerisStore()
    >>> for frame in NavigationRnx('brdc0010.20p'):
    ...     store.add(frame)
    >>> frame = store.get(SYS_GPS, 1, t)
    """

    def __init__(self, max_age: float = 7200.0):
        self.records = {}
        self.max_age = max_age

    def __len__(self):
        return sum(len(v) for v in self.records.values())

    def add(self, frame: NavDataFrame) -> bool:
        """
        Add a record; returns False when an identical epoch is already stored.
        """
        key = (frame.system, frame.prn)
        stored = self.records.setdefault(key, [])

        for existing in stored:
            if existing.toc == frame.toc:
                logger.debug(f"Duplicate record {frame.sat_id} {frame.toc} skipped")
                return False

        stored.append(frame)
        stored.sort(key=lambda f: f.toc.total_seconds())
        return True

    def extend(self, frames: Iterable[NavDataFrame]) -> int:
        """Add several records, returning how many were new"""
        return sum(1 for frame in frames if self.add(frame))

    def get(self, system: int, prn: int, t: GNSSTime) -> Optional[NavDataFrame]:
        """Valid record closest to ``t`` for one satellite, or None"""
        return select_record(self.records.get((system, prn), ()), system, prn, t)

    def satellites(self) -> list:
        """Stored (system, prn) pairs"""
        return sorted(self.records.keys())

    def clean(self, current_time: GNSSTime) -> None:
        """
        Remove records whose time of clock is more than ``max_age`` from
        ``current_time``.

        Ages are taken on the calendar, so the few seconds between time
        scales are ignored and one call cleans every system.
        """
        now = current_time.to_datetime()
        for key in list(self.records.keys()):
            self.records[key] = [
                frame for frame in self.records[key]
                if abs((now - frame.toc.to_datetime()).total_seconds()) < self.max_age
            ]
            if not self.records[key]:
                del self.records[key]

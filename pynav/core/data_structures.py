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

"""Core data structures for broadcast navigation records

A RINEX 3 navigation record is decoded into a :class:`NavDataFrame`: the
satellite system, PRN, time of clock and a fixed array of 31 raw values whose
meaning depends on the system. Named access goes through the typed message
classes below, one per record shape, so that a GLONASS velocity can never be
read as a GPS eccentricity.
"""

from dataclasses import dataclass, field
from typing import ClassVar, Optional

import numpy as np

from .config import DEFAULT_CONFIG, PropagationConfig
from .constants import *
from .time import GNSSTime

KEPLER_SYSTEMS = (SYS_GPS, SYS_GAL, SYS_BDS, SYS_QZS, SYS_IRN)


@dataclass(frozen=True)
class KeplerOrbit:
    """Clock polynomial and Keplerian elements shared by GPS-like messages.

    Attributes
    ----------
    af0, af1, af2 : float
        SV clock bias (s), drift (s/s) and drift rate (s/s^2)
    iode : float
        Issue of data (IODE for GPS/QZSS, IODEC for IRNSS, IODnav for
        Galileo, AODE for BeiDou)
    crs, crc : float
        Radius harmonic corrections (m)
    cuc, cus, cic, cis : float
        Argument of latitude and inclination harmonic corrections (rad)
    deln : float
        Mean motion difference (rad/s)
    m0, omg0, i0, omg : float
        Mean anomaly, longitude of ascending node, inclination and
        argument of perigee at reference time (rad)
    e : float
        Eccentricity
    sqrt_a : float
        Square root of the semi-major axis (sqrt(m))
    toe : float
        Time of ephemeris (seconds of week)
    omgd, idot : float
        Rate of right ascension and of inclination (rad/s)
    week : float
        Week number to go with toe
    """
    af0: float
    af1: float
    af2: float
    iode: float
    crs: float
    deln: float
    m0: float
    cuc: float
    e: float
    cus: float
    sqrt_a: float
    toe: float
    cic: float
    omg0: float
    cis: float
    i0: float
    crc: float
    omg: float
    omgd: float
    idot: float
    week: float

    _SLOTS: ClassVar[dict] = {
        'af0': 0, 'af1': 1, 'af2': 2,
        'iode': 3, 'crs': 4, 'deln': 5, 'm0': 6,
        'cuc': 7, 'e': 8, 'cus': 9, 'sqrt_a': 10,
        'toe': 11, 'cic': 12, 'omg0': 13, 'cis': 14,
        'i0': 15, 'crc': 16, 'omg': 17, 'omgd': 18,
        'idot': 19, 'week': 21,
    }

    @classmethod
    def from_slots(cls, slots) -> 'KeplerOrbit':
        """Build the message from a raw navigation field array"""
        return cls(**{name: float(slots[idx]) for name, idx in cls._SLOTS.items()})

    @property
    def A(self) -> float:
        """Semi-major axis (m)"""
        return self.sqrt_a * self.sqrt_a


@dataclass(frozen=True)
class GpsNavMessage(KeplerOrbit):
    """GPS, QZSS and IRNSS navigation message"""
    l2_codes: float
    l2p_flag: float
    sva: float       # SV accuracy / URA (m)
    svh: float       # SV health
    tgd: float       # group delay (s)
    iodc: float
    ttr: float       # transmission time of message (s of week)
    fit: float       # fit interval (h), QZSS: fit interval flag

    _SLOTS: ClassVar[dict] = {
        **KeplerOrbit._SLOTS,
        'l2_codes': 20, 'l2p_flag': 22, 'sva': 23, 'svh': 24,
        'tgd': 25, 'iodc': 26, 'ttr': 27, 'fit': 28,
    }


@dataclass(frozen=True)
class GalileoNavMessage(KeplerOrbit):
    """Galileo I/NAV or F/NAV navigation message"""
    data_sources: float
    sisa: float      # signal in space accuracy (m)
    svh: float
    bgd_e5a: float   # BGD E5a/E1 (s)
    bgd_e5b: float   # BGD E5b/E1 (s)
    ttr: float

    _SLOTS: ClassVar[dict] = {
        **KeplerOrbit._SLOTS,
        'data_sources': 20, 'sisa': 23, 'svh': 24,
        'bgd_e5a': 25, 'bgd_e5b': 26, 'ttr': 27,
    }


@dataclass(frozen=True)
class BeidouNavMessage(KeplerOrbit):
    """BeiDou D1/D2 navigation message (BDT time scale)"""
    sva: float
    svh: float       # SatH1
    tgd1: float      # B1/B3 (s)
    tgd2: float      # B2/B3 (s)
    ttr: float
    aodc: float

    _SLOTS: ClassVar[dict] = {
        **KeplerOrbit._SLOTS,
        'sva': 23, 'svh': 24, 'tgd1': 25, 'tgd2': 26, 'ttr': 27, 'aodc': 28,
    }


@dataclass(frozen=True)
class StateVectorMessage:
    """Broadcast Cartesian state (GLONASS, SBAS); km, km/s, km/s^2"""
    pos: tuple
    vel: tuple
    acc: tuple
    svh: float

    _XYZ: ClassVar[tuple] = (3, 7, 11)

    @classmethod
    def _state_slots(cls, slots) -> dict:
        return {
            'pos': tuple(float(slots[i]) for i in cls._XYZ),
            'vel': tuple(float(slots[i + 1]) for i in cls._XYZ),
            'acc': tuple(float(slots[i + 2]) for i in cls._XYZ),
            'svh': float(slots[6]),
        }

    @property
    def position_m(self) -> np.ndarray:
        return np.array(self.pos) * 1e3

    @property
    def velocity_m(self) -> np.ndarray:
        return np.array(self.vel) * 1e3

    @property
    def acceleration_m(self) -> np.ndarray:
        return np.array(self.acc) * 1e3


@dataclass(frozen=True)
class GlonassNavMessage(StateVectorMessage):
    """GLONASS navigation message (PZ-90, UTC time of clock)

    ``clock_bias`` is -TauN as written in RINEX, ``gamn`` is +GammaN.
    The last four attributes are only present from RINEX 3.05 on.
    """
    clock_bias: float
    gamn: float
    tk: float            # message frame time (s of UTC week)
    freq_num: float
    age: float           # age of operational information (days)
    status: float
    dtaun: float         # L1/L2 group delay difference (s)
    urai: float
    health_flags: float

    @classmethod
    def from_slots(cls, slots) -> 'GlonassNavMessage':
        return cls(
            clock_bias=float(slots[0]), gamn=float(slots[1]), tk=float(slots[2]),
            freq_num=float(slots[10]), age=float(slots[14]),
            status=float(slots[15]), dtaun=float(slots[16]),
            urai=float(slots[17]), health_flags=float(slots[18]),
            **cls._state_slots(slots),
        )


@dataclass(frozen=True)
class SbasNavMessage(StateVectorMessage):
    """SBAS navigation message (GPS time of clock)"""
    af0: float
    af1: float
    ttr: float
    ura: float
    iodn: float

    @classmethod
    def from_slots(cls, slots) -> 'SbasNavMessage':
        return cls(
            af0=float(slots[0]), af1=float(slots[1]), ttr=float(slots[2]),
            ura=float(slots[10]), iodn=float(slots[14]),
            **cls._state_slots(slots),
        )


_MESSAGE_TYPES = {
    SYS_GPS: GpsNavMessage,
    SYS_QZS: GpsNavMessage,
    SYS_IRN: GpsNavMessage,
    SYS_GAL: GalileoNavMessage,
    SYS_BDS: BeidouNavMessage,
    SYS_GLO: GlonassNavMessage,
    SYS_SBS: SbasNavMessage,
}


def _day_aligned_seconds(t: GNSSTime, ref: GNSSTime) -> tuple[float, float]:
    """Seconds of day of t and ref, with t shifted by whole days onto ref's day"""
    if t.time_sys != ref.time_sys:
        raise ValueError(f"Epoch in {t.time_sys} cannot be referenced to {ref.time_sys}")
    return t.sod + (t.mjd - ref.mjd) * SECONDS_IN_DAY, ref.sod


@dataclass
class NavDataFrame:
    """One decoded broadcast navigation record.

    Attributes
    ----------
    system : int
        Satellite system ID (SYS_GPS, SYS_GLO, ...); selects how ``fields``
        is interpreted
    prn : int
        PRN within the system, as written in RINEX 3
    toc : GNSSTime
        Time of clock in the native time scale of the system (UTC for GLONASS)
    fields : np.ndarray
        The 31 raw values of the record in file order, zero-filled

    Notes
    -----
    ``fields``/``data()`` is the raw escape hatch; prefer ``message`` for
    named access.
    """
    system: int = SYS_NONE
    prn: int = 0
    toc: Optional[GNSSTime] = None
    fields: np.ndarray = field(default_factory=lambda: np.zeros(NAV_SLOTS))

    def __post_init__(self):
        self.fields = np.asarray(self.fields, dtype=float)
        if self.fields.shape != (NAV_SLOTS,):
            raise ValueError(f"Navigation record needs {NAV_SLOTS} fields, got shape {self.fields.shape}")

    def data(self, idx: int) -> float:
        """Raw field by position (0..30)"""
        if not 0 <= idx < NAV_SLOTS:
            raise IndexError(f"Navigation field index out of range: {idx}")
        return float(self.fields[idx])

    @property
    def sat_id(self) -> str:
        """Satellite identifier as in RINEX 3, e.g. 'G01'"""
        return f"{sys2char(self.system)}{self.prn:02d}"

    @property
    def message(self):
        """Typed view of ``fields`` for this record's system"""
        msg_type = _MESSAGE_TYPES.get(self.system)
        if msg_type is None:
            raise TypeError(f"No navigation message layout for system {self.system}")
        return msg_type.from_slots(self.fields)

    def set_toc(self, toc: GNSSTime) -> None:
        """Override the time of clock"""
        if not isinstance(toc, GNSSTime):
            raise TypeError(f"Time of clock must be GNSSTime, not {type(toc)}")
        self.toc = toc

    def _kepler_message(self) -> KeplerOrbit:
        if self.system not in KEPLER_SYSTEMS:
            raise TypeError(f"{self.sat_id}: record does not carry Keplerian elements")
        return self.message

    def _glonass_message(self) -> GlonassNavMessage:
        if self.system != SYS_GLO:
            raise TypeError(f"{self.sat_id}: not a GLONASS record")
        return self.message

    def _sbas_message(self) -> SbasNavMessage:
        if self.system != SYS_SBS:
            raise TypeError(f"{self.sat_id}: not an SBAS record")
        return self.message

    # ---------------------------------------------------------------------
    # GPS-like (Keplerian) systems
    # ---------------------------------------------------------------------

    def gps_toe2date(self) -> GNSSTime:
        """Time of ephemeris as an instant in the record's time scale"""
        eph = self._kepler_message()
        return GNSSTime(int(eph.week), float(int(eph.toe)), sys2time_sys(self.system))

    def gps_ecef(self, toe_sec: float, t_sec: float,
                 config: PropagationConfig = DEFAULT_CONFIG) -> tuple[np.ndarray, float]:
        """SV antenna phase center position (ECEF, m) and eccentric anomaly.

        ``toe_sec`` and ``t_sec`` must be in the same time scale and referenced
        to the same day or week; see ``gps_state_and_clock`` for calendar
        epochs.
        """
        from ..satellite.satellite_position import kepler_ecef
        return kepler_ecef(self._kepler_message(), toe_sec, t_sec,
                           sys=self.system, prn=self.prn, config=config)

    def gps_dtsv(self, dt: float, ek: Optional[float] = None,
                 config: PropagationConfig = DEFAULT_CONFIG) -> float:
        """SV clock correction (s) for dt = t - toc seconds"""
        from ..satellite.clock import kepler_clock
        return kepler_clock(self._kepler_message(), dt, ek=ek, sys=self.system, config=config)

    def gps_dtsv_at(self, epoch: GNSSTime,
                    config: PropagationConfig = DEFAULT_CONFIG) -> float:
        """SV clock correction (s) at a calendar epoch"""
        return self.gps_dtsv(epoch - self.toc, config=config)

    def gps_state_and_clock(self, t: GNSSTime,
                            config: PropagationConfig = DEFAULT_CONFIG) -> tuple[np.ndarray, float]:
        """Position (m) and clock correction (s) at a calendar epoch"""
        toe = self.gps_toe2date()
        t_sec, toe_sec = _day_aligned_seconds(t, toe)
        pos, _ = self.gps_ecef(toe_sec, t_sec, config=config)
        return pos, self.gps_dtsv(t - self.toc, config=config)

    # ---------------------------------------------------------------------
    # GLONASS
    # ---------------------------------------------------------------------

    def glo_tb2date(self, to_mt: bool = True) -> GNSSTime:
        """Ephemeris reference time tb, in Moscow time when ``to_mt``"""
        self._glonass_message()
        return self.toc.add_seconds(MOSCOW_OFFSET) if to_mt else self.toc.copy()

    def glo_ecef(self, t_sod: float, tb_sod: float,
                 config: PropagationConfig = DEFAULT_CONFIG) -> np.ndarray:
        """SV center of mass position (PZ-90, m); seconds of day in Moscow time"""
        from ..satellite.satellite_position import glonass_ecef
        return glonass_ecef(self._glonass_message(), t_sod, tb_sod, config=config)

    def glo_ecef2(self, t_sod: float, tb_sod: float,
                  config: PropagationConfig = DEFAULT_CONFIG) -> tuple[np.ndarray, np.ndarray]:
        """SV center of mass position (m) and velocity (m/s) in PZ-90"""
        from ..satellite.satellite_position import glonass_ecef2
        return glonass_ecef2(self._glonass_message(), t_sod, tb_sod, config=config)

    def glo_dtsv(self, t_sod: float, tb_sod: float) -> float:
        """SV clock correction (s)"""
        from ..satellite.clock import glonass_clock
        return glonass_clock(self._glonass_message(), t_sod, tb_sod)

    def glo_state_and_clock(self, t: GNSSTime,
                            config: PropagationConfig = DEFAULT_CONFIG) -> tuple[np.ndarray, float]:
        """Position (PZ-90, m) and clock correction (s) at a UTC epoch"""
        tb = self.glo_tb2date(to_mt=True)
        t_sec, tb_sec = _day_aligned_seconds(t.add_seconds(MOSCOW_OFFSET), tb)
        pos = self.glo_ecef(t_sec, tb_sec, config=config)
        return pos, self.glo_dtsv(t_sec, tb_sec)

    # ---------------------------------------------------------------------
    # SBAS
    # ---------------------------------------------------------------------

    def sbas_ecef(self, t_sec: float, toc_sec: float) -> np.ndarray:
        """SV position (m) extrapolated from the broadcast state"""
        from ..satellite.satellite_position import sbas_ecef
        return sbas_ecef(self._sbas_message(), t_sec, toc_sec)

    def sbas_state_and_clock(self, t: GNSSTime) -> tuple[np.ndarray, float]:
        from ..satellite.clock import sbas_clock
        seph = self._sbas_message()
        t_sec, toc_sec = _day_aligned_seconds(t, self.toc)
        return self.sbas_ecef(t_sec, toc_sec), sbas_clock(seph, t_sec - toc_sec)

    def state_and_clock(self, t: GNSSTime,
                        config: PropagationConfig = DEFAULT_CONFIG) -> tuple[np.ndarray, float]:
        """Position (m) and clock correction (s) at ``t`` for any supported system"""
        if self.system in KEPLER_SYSTEMS:
            return self.gps_state_and_clock(t, config=config)
        elif self.system == SYS_GLO:
            return self.glo_state_and_clock(t, config=config)
        elif self.system == SYS_SBS:
            return self.sbas_state_and_clock(t)
        raise TypeError(f"No propagation model for system {self.system}")

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

"""GNSS Constants and System Parameters"""

import numpy as np

# Physical Constants
CLIGHT = 299792458.0  # speed of light (m/s)

# GNSS System IDs
SYS_NONE = 0x00   # invalid / unknown
SYS_GPS = 0x01    # GPS
SYS_GLO = 0x02    # GLONASS
SYS_GAL = 0x04    # Galileo
SYS_BDS = 0x08    # BeiDou
SYS_QZS = 0x10    # QZSS
SYS_SBS = 0x20    # SBAS
SYS_IRN = 0x40    # IRNSS
SYS_ALL = 0xFF    # All systems (mixed navigation file)

# Time System Parameters
GPST0 = [1980, 1, 6, 0, 0, 0]  # GPS time reference epoch
BDT0 = [2006, 1, 1, 0, 0, 0]   # BeiDou time reference epoch
MJD_GPST0 = 44244              # MJD of GPST0
MJD_BDT0 = 53736               # MJD of BDT0

SECONDS_IN_DAY = 86400.0
SECONDS_IN_WEEK = 604800.0
HALF_WEEK = 302400.0
MOSCOW_OFFSET = 10800.0        # GLONASS time = UTC + 3h

# Earth Parameters (WGS84)
RE_WGS84 = 6378137.0           # earth semimajor axis (m)
OMGE = 7.2921151467E-5         # earth angular velocity (rad/s)

# System-specific gravitational constants
MU_GPS = 3.9860050E14          # GPS gravitational constant
MU_GAL = 3.986004418E14        # Galileo gravitational constant
MU_GLO = 3.9860044E14          # GLONASS gravitational constant
MU_BDS = 3.986004418E14        # BeiDou gravitational constant

# System-specific earth angular velocities
OMGE_GAL = 7.2921151467E-5     # Galileo earth angular velocity
OMGE_GLO = 7.292115E-5         # GLONASS earth angular velocity
OMGE_BDS = 7.292115E-5         # BeiDou earth angular velocity

# GLONASS-specific parameters (PZ-90)
J2_GLO = 1.0826257E-3          # GLONASS second zonal harmonic
RE_GLO = 6378136.0             # GLONASS earth radius

# Relativistic clock correction constant for GPS (s/sqrt(m))
F_CLOCK_GPS = -4.442807633E-10

# BeiDou GEO satellites are tilted by -5 deg before the earth rotation
BDS_GEO_INCLINATION = np.deg2rad(-5.0)

# Navigation record layout
NAV_SLOTS = 31                 # size of the raw navigation field array
RNX_FIELD_WIDTH = 19           # width of a RINEX 3 navigation float field

# Number of data lines following the epoch line of a RINEX 3 navigation record
NAV_DATA_LINES = {
    SYS_GPS: 7,
    SYS_GAL: 7,
    SYS_BDS: 7,
    SYS_QZS: 7,
    SYS_IRN: 7,
    SYS_GLO: 3,
    SYS_SBS: 3,
}

# Unit conversions
R2D = 180.0 / np.pi            # radians to degrees
D2R = np.pi / 180.0            # degrees to radians


def sys2char(sys):
    """Convert system ID to character"""
    syschar = {
        SYS_GPS: 'G',
        SYS_GLO: 'R',
        SYS_GAL: 'E',
        SYS_BDS: 'C',
        SYS_QZS: 'J',
        SYS_SBS: 'S',
        SYS_IRN: 'I',
        SYS_ALL: 'M',
    }
    return syschar.get(sys, ' ')


def char2sys(c):
    """Convert character to system ID"""
    charmap = {
        'G': SYS_GPS,
        'R': SYS_GLO,
        'E': SYS_GAL,
        'C': SYS_BDS,
        'J': SYS_QZS,
        'S': SYS_SBS,
        'I': SYS_IRN,
        'M': SYS_ALL,
    }
    return charmap.get(c.upper(), SYS_NONE)


def sys2time_sys(sys):
    """Native time scale of a satellite system's time of clock.

    GLONASS records are referenced to UTC; SBAS records to GPS time.
    """
    timesys = {
        SYS_GPS: 'GPS',
        SYS_GLO: 'UTC',
        SYS_GAL: 'GAL',
        SYS_BDS: 'BDS',
        SYS_QZS: 'QZS',
        SYS_SBS: 'GPS',
        SYS_IRN: 'IRN',
    }
    return timesys.get(sys, 'GPS')


def sys2mu_omega(sys):
    """Gravitational constant and earth rotation rate used by a system's ICD"""
    if sys == SYS_GAL:
        return MU_GAL, OMGE_GAL
    elif sys == SYS_BDS:
        return MU_BDS, OMGE_BDS
    elif sys == SYS_GLO:
        return MU_GLO, OMGE_GLO
    return MU_GPS, OMGE


def relativistic_f(sys):
    """Relativistic clock correction constant F = -2*sqrt(mu)/c^2"""
    if sys in (SYS_GPS, SYS_QZS, SYS_IRN):
        return F_CLOCK_GPS
    mu, _ = sys2mu_omega(sys)
    return -2.0 * np.sqrt(mu) / CLIGHT**2


def is_beidou_geo(prn):
    """BeiDou GEO satellites: C01-C05, C59-C63"""
    return prn <= 5 or prn >= 59

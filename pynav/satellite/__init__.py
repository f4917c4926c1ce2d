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

"""
Satellite computation module.

Satellite position and clock correction from decoded broadcast navigation
records for GPS, QZSS, IRNSS, Galileo, BeiDou, GLONASS and SBAS.

Modules
-------
satellite_position : module
    Kepler solve, Keplerian orbit to ECEF (with the BeiDou GEO branch),
    GLONASS short-arc extrapolation and SBAS state extrapolation
clock : module
    Clock polynomial and relativistic corrections
ephemeris : module
    Record validity windows and selection (EphemerisStore)

Usage Examples
--------------
    >>> from pynav.satellite import kepler_ecef
    >>> pos, ek = kepler_ecef(frame.message, toe_sec, t_sec, sys=frame.system)

    >>> from pynav.satellite import EphemerisStore
    >>> store = EphemerisStore()
    >>> store.extend(read_nav('brdc0010.20p'))
    >>> frame = store.get(SYS_GPS, 1, t)

Notes
-----
Time systems: positions and clocks are computed in the time scale of the
record (GPS, GAL, BDS, QZS, IRN; UTC/Moscow time for GLONASS).

Coordinate systems: WGS-84 ECEF for the Keplerian systems and SBAS,
PZ-90 for GLONASS.
"""

from .clock import *
from .ephemeris import *
from .satellite_position import *

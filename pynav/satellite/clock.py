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

"""Satellite clock correction from broadcast navigation messages"""

import math
from typing import Optional

from ..core.config import DEFAULT_CONFIG, PropagationConfig
from ..core.constants import *
from ..core.data_structures import (GlonassNavMessage, KeplerOrbit,
                                    SbasNavMessage)
from ..core.time import wrap_week
from .satellite_position import check_orbit, solve_kepler

__all__ = ['kepler_clock', 'glonass_clock', 'sbas_clock']


def kepler_clock(eph: KeplerOrbit, dt: float, ek: Optional[float] = None,
                 sys: int = SYS_GPS, config: PropagationConfig = DEFAULT_CONFIG) -> float:
    """
    Compute satellite clock correction for GPS-like systems

    Parameters:
    -----------
    eph : KeplerOrbit
        Navigation message with clock polynomial and orbit
    dt : float
        Time from clock reference epoch t - toc (s)
    ek : float, optional
        Eccentric anomaly from the position computation. When omitted it is
        solved from M0 + n*dt
    sys : int
        Satellite system, selects the relativistic constant
    config : PropagationConfig
        Kepler tolerance and iteration cap

    Returns:
    --------
    float
        SV clock correction (s), polynomial plus relativistic term

    Raises:
    -------
    InvalidOrbitError
        If E has to be solved and the elements are not a closed orbit
    """
    dt = wrap_week(dt)

    if ek is None:
        check_orbit(eph)
        mu, _ = sys2mu_omega(sys)
        A = eph.A
        n = math.sqrt(mu / (A * A * A)) + eph.deln
        ek = solve_kepler(eph.m0 + n * dt, eph.e, config.kepler_tol, config.kepler_max_iter)

    # Relativistic correction
    dtr = relativistic_f(sys) * eph.e * eph.sqrt_a * math.sin(ek)

    return eph.af0 + eph.af1 * dt + eph.af2 * dt**2 + dtr


def glonass_clock(geph: GlonassNavMessage, t_sod: float, tb_sod: float) -> float:
    """
    Compute GLONASS satellite clock correction

    -TauN + GammaN*(t - tb). The relativistic effect is already contained
    in the broadcast clock parameters.
    """
    return geph.clock_bias + geph.gamn * (t_sod - tb_sod)


def sbas_clock(seph: SbasNavMessage, dt: float) -> float:
    """Compute SBAS satellite clock correction for dt = t - toc (s)"""
    return seph.af0 + seph.af1 * wrap_week(dt)

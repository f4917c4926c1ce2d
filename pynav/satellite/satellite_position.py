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

"""Satellite position computation from broadcast navigation messages"""

import logging
import math

import numpy as np

from ..core.config import DEFAULT_CONFIG, PropagationConfig
from ..core.constants import *
from ..core.data_structures import (GlonassNavMessage, KeplerOrbit,
                                    SbasNavMessage)
from ..core.exceptions import (GlonassArcError, InvalidOrbitError,
                               KeplerConvergenceError)
from ..core.time import wrap_week

__all__ = [
    'solve_kepler', 'check_orbit', 'kepler_ecef', 'glonass_ecef', 'glonass_ecef2',
    'sbas_ecef',
]

logger = logging.getLogger(__name__)


def solve_kepler(mk: float, e: float, tol: float = DEFAULT_CONFIG.kepler_tol,
                 max_iter: int = DEFAULT_CONFIG.kepler_max_iter) -> float:
    """
    Solve Kepler's equation E = M + e*sin(E) by fixed-point iteration

    Parameters:
    -----------
    mk : float
        Mean anomaly (rad)
    e : float
        Eccentricity
    tol : float
        Limit on |E(i+1) - E(i)| (rad)
    max_iter : int
        Iteration cap

    Returns:
    --------
    float
        Eccentric anomaly (rad)

    Raises:
    -------
    KeplerConvergenceError
        If the iterates have not settled after ``max_iter`` iterations
        (this includes non-finite input)
    """
    E = mk
    Ek = 0.0
    for _ in range(max_iter):
        if abs(E - Ek) <= tol:
            return E
        Ek = E
        E = math.sin(Ek) * e + mk
    if abs(E - Ek) <= tol:
        return E
    logger.debug(f"Kepler solve failed: M={mk}, e={e}, {max_iter} iterations")
    raise KeplerConvergenceError(mk, e, max_iter)


def check_orbit(eph: KeplerOrbit) -> None:
    """Raise InvalidOrbitError unless sqrt(A) > 0 and 0 <= e < 1"""
    if not eph.sqrt_a > 0.0:
        raise InvalidOrbitError(f"Semi-major axis root must be positive, got {eph.sqrt_a}")
    if not 0.0 <= eph.e < 1.0:
        raise InvalidOrbitError(f"Eccentricity must be in [0, 1), got {eph.e}")


def kepler_ecef(eph: KeplerOrbit, toe_sec: float, t_sec: float, sys: int = SYS_GPS,
                prn: int = 0, config: PropagationConfig = DEFAULT_CONFIG) -> tuple[np.ndarray, float]:
    """
    Compute SV antenna phase center position from Keplerian elements

    Follows the user algorithm for ephemeris determination of IS-GPS-200.

    Parameters:
    -----------
    eph : KeplerOrbit
        GPS, QZSS, IRNSS, Galileo or BeiDou navigation message
    toe_sec : float
        Time of ephemeris (seconds of day or week)
    t_sec : float
        Epoch, referenced like ``toe_sec`` in the same time scale
    sys : int
        Satellite system, selects mu and the earth rotation rate
    prn : int
        PRN, used to detect BeiDou GEO satellites
    config : PropagationConfig
        Kepler tolerance and iteration cap

    Returns:
    --------
    pos : np.ndarray
        ECEF position (m), shape (3,)
    Ek : float
        Eccentric anomaly from the iterative solve (rad); can be passed to
        the clock correction to avoid solving again

    Raises:
    -------
    InvalidOrbitError
        If sqrt(A) is not positive or e is outside [0, 1)
    KeplerConvergenceError
        If Kepler's equation does not converge

    Notes:
    ------
    tk is folded into [-302400, 302400] s, so week rollover between toe_sec
    and t_sec is transparent.

    After the true anomaly is computed, the eccentric anomaly is recomputed
    from it through acos, which loses the sign of the iterative solution.
    Only cos(E) is used afterwards, so the radius is unaffected.
    """
    check_orbit(eph)
    mu, omge = sys2mu_omega(sys)
    e = eph.e
    A = eph.A
    n0 = math.sqrt(mu / (A * A * A))    # computed mean motion (rad/s)
    tk = wrap_week(t_sec - toe_sec)
    n = n0 + eph.deln                   # corrected mean motion
    Mk = eph.m0 + n * tk                # mean anomaly

    Ek = solve_kepler(Mk, e, config.kepler_tol, config.kepler_max_iter)

    sinE = math.sin(Ek)
    cosE = math.cos(Ek)
    ecosEm1 = 1.0 - e * cosE
    vk = math.atan2(math.sqrt(1.0 - e * e) * sinE / ecosEm1, (cosE - e) / ecosEm1)  # true anomaly
    cosVk = math.cos(vk)
    Ek_v = math.acos((e + cosVk) / (1.0 + e * cosVk))

    # Second harmonic perturbations
    Fk = vk + eph.omg                   # argument of latitude
    sin2F = math.sin(2.0 * Fk)
    cos2F = math.cos(2.0 * Fk)
    duk = eph.cus * sin2F + eph.cuc * cos2F
    drk = eph.crs * sin2F + eph.crc * cos2F
    dik = eph.cis * sin2F + eph.cic * cos2F

    uk = Fk + duk
    rk = A * (1.0 - e * math.cos(Ek_v)) + drk
    ik = eph.i0 + dik + eph.idot * tk

    # Positions in orbital plane
    xk = rk * math.cos(uk)
    yk = rk * math.sin(uk)

    if sys == SYS_BDS and is_beidou_geo(prn):
        omega_k = eph.omg0 + eph.omgd * tk - omge * eph.toe
        pos = _orbit_plane_to_frame(xk, yk, ik, omega_k)
        return _beidou_geo_rotation(pos, omge * tk), Ek

    omega_k = eph.omg0 + (eph.omgd - omge) * tk - omge * eph.toe
    return _orbit_plane_to_frame(xk, yk, ik, omega_k), Ek


def _orbit_plane_to_frame(xk: float, yk: float, ik: float, omega_k: float) -> np.ndarray:
    sinOk = math.sin(omega_k)
    cosOk = math.cos(omega_k)
    cosik = math.cos(ik)
    return np.array([
        xk * cosOk - yk * sinOk * cosik,
        xk * sinOk + yk * cosOk * cosik,
        yk * math.sin(ik),
    ])


def _beidou_geo_rotation(rs: np.ndarray, angle: float) -> np.ndarray:
    """Rotate a BeiDou GEO position by -5 deg about X, then by ``angle`` about Z"""
    sin5 = math.sin(BDS_GEO_INCLINATION)
    cos5 = math.cos(BDS_GEO_INCLINATION)
    sino = math.sin(angle)
    coso = math.cos(angle)
    xg, yg, zg = rs
    return np.array([
        xg * coso + yg * sino * cos5 + zg * sino * sin5,
        -xg * sino + yg * coso * cos5 + zg * coso * sin5,
        -yg * sin5 + zg * cos5,
    ])


def _glonass_gravity(r: np.ndarray) -> np.ndarray:
    """Central term plus J2 of the PZ-90 field (m/s^2)"""
    r2 = np.dot(r, r)
    r3 = r2 * math.sqrt(r2)
    a = 1.5 * J2_GLO * MU_GLO * RE_GLO**2 / r2 / r3
    b = 5.0 * r[2]**2 / r2
    c = -MU_GLO / r3 - a * (1.0 - b)
    return np.array([c * r[0], c * r[1], (c - 2.0 * a) * r[2]])


def _glonass_arc(geph: GlonassNavMessage, t_sod: float, tb_sod: float,
                 config: PropagationConfig) -> float:
    tau = t_sod - tb_sod
    if not math.isfinite(tau) or abs(tau) > config.glonass_max_arc:
        raise GlonassArcError(
            f"GLONASS extrapolation over {tau} s exceeds {config.glonass_max_arc} s")
    r0 = np.array(geph.pos)
    if not np.all(np.isfinite(r0)) or not np.any(r0):
        raise GlonassArcError(f"Invalid GLONASS broadcast position: {geph.pos}")
    return tau


def _extrapolate(r: np.ndarray, v: np.ndarray, tau: float, step: float, accel) -> tuple[np.ndarray, np.ndarray]:
    """Chain of second order short-arc extrapolations, each at most ``step`` long"""
    nstep = max(1, math.ceil(abs(tau) / step))
    h = tau / nstep
    a = accel(r, v)
    for _ in range(nstep):
        r_next = r + v * h + 0.5 * a * h * h
        a_next = accel(r_next, v + a * h)
        v = v + 0.5 * (a + a_next) * h
        r = r_next
        a = accel(r, v)
    return r, v


def glonass_ecef(geph: GlonassNavMessage, t_sod: float, tb_sod: float,
                 config: PropagationConfig = DEFAULT_CONFIG) -> np.ndarray:
    """
    Compute GLONASS SV position by short-arc extrapolation in an inertial frame

    The broadcast PZ-90 state at tb is taken into an inertial frame that
    coincides with PZ-90 at tb, extrapolated under the central field, J2 and
    the broadcast luni-solar acceleration, and rotated back to PZ-90 at t.

    Parameters:
    -----------
    geph : GlonassNavMessage
        GLONASS navigation message
    t_sod : float
        Epoch, seconds of day in Moscow time
    tb_sod : float
        Reference time tb, seconds of day in Moscow time, same day as t_sod
    config : PropagationConfig
        Step length and maximum arc

    Returns:
    --------
    np.ndarray
        PZ-90 position (m), shape (3,)
    """
    tau = _glonass_arc(geph, t_sod, tb_sod, config)
    r0 = geph.position_m
    if tau == 0.0:
        return r0

    v0 = geph.velocity_m
    acc = geph.acceleration_m
    w = np.array([0.0, 0.0, OMGE_GLO])
    vi = v0 + np.cross(w, r0)

    ri, _ = _extrapolate(r0, vi, tau, config.glonass_step,
                         lambda r, v: _glonass_gravity(r) + acc)

    theta = OMGE_GLO * tau
    cost = math.cos(theta)
    sint = math.sin(theta)
    return np.array([
        cost * ri[0] + sint * ri[1],
        -sint * ri[0] + cost * ri[1],
        ri[2],
    ])


def glonass_ecef2(geph: GlonassNavMessage, t_sod: float, tb_sod: float,
                  config: PropagationConfig = DEFAULT_CONFIG) -> tuple[np.ndarray, np.ndarray]:
    """
    Compute GLONASS SV position and velocity directly in PZ-90

    Same extrapolation as ``glonass_ecef`` written in the rotating frame,
    with centrifugal and Coriolis accelerations.

    Returns:
    --------
    pos : np.ndarray
        PZ-90 position (m)
    vel : np.ndarray
        PZ-90 velocity (m/s)
    """
    tau = _glonass_arc(geph, t_sod, tb_sod, config)
    r0 = geph.position_m
    v0 = geph.velocity_m
    if tau == 0.0:
        return r0, v0

    acc = geph.acceleration_m
    omg2 = OMGE_GLO**2

    def accel(r, v):
        a = _glonass_gravity(r) + acc
        a[0] += omg2 * r[0] + 2.0 * OMGE_GLO * v[1]
        a[1] += omg2 * r[1] - 2.0 * OMGE_GLO * v[0]
        return a

    return _extrapolate(r0, v0, tau, config.glonass_step, accel)


def sbas_ecef(seph: SbasNavMessage, t_sec: float, toc_sec: float) -> np.ndarray:
    """
    Compute SBAS SV position from the broadcast state

    SBAS satellites are geostationary and broadcast position, velocity and
    acceleration; the position is a quadratic in the time from toc.

    Returns:
    --------
    np.ndarray
        ECEF position (m), shape (3,)
    """
    t = wrap_week(t_sec - toc_sec)
    return seph.position_m + seph.velocity_m * t + 0.5 * seph.acceleration_m * t * t

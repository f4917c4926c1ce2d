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

"""Propagation configuration"""

from dataclasses import dataclass, fields


@dataclass(frozen=True)
class PropagationConfig:
    """Numerical settings for orbit and clock propagation.

    Attributes
    ----------
    kepler_tol : float
        Convergence limit on successive eccentric anomaly iterates (rad)
    kepler_max_iter : int
        Iteration cap for the fixed-point Kepler solve
    glonass_step : float
        Length of one GLONASS short-arc extrapolation step (s)
    glonass_max_arc : float
        Largest |t - tb| accepted for GLONASS extrapolation (s)
    """
    kepler_tol: float = 1e-14
    kepler_max_iter: int = 1000
    glonass_step: float = 10.0
    glonass_max_arc: float = 1800.0

    def __post_init__(self):
        if self.kepler_tol <= 0.0:
            raise ValueError(f"kepler_tol must be positive: {self.kepler_tol}")
        if self.kepler_max_iter < 1:
            raise ValueError(f"kepler_max_iter must be >= 1: {self.kepler_max_iter}")
        if self.glonass_step <= 0.0:
            raise ValueError(f"glonass_step must be positive: {self.glonass_step}")
        if self.glonass_max_arc <= 0.0:
            raise ValueError(f"glonass_max_arc must be positive: {self.glonass_max_arc}")

    @classmethod
    def from_dict(cls, config: dict) -> 'PropagationConfig':
        """Build a configuration from a dictionary, ignoring unknown keys

        Example config:
        {
            'kepler_tol': 1e-14,
            'kepler_max_iter': 1000,
            'glonass_step': 10.0,
            'glonass_max_arc': 1800.0
        }
        """
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in config.items() if k in known})


DEFAULT_CONFIG = PropagationConfig()

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

"""Exceptions raised by navigation decoding and propagation"""


class NavigationError(Exception):
    """Base class for all pynav errors"""


class PropagationError(NavigationError):
    """Satellite state or clock could not be computed from a record"""


class KeplerConvergenceError(PropagationError, RuntimeError):
    """Kepler's equation did not settle within the iteration cap"""

    def __init__(self, mean_anomaly, eccentricity, iterations):
        self.mean_anomaly = mean_anomaly
        self.eccentricity = eccentricity
        self.iterations = iterations
        super().__init__(
            f"Kepler equation did not converge after {iterations} iterations "
            f"(M={mean_anomaly}, e={eccentricity})"
        )


class InvalidOrbitError(PropagationError, ValueError):
    """Keplerian elements cannot describe a closed orbit"""


class GlonassArcError(PropagationError, ValueError):
    """GLONASS extrapolation requested outside its usable range"""


class RinexError(NavigationError):
    """Base class for RINEX navigation file errors"""


class RinexHeaderError(RinexError, ValueError):
    """Header missing, unsupported or not terminated"""


class MalformedRecordError(RinexError, ValueError):
    """Navigation record could not be decoded"""

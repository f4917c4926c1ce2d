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

"""Core navigation module.

- **Constants**: system identifiers, RINEX system characters, gravitational
  constants and earth rotation rates per system, record layout sizes
- **Configuration**: ``PropagationConfig`` with the numerical settings for
  Kepler solving and GLONASS extrapolation
- **Exceptions**: errors raised while decoding or propagating records
- **Time**: ``GNSSTime`` week/time-of-week instants per time scale
- **Data Structures**: ``NavDataFrame`` records and the typed per-system
  navigation messages

Example Usage:
    >>> from pynav.core import *
    >>>
    >>> t = GNSSTime.from_calendar(2020, 1, 1, 0, 15, 0)
    >>> frame = NavDataFrame(system=SYS_GPS, prn=1, toc=t)
    >>> frame.message.sqrt_a
    0.0
"""

from .config import *
from .constants import *
from .data_structures import *
from .exceptions import *
from .time import *

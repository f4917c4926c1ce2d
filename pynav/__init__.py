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
pynav - RINEX 3 broadcast navigation decoding and satellite propagation

Reads RINEX 3.x navigation files and computes satellite positions and clock
corrections for GPS, QZSS, IRNSS, Galileo, BeiDou, GLONASS and SBAS from the
broadcast records.
"""

__version__ = "1.0.0"
__author__ = "PyINS Development Team"
__title__ = "pynav"
__description__ = "RINEX 3 navigation reader and broadcast orbit propagation"

from .core import *
from .satellite import *
from .io import *

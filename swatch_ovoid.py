# -*- coding: utf-8 -*-
"""
Swatch: Munsell renotation and colorimetry for surface colours
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Linear vs. radial interpolation around a renotation ovoid.

Between two grid hues on the same value and chroma, the renotation points of
some hue sectors lie on a curve that is well approximated by a straight
chord (linear interpolation in x, y), others on an arc around the neutral
point (radial interpolation in angle and radius).  The decision depends on
value, chroma and ASTM hue.  The intervals below were read off plots of the
renotation data (Centore, 2012) and are used as published.
"""

import math
from enum import Enum
from typing import Final, Mapping, Tuple
from types import MappingProxyType

from swatch_status import InvalidSpecificationError

__all__ = [
    "InterpolationStyle",
    "RADIAL_INTERVALS",
    "OvoidInterpolationPolicy",
]

_INF: Final[float] = math.inf

Interval = Tuple[float, float]
# (lowest chroma, highest chroma, open ASTM-hue intervals that use radial interpolation)
ChromaBand = Tuple[float, float, Tuple[Interval, ...]]


class InterpolationStyle(Enum):
    LINEAR = "linear"
    RADIAL = "radial"
    ON_GRID = "on_grid"


RADIAL_INTERVALS: Final[Mapping[int, Tuple[ChromaBand, ...]]] = MappingProxyType({
    1: (
        (2, 2, ((15.0, 30.0), (60.0, 85.0))),
        (4, 4, ((12.5, 27.5), (57.5, 80.0))),
        (6, 6, ((55.0, 80.0),)),
        (8, 8, ((67.5, 77.5),)),
        (10, _INF, ((72.5, 77.5),)),
    ),
    2: (
        (2, 2, ((15.0, 27.5), (77.5, 80.0))),
        (4, 4, ((12.5, 30.0), (62.5, 80.0))),
        (6, 6, ((7.5, 22.5), (62.5, 80.0))),
        (8, 8, ((7.5, 15.0), (60.0, 80.0))),
        (10, _INF, ((65.0, 77.5),)),
    ),
    3: (
        (2, 2, ((10.0, 37.5), (65.0, 85.0))),
        (4, 4, ((5.0, 37.5), (55.0, 72.5))),
        (6, 10, ((7.5, 37.5), (57.5, 82.5))),
        (12, _INF, ((7.5, 42.5), (57.5, 80.0))),
    ),
    4: (
        (2, 4, ((7.5, 42.5), (57.5, 85.0))),
        (6, 8, ((7.5, 40.0), (57.5, 82.5))),
        (10, _INF, ((7.5, 40.0), (57.5, 80.0))),
    ),
    5: (
        (2, 2, ((5.0, 37.5), (55.0, 85.0))),
        (4, 8, ((2.5, 42.5), (55.0, 85.0))),
        (10, _INF, ((2.5, 42.5), (55.0, 82.5))),
    ),
    6: (
        (2, 4, ((5.0, 37.5), (55.0, 87.5))),
        (6, 6, ((5.0, 42.5), (57.5, 87.5))),
        (8, 10, ((5.0, 42.5), (60.0, 85.0))),
        (12, 14, ((5.0, 42.5), (60.0, 82.5))),
        (16, _INF, ((5.0, 42.5), (60.0, 80.0))),
    ),
    7: (
        (2, 6, ((5.0, 42.5), (60.0, 85.0))),
        (8, 8, ((5.0, 42.5), (60.0, 82.5))),
        (10, 10, ((30.0, 42.5), (5.0, 25.0), (60.0, 82.5))),
        (12, 12, ((30.0, 42.5), (7.5, 27.5), (80.0, 82.5))),
        (14, _INF, ((32.5, 40.0), (7.5, 15.0), (80.0, 82.5))),
    ),
    8: (
        (2, 12, ((5.0, 40.0), (60.0, 85.0))),
        (14, _INF, ((32.5, 40.0), (5.0, 15.0), (60.0, 85.0))),
    ),
    9: (
        (2, 4, ((5.0, 40.0), (55.0, 80.0))),
        (6, 14, ((5.0, 42.5),)),
        (16, _INF, ((35.0, 42.5),)),
    ),
})


class OvoidInterpolationPolicy:
    """
    Decide how to interpolate hue on the ovoid of a given value and chroma.

    Args:
        intervals: Per-value chroma bands of radial ASTM-hue intervals.
            Defaults to :data:`RADIAL_INTERVALS`.
    """
    __slots__ = ("_intervals",)

    def __init__(self, intervals: Mapping[int, Tuple[ChromaBand, ...]] = RADIAL_INTERVALS) -> None:
        self._intervals = intervals

    def style(self, value: float, chroma: float, astm_hue: float) -> InterpolationStyle:
        """
        Interpolation style for a point between two grid hues.

        Args:
            value: Munsell value, an integer 1..10 (within 0.001).
            chroma: Chroma, 0 or an even number >= 2 (within 0.001).
            astm_hue: Hue on the ASTM scale [0, 100).

        Raises:
            InvalidSpecificationError: ``value`` or ``chroma`` is off the grid.
        """
        if chroma == 0:
            return InterpolationStyle.ON_GRID
        if value < 1 or value > 10 or abs(value - round(value)) > 0.001:
            raise InvalidSpecificationError(
                f"Ovoid value must be an integer between 1 and 10, got {value}"
            )
        v = int(round(value))
        if v == 10:
            return InterpolationStyle.ON_GRID
        if chroma < 2 or abs(2.0 * (chroma / 2.0 - round(chroma / 2.0))) > 0.001:
            raise InvalidSpecificationError(
                f"Ovoid chroma must be a positive even number, got {chroma}"
            )
        c = 2 * round(chroma / 2.0)
        if math.fmod(astm_hue, 2.5) == 0.0:
            return InterpolationStyle.ON_GRID

        for low, high, intervals in self._intervals[v]:
            if low <= c <= high:
                if any(lo < astm_hue < hi for lo, hi in intervals):
                    return InterpolationStyle.RADIAL
                return InterpolationStyle.LINEAR
        return InterpolationStyle.LINEAR

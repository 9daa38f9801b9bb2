# -*- coding: utf-8 -*-
"""
Swatch: Munsell renotation and colorimetry for surface colours
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Munsell -> xyY
==============
Interpolation of the renotation grid at arbitrary Munsell specifications.

The conversion nests three one-dimensional interpolations:
    1. hue, around the ovoid of one integer value and one even chroma,
       either along the chord or along the arc about the grey point;
    2. chroma, between the two bracketing even chromas;
    3. value, between the two bracketing integer values, linear in
       luminance factor.

Chroma 0 collapses the ovoid to the Illuminant C white point, and value 10
is the ideal white.  Any grid point without data makes the whole conversion
report DATA_UNAVAILABLE.
"""

from __future__ import annotations

import math
from typing import Final, Optional, Tuple, Union

from swatch_colorengine import RAD2DEG, DEG2RAD, XY_WHITE_C
from swatch_luminance import (
    DEFAULT_LUMINANCE_FUNCTION,
    LuminanceFunction,
    munsell_value_to_luminance_factor,
)
from swatch_notation import (
    Chromaticity,
    HueFamily,
    MunsellSpec,
    bounding_renotation_hues,
    munsell_hue_to_astm_hue,
    munsell_hue_to_chromaticity_angle,
    parse_munsell,
    renotation_hue_index,
)
from swatch_ovoid import InterpolationStyle, OvoidInterpolationPolicy
from swatch_renotation import MAX_TABLE_CHROMA, RenotationTable
from swatch_status import ConversionResult, ConversionStatus, InvalidSpecificationError

__all__ = ["MunsellToChromaticity"]

# Values this close to an integer are treated as that integer.
VALUE_SNAP_TOLERANCE: Final[float] = 1e-3

XY = Tuple[float, float]


def _lerp(x0: float, x1: float, y0: float, y1: float, x: float) -> float:
    return y0 + (y1 - y0) * (x - x0) / (x1 - x0)


class MunsellToChromaticity:
    """
    Forward conversion of Munsell specifications to CIE xyY (Illuminant C).

    Args:
        table: Renotation grids.
        policy: Linear/radial decision for hue interpolation.
        luminance: Value -> luminance factor relation for Y.

    Example:
        >>> forward = MunsellToChromaticity(load_renotation_table())
        >>> forward.convert("5R 4/14").unwrap()
        Chromaticity(x=0.5..., y=0.3..., Y=12.0...)
    """
    __slots__ = ("_table", "_policy", "_luminance")

    def __init__(self, table: RenotationTable,
                 policy: Optional[OvoidInterpolationPolicy] = None,
                 luminance: LuminanceFunction = DEFAULT_LUMINANCE_FUNCTION) -> None:
        self._table = table
        self._policy = policy if policy is not None else OvoidInterpolationPolicy()
        self._luminance = luminance

    @property
    def table(self) -> RenotationTable:
        return self._table

    @property
    def luminance(self) -> LuminanceFunction:
        return self._luminance

    def luminance_factor(self, value: float) -> float:
        return float(munsell_value_to_luminance_factor(value, self._luminance))

    # -- public API --------------------------------------------------------
    def convert(self, spec: Union[MunsellSpec, str]) -> ConversionResult[Chromaticity]:
        """
        xyY of a Munsell specification.

        Returns:
            SUCCESS with the chromaticity, INVALID_SPECIFICATION for a
            string that does not parse, or DATA_UNAVAILABLE when the
            specification lies beyond the extrapolated renotation data
            (including any chromatic colour with value below 1).
        """
        if isinstance(spec, str):
            try:
                spec = parse_munsell(spec)
            except InvalidSpecificationError as exc:
                return ConversionResult.failure(ConversionStatus.INVALID_SPECIFICATION, str(exc))
        Y = self.luminance_factor(spec.value)

        if spec.is_neutral:
            return ConversionResult.success(Chromaticity(XY_WHITE_C[0], XY_WHITE_C[1], Y))

        if spec.value < 1.0:
            return ConversionResult.failure(
                ConversionStatus.DATA_UNAVAILABLE,
                f"{spec}: no renotation data below value 1",
            )

        value = spec.value
        if abs(value - round(value)) < VALUE_SNAP_TOLERANCE:
            v_minus = v_plus = int(round(value))
        else:
            v_minus = int(math.floor(value))
            v_plus = v_minus + 1

        xy_minus = self._xy_for_integer_value(spec.hue, spec.family, v_minus, spec.chroma)  # type: ignore[arg-type]
        if xy_minus is None:
            return self._unavailable(spec)
        if v_plus == v_minus:
            return ConversionResult.success(Chromaticity(xy_minus[0], xy_minus[1], Y))

        if v_plus == 10:
            xy_plus: Optional[XY] = XY_WHITE_C
        else:
            xy_plus = self._xy_for_integer_value(spec.hue, spec.family, v_plus, spec.chroma)  # type: ignore[arg-type]
        if xy_plus is None:
            return self._unavailable(spec)

        y_minus = self.luminance_factor(v_minus)
        y_plus = self.luminance_factor(v_plus)
        x = _lerp(y_minus, y_plus, xy_minus[0], xy_plus[0], Y)
        y = _lerp(y_minus, y_plus, xy_minus[1], xy_plus[1], Y)
        return ConversionResult.success(Chromaticity(x, y, Y))

    def convert_or_raise(self, spec: Union[MunsellSpec, str]) -> Chromaticity:
        """Like :meth:`convert` but raises the error matching a failed status."""
        return self.convert(spec).unwrap()

    @staticmethod
    def _unavailable(spec: MunsellSpec) -> ConversionResult[Chromaticity]:
        return ConversionResult.failure(
            ConversionStatus.DATA_UNAVAILABLE,
            f"{spec} beyond gamut of renotation data",
        )

    # -- integer value -----------------------------------------------------
    def _xy_for_integer_value(self, hue: float, family: HueFamily, value: int,
                              chroma: float) -> Optional[XY]:
        """xy at an integer value 1..10, interpolating between even chromas."""
        if value == 10:
            return XY_WHITE_C
        if chroma == 0:
            grey = self._table.neutral(value - 1)
            return grey.x, grey.y

        if chroma % 2 == 0:
            c_minus = c_plus = int(chroma)
        else:
            c_minus = 2 * int(math.floor(chroma / 2.0))
            c_plus = c_minus + 2

        if c_minus == 0:
            xy_minus: Optional[XY] = XY_WHITE_C
        else:
            xy_minus = self._xy_on_ovoid(hue, family, value, c_minus)
        if xy_minus is None:
            return None
        if c_plus == c_minus:
            return xy_minus

        xy_plus = self._xy_on_ovoid(hue, family, value, c_plus)
        if xy_plus is None:
            return None
        return (_lerp(c_minus, c_plus, xy_minus[0], xy_plus[0], chroma),
                _lerp(c_minus, c_plus, xy_minus[1], xy_plus[1], chroma))

    # -- ovoid -------------------------------------------------------------
    def _grid_xy(self, hue: float, family: HueFamily, value: int, chroma: int) -> Optional[XY]:
        if chroma > MAX_TABLE_CHROMA:
            return None
        point = self._table.lookup(renotation_hue_index(hue, family), value - 1, chroma // 2)
        if point is None:
            return None
        return point.x, point.y

    def _xy_on_ovoid(self, hue: float, family: HueFamily, value: int, chroma: int) -> Optional[XY]:
        """
        xy of an arbitrary hue at an integer value (1..9) and even chroma.

        Off-grid hues are interpolated between the clockwise and
        counter-clockwise grid neighbours, with hue angles measured about
        the grey of the same value.
        """
        (cw_hue, cw_family), (ccw_hue, ccw_family) = bounding_renotation_hues(hue, family)
        if (cw_hue, cw_family) == (ccw_hue, ccw_family):
            return self._grid_xy(cw_hue, cw_family, value, chroma)

        grey = self._table.neutral(value - 1)
        plus = self._grid_xy(ccw_hue, ccw_family, value, chroma)
        minus = self._grid_xy(cw_hue, cw_family, value, chroma)
        if plus is None or minus is None:
            return None

        th_plus = (math.atan2(plus[1] - grey.y, plus[0] - grey.x) * RAD2DEG) % 360.0
        r_plus = math.hypot(plus[0] - grey.x, plus[1] - grey.y)
        th_minus = (math.atan2(minus[1] - grey.y, minus[0] - grey.x) * RAD2DEG) % 360.0
        r_minus = math.hypot(minus[0] - grey.x, minus[1] - grey.y)

        lower = munsell_hue_to_chromaticity_angle(cw_hue, cw_family)
        angle = munsell_hue_to_chromaticity_angle(hue, family)
        upper = munsell_hue_to_chromaticity_angle(ccw_hue, ccw_family)

        if th_minus - th_plus > 180.0:
            th_plus += 360.0
        if lower == 0.0:
            lower = 360.0
        # Hue interval straddles the 0/360 seam.
        if lower > upper:
            if lower > angle:
                lower -= 360.0
            else:
                lower -= 360.0
                angle -= 360.0

        style = self._policy.style(value, chroma, munsell_hue_to_astm_hue(hue, family))
        if style is InterpolationStyle.RADIAL:
            theta = _lerp(lower, upper, th_minus, th_plus, angle) * DEG2RAD
            r = _lerp(lower, upper, r_minus, r_plus, angle)
            return r * math.cos(theta) + grey.x, r * math.sin(theta) + grey.y
        return (_lerp(lower, upper, minus[0], plus[0], angle),
                _lerp(lower, upper, minus[1], plus[1], angle))

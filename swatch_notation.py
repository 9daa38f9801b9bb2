# -*- coding: utf-8 -*-
"""
Swatch: Munsell renotation and colorimetry for surface colours
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Munsell Notation
================
Data model and hue arithmetic for Munsell specifications.

Hue families carry the ColorLab integer codes (B=1 ... PB=10).  Going up in
code walks the hue circle from B through BG, G, GY, Y, YR, R, RP, P to PB and
then wraps back to B.  A hue number of 0 is the same hue as 10 in the next
family (0YR == 10R), and is always normalised to the latter.

Three hue scales are used across the package:

- Munsell: (hue number in (0, 10], family).
- ASTM: one real in [0, 100), 0 at 10RP, 10 at 10R, 20 at 10YR, ...
- Chromaticity-diagram angle: degrees in [0, 360), a piecewise-linear
  stretch of the ASTM scale that roughly tracks the hue angle of the
  renotation points around Illuminant C.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import IntEnum
from typing import Final, Iterable, List, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from swatch_status import InvalidSpecificationError

__all__ = [
    "HueFamily",
    "MunsellSpec",
    "Chromaticity",
    "STANDARD_HUE_PREFIXES",
    "parse_munsell",
    "format_munsell",
    "munsell_hue_to_astm_hue",
    "astm_hue_to_munsell_hue",
    "bounding_renotation_hues",
    "renotation_hue_index",
    "renotation_hue_from_index",
    "munsell_hue_to_chromaticity_angle",
    "chromaticity_angle_to_munsell_hue",
    "approximate_munsell_from_lch",
    "check_if_neutral",
    "order_munsell_specs",
    "spec_from_astm_hue",
]

STANDARD_HUE_PREFIXES: Final[Tuple[float, ...]] = (2.5, 5.0, 7.5, 10.0)

# Grid hues closer than this are treated as exactly on the grid.
_GRID_HUE_TOLERANCE: Final[float] = 1e-9

# Breakpoints of the ASTM-scale (shifted by half a family) -> hue angle map.
_ANGLE_BREAKS: Final[np.ndarray] = np.array([0.0, 2.0, 3.0, 4.0, 5.0, 6.0, 8.0, 9.0, 10.0])
_ANGLE_VALUES: Final[np.ndarray] = np.array([0.0, 45.0, 70.0, 135.0, 160.0, 225.0, 255.0, 315.0, 360.0])


class HueFamily(IntEnum):
    """Munsell hue families with their ColorLab codes."""
    B = 1
    BG = 2
    G = 3
    GY = 4
    Y = 5
    YR = 6
    R = 7
    RP = 8
    P = 9
    PB = 10

    @property
    def next(self) -> "HueFamily":
        """Family following this one in code order (PB wraps to B)."""
        return HueFamily(self.value % 10 + 1)

    @property
    def previous(self) -> "HueFamily":
        return HueFamily((self.value - 2) % 10 + 1)

    @classmethod
    def from_letters(cls, letters: str) -> "HueFamily":
        try:
            return cls[letters.strip().upper()]
        except KeyError:
            raise InvalidSpecificationError(
                f"{letters!r} is not a valid hue letter designator"
            ) from None


# Renotation ordering of families: index 0 holds 2.5R .. 10R.
_RENOTATION_ORDER: Final[Tuple[HueFamily, ...]] = (
    HueFamily.R, HueFamily.YR, HueFamily.Y, HueFamily.GY, HueFamily.G,
    HueFamily.BG, HueFamily.B, HueFamily.PB, HueFamily.P, HueFamily.RP,
)


class Chromaticity(NamedTuple):
    """CIE xyY under Illuminant C / 2 deg, Y on the 0..100 scale."""
    x: float
    y: float
    Y: float


@dataclass(slots=True, frozen=True)
class MunsellSpec:
    """
    A Munsell specification, chromatic or neutral.

    Neutral colours have ``hue`` and ``family`` set to ``None`` and chroma 0.
    Any specification given with chroma 0 is normalised to neutral, and a hue
    number of 0 is moved to 10 of the next family.

    Raises:
        InvalidSpecificationError: value outside [0, 10], negative chroma,
            hue number outside [0, 10], or chroma > 0 without a family.
    """
    value: float
    hue: Optional[float] = None
    family: Optional[HueFamily] = None
    chroma: float = 0.0

    def __post_init__(self) -> None:
        value = float(self.value)
        chroma = float(self.chroma)
        if not (0.0 <= value <= 10.0) or math.isnan(value):
            raise InvalidSpecificationError(f"Munsell value must lie in [0, 10], got {value}")
        if chroma < 0.0 or math.isnan(chroma):
            raise InvalidSpecificationError(f"Munsell chroma must be non-negative, got {chroma}")
        object.__setattr__(self, "value", value)
        object.__setattr__(self, "chroma", chroma)

        if chroma == 0.0:
            object.__setattr__(self, "hue", None)
            object.__setattr__(self, "family", None)
            return

        if self.hue is None or self.family is None:
            raise InvalidSpecificationError(
                f"Chromatic specification (chroma {chroma}) needs a hue and a family"
            )
        hue = float(self.hue)
        if not (0.0 <= hue <= 10.0) or math.isnan(hue):
            raise InvalidSpecificationError(f"Hue number must lie in [0, 10], got {hue}")
        try:
            family = HueFamily(self.family)
        except ValueError:
            raise InvalidSpecificationError(
                f"Hue family code must be an integer in 1..10, got {self.family!r}"
            ) from None
        if hue == 0.0:
            hue, family = 10.0, family.next
        object.__setattr__(self, "hue", hue)
        object.__setattr__(self, "family", family)

    # -- constructors ------------------------------------------------------
    @classmethod
    def neutral(cls, value: float) -> "MunsellSpec":
        return cls(value)

    @classmethod
    def chromatic(cls, hue: float, family: HueFamily | str, value: float,
                  chroma: float) -> "MunsellSpec":
        if isinstance(family, str):
            family = HueFamily.from_letters(family)
        return cls(value, hue, family, chroma)

    @classmethod
    def parse(cls, text: str) -> "MunsellSpec":
        return parse_munsell(text)

    # -- views -------------------------------------------------------------
    @property
    def is_neutral(self) -> bool:
        return self.family is None

    @property
    def astm_hue(self) -> Optional[float]:
        if self.family is None:
            return None
        return munsell_hue_to_astm_hue(self.hue, self.family)  # type: ignore[arg-type]

    @property
    def hue_string(self) -> str:
        if self.family is None:
            return "N"
        return f"{_trim(self.hue)}{self.family.name}"  # type: ignore[arg-type]

    def with_value(self, value: float) -> "MunsellSpec":
        return MunsellSpec(value, self.hue, self.family, self.chroma)

    def with_chroma(self, chroma: float) -> "MunsellSpec":
        if self.family is None:
            return MunsellSpec(self.value)
        return MunsellSpec(self.value, self.hue, self.family, chroma)

    def as_colorlab(self) -> Tuple[float, ...]:
        """ColorLab vector: ``(V,)`` for neutrals, ``(H, V, C, code)`` otherwise."""
        if self.family is None:
            return (self.value,)
        return (self.hue, self.value, self.chroma, float(int(self.family)))  # type: ignore[return-value]

    def __str__(self) -> str:
        return format_munsell(self)


def _trim(x: float) -> str:
    """Shortest plain rendering of a number: 5.0 -> '5', 2.5 -> '2.5'."""
    return f"{x:.4f}".rstrip("0").rstrip(".")


# =============================================================================
# 1. PARSING & FORMATTING
# =============================================================================

_NUMBER: Final[str] = r"(?:\d+(?:\.\d*)?|\.\d+)"
_NEUTRAL_RE = re.compile(rf"^N(?P<value>{_NUMBER})(?:/(?:0*(?:\.0*)?)?)?$")
_CHROMATIC_RE = re.compile(
    rf"^(?P<hue>{_NUMBER})(?P<family>BG|GY|YR|RP|PB|B|G|Y|R|P)"
    rf"(?P<value>{_NUMBER})/(?P<chroma>{_NUMBER})$"
)


def parse_munsell(text: str) -> MunsellSpec:
    """
    Parse a Munsell notation string such as ``"5R 4/6"``, ``"2.5pb 5/8.5"``
    or ``"N 5.5"``.

    Case and whitespace are ignored.  A hue number of 0 moves to 10 of the
    next family; chroma 0 yields a neutral.

    Raises:
        InvalidSpecificationError: The string is not a Munsell specification.
    """
    if not isinstance(text, str):
        raise InvalidSpecificationError(f"Expected a string, got {type(text).__name__}")
    compact = re.sub(r"\s+", "", text).upper()

    match = _NEUTRAL_RE.match(compact)
    if match:
        return MunsellSpec(float(match["value"]))

    match = _CHROMATIC_RE.match(compact)
    if not match:
        raise InvalidSpecificationError(f"{text!r} is not a valid Munsell specification")
    return MunsellSpec(
        float(match["value"]),
        float(match["hue"]),
        HueFamily[match["family"]],
        float(match["chroma"]),
    )


def format_munsell(spec: MunsellSpec, hue_decimals: int = 2,
                   value_decimals: int = 2, chroma_decimals: int = 2) -> str:
    """
    Render a specification as ``"5.00R 4.00/6.00"`` or ``"N5.00"``.
    """
    value = f"{spec.value:.{value_decimals}f}"
    if spec.family is None:
        return f"N{value}"
    hue = f"{spec.hue:.{hue_decimals}f}"
    chroma = f"{spec.chroma:.{chroma_decimals}f}"
    return f"{hue}{spec.family.name} {value}/{chroma}"


# =============================================================================
# 2. HUE SCALES
# =============================================================================

def munsell_hue_to_astm_hue(hue: float, family: HueFamily) -> float:
    """ASTM D1535 hue in [0, 100): 10RP -> 0, 10R -> 10, 5YR -> 15, ..."""
    return (10.0 * ((7 - int(family)) % 10) + float(hue)) % 100.0


def astm_hue_to_munsell_hue(astm_hue: float) -> Tuple[float, HueFamily]:
    """Inverse of :func:`munsell_hue_to_astm_hue`; returns ``(hue, family)``."""
    astm = float(astm_hue) % 100.0
    if astm == 0.0:
        return 10.0, HueFamily.RP
    band = math.ceil(astm / 10.0)          # 1..10
    hue = astm - 10.0 * (band - 1)
    return hue, _RENOTATION_ORDER[band - 1]


def _snap_to_grid(astm: float) -> Optional[float]:
    """The grid ASTM hue within tolerance of ``astm``, else ``None``."""
    steps = astm / 2.5
    nearest = round(steps)
    if abs(steps - nearest) * 2.5 < _GRID_HUE_TOLERANCE:
        return (nearest * 2.5) % 100.0
    return None


def bounding_renotation_hues(hue: float, family: HueFamily
                             ) -> Tuple[Tuple[float, HueFamily], Tuple[float, HueFamily]]:
    """
    Standard hues (prefix 2.5, 5, 7.5 or 10) on either side of a hue.

    Returns:
        ``(clockwise, counter_clockwise)``, each a ``(hue, family)`` pair.
        Both are the input hue itself when it lies on the grid.
    """
    astm = munsell_hue_to_astm_hue(hue, family)
    on_grid = _snap_to_grid(astm)
    if on_grid is not None:
        bound = astm_hue_to_munsell_hue(on_grid)
        return bound, bound
    cw = 2.5 * math.floor(astm / 2.5)
    ccw = (cw + 2.5) % 100.0
    return astm_hue_to_munsell_hue(cw), astm_hue_to_munsell_hue(ccw)


def renotation_hue_index(hue: float, family: HueFamily) -> int:
    """
    Row of a grid hue in the renotation arrays (0 = 2.5R ... 39 = 10RP).

    Raises:
        InvalidSpecificationError: ``hue`` is not a standard prefix.
    """
    astm = munsell_hue_to_astm_hue(hue, family)
    on_grid = _snap_to_grid(astm)
    if on_grid is None:
        raise InvalidSpecificationError(
            f"{_trim(hue)}{family.name} is not a standard renotation hue"
        )
    return (int(round(on_grid / 2.5)) - 1) % 40


def renotation_hue_from_index(index: int) -> Tuple[float, HueFamily]:
    """``(hue, family)`` of renotation row ``index``."""
    if not 0 <= index < 40:
        raise IndexError(f"Renotation hue index must be in [0, 40), got {index}")
    return STANDARD_HUE_PREFIXES[index % 4], _RENOTATION_ORDER[index // 4]


def munsell_hue_to_chromaticity_angle(hue: float, family: HueFamily) -> float:
    """Approximate hue angle (degrees) of a Munsell hue on the xy diagram."""
    shifted = (munsell_hue_to_astm_hue(hue, family) / 10.0 - 0.5) % 10.0
    return float(np.interp(shifted, _ANGLE_BREAKS, _ANGLE_VALUES))


def chromaticity_angle_to_munsell_hue(angle: float) -> Tuple[float, HueFamily]:
    """Inverse of :func:`munsell_hue_to_chromaticity_angle`."""
    shifted = float(np.interp(float(angle) % 360.0, _ANGLE_VALUES, _ANGLE_BREAKS))
    return astm_hue_to_munsell_hue((shifted + 0.5) * 10.0)


# =============================================================================
# 3. SPECIFICATION UTILITIES
# =============================================================================

# CIELAB hue-angle bands (36 degrees wide) mapped onto Munsell families.
_LAB_HUE_BANDS: Final[Tuple[Tuple[float, HueFamily], ...]] = (
    (36.0, HueFamily.R), (72.0, HueFamily.YR), (108.0, HueFamily.Y),
    (144.0, HueFamily.GY), (180.0, HueFamily.G), (216.0, HueFamily.BG),
    (252.0, HueFamily.B), (288.0, HueFamily.PB), (324.0, HueFamily.P),
)


def approximate_munsell_from_lch(L: float, C: float, h: float) -> MunsellSpec:
    """
    Rough Munsell estimate from CIELAB lightness, chroma and hue angle.

    Each family spans 36 degrees of CIELAB hue, value is L/10 and chroma is
    C/5.  This only seeds the iterative inverse conversion.
    """
    h = float(h) % 360.0
    family = HueFamily.RP
    if h != 0.0:
        for upper, fam in _LAB_HUE_BANDS:
            if h <= upper:
                family = fam
                break
    hue = (h % 36.0) / 36.0 * 10.0
    if hue == 0.0:
        hue = 10.0
    value = min(max(L / 10.0, 0.0), 10.0)
    return MunsellSpec(value, hue, family, max(C / 5.0, 0.0))


def check_if_neutral(specs: Iterable[MunsellSpec | str]) -> List[bool]:
    """Flag each specification (or notation string) that is a neutral."""
    out = []
    for spec in specs:
        if isinstance(spec, str):
            spec = parse_munsell(spec)
        out.append(spec.is_neutral)
    return out


def order_munsell_specs(specs: Sequence[MunsellSpec]) -> List[MunsellSpec]:
    """
    Sort specifications: neutrals first (by value), then by ASTM hue,
    value and chroma.
    """
    def key(spec: MunsellSpec) -> Tuple[int, float, float, float]:
        if spec.family is None:
            return (0, 0.0, spec.value, 0.0)
        return (1, spec.astm_hue, spec.value, spec.chroma)  # type: ignore[return-value]
    return sorted(specs, key=key)


def spec_from_astm_hue(value: float, chroma: float, astm_hue: float) -> MunsellSpec:
    """Build a specification from value, chroma and an ASTM hue."""
    hue, family = astm_hue_to_munsell_hue(astm_hue)
    return MunsellSpec(value, hue, family, chroma)

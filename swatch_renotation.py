# -*- coding: utf-8 -*-
"""
Swatch: Munsell renotation and colorimetry for surface colours
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Renotation Tables
=================
Grid storage for the 1943 Munsell renotation (Newhall, Nickerson & Judd) and
its extrapolation beyond the real colours.

Layout of the grid arrays, shape (40, 9, 20, 3):
    axis 0  hue row: 0 = 2.5R, 1 = 5R, ... 39 = 10RP (R, YR, Y, GY, G, BG,
            B, PB, P, RP, each with prefixes 2.5, 5, 7.5, 10)
    axis 1  value row: 0..8 for Munsell values 1..9
    axis 2  chroma column: chroma / 2 for even chromas 2..38 (column 0 unused)
    axis 3  (x, y, Y) under Illuminant C / 2 deg, Y relative to MgO = 100

Points without data hold NaN.  The neutral axis lives in a separate (9, 3)
array.  Both the standard ("real") and the extrapolated ("all") tables are
taken from the datasets shipped with ``colour-science``.
"""

from __future__ import annotations

import functools
import math
import re
from os import PathLike
from pathlib import Path
from typing import Any, Final, Iterable, Optional, Tuple, Union

import numpy as np

from swatch_colorengine import XY_WHITE_C
from swatch_luminance import (
    DEFAULT_LUMINANCE_FUNCTION,
    LuminanceFunction,
    munsell_value_to_luminance_factor,
)
from swatch_notation import (
    STANDARD_HUE_PREFIXES,
    Chromaticity,
    HueFamily,
    bounding_renotation_hues,
    renotation_hue_index,
)
from swatch_status import InvalidSpecificationError

__all__ = [
    "GRID_SHAPE",
    "NEUTRAL_LUMINANCE_FACTORS",
    "MAX_TABLE_CHROMA",
    "RenotationRecord",
    "RenotationTable",
    "load_renotation_table",
]

GRID_SHAPE: Final[Tuple[int, int, int, int]] = (40, 9, 20, 3)
MAX_TABLE_CHROMA: Final[int] = 38

# Y of the renotation greys N1 .. N9.
NEUTRAL_LUMINANCE_FACTORS: Final[Tuple[float, ...]] = (
    1.210, 3.126, 6.555, 12.00, 19.77, 30.05, 43.06, 59.10, 78.66,
)

# Integer value / standard prefix matching tolerance.
_GRID_TOLERANCE: Final[float] = 1e-3

_HUE_STRING_RE = re.compile(r"^\s*(?P<hue>\d+(?:\.\d*)?)\s*(?P<family>BG|GY|YR|RP|PB|B|G|Y|R|P)\s*$")

# ((hue string, value, chroma), (x, y, Y))
RenotationRecord = Tuple[Tuple[str, float, float], Any]

PathType = Union[str, "PathLike[str]"]


def _readonly(arr: np.ndarray) -> np.ndarray:
    arr.setflags(write=False)
    return arr


def _grid_from_records(records: Iterable[RenotationRecord]) -> np.ndarray:
    """
    Scatter renotation records onto an empty grid.

    Records off the grid (fractional values, odd chromas, non-standard hues,
    chromas above 38, neutrals) are skipped.
    """
    grid = np.full(GRID_SHAPE, np.nan, dtype=np.float64)
    for (hue_string, value, chroma), xyY in records:
        match = _HUE_STRING_RE.match(str(hue_string).upper())
        if match is None:
            continue
        value = float(value)
        chroma = float(chroma)
        if abs(value - round(value)) > 1e-6 or not 1 <= round(value) <= 9:
            continue
        if abs(chroma - 2.0 * round(chroma / 2.0)) > 1e-6:
            continue
        chroma_index = int(round(chroma / 2.0))
        if not 1 <= chroma_index <= MAX_TABLE_CHROMA // 2:
            continue
        family = HueFamily[match["family"]]
        try:
            hue_index = renotation_hue_index(float(match["hue"]), family)
        except InvalidSpecificationError:
            continue
        grid[hue_index, int(round(value)) - 1, chroma_index] = np.asarray(xyY, dtype=np.float64)[:3]
    return grid


class RenotationTable:
    """
    Standard and extrapolated renotation grids plus the neutral axis.

    Instances are immutable: every array is flagged read-only.  Build one with
    :meth:`from_colour_science` (or :func:`load_renotation_table`, which
    memoises) and pass it to the conversion components.

    Args:
        standard: (40, 9, 20, 3) grid of measured ("real") renotation points.
        extrapolated: Same shape; extrapolated points.  Lookups fall back to
            this grid when the standard grid has no entry.
        neutral: Optional (9, 3) neutral rows.  Defaults to the Illuminant C
            chromaticity with the renotation grey luminance factors.
    """
    __slots__ = ("_standard", "_extrapolated", "_neutral", "_max_chroma")

    def __init__(self, standard: np.ndarray, extrapolated: np.ndarray,
                 neutral: Optional[np.ndarray] = None) -> None:
        std = np.array(standard, dtype=np.float64)
        ext = np.array(extrapolated, dtype=np.float64)
        if std.shape != GRID_SHAPE or ext.shape != GRID_SHAPE:
            raise ValueError(
                f"Renotation grids must have shape {GRID_SHAPE}, got {std.shape} and {ext.shape}"
            )
        if neutral is None:
            neutral = np.column_stack([
                np.full(9, XY_WHITE_C[0]),
                np.full(9, XY_WHITE_C[1]),
                np.asarray(NEUTRAL_LUMINANCE_FACTORS),
            ])
        neu = np.array(neutral, dtype=np.float64)
        if neu.shape != (9, 3):
            raise ValueError(f"Neutral rows must have shape (9, 3), got {neu.shape}")

        self._standard = _readonly(std)
        self._extrapolated = _readonly(ext)
        self._neutral = _readonly(neu)
        self._max_chroma = _readonly(self._compute_max_chroma())

    def _compute_max_chroma(self) -> np.ndarray:
        """Largest even chroma with (extrapolated) data per hue row and value row."""
        available = np.isfinite(self._standard[..., 0]) | np.isfinite(self._extrapolated[..., 0])
        chromas = 2.0 * np.arange(GRID_SHAPE[2], dtype=np.float64)
        masked = np.where(available, chromas, 0.0)
        return masked.max(axis=-1)

    # -- builders ----------------------------------------------------------
    @classmethod
    def from_records(cls, standard: Iterable[RenotationRecord],
                     extrapolated: Iterable[RenotationRecord]) -> "RenotationTable":
        """Build from ``((hue_string, value, chroma), (x, y, Y))`` records."""
        return cls(_grid_from_records(standard), _grid_from_records(extrapolated))

    @classmethod
    def from_colour_science(cls) -> "RenotationTable":
        """
        Build from the renotation datasets of ``colour-science``.

        The "real" dataset fills the standard grid, the "all" dataset (which
        extends past the MacAdam limits) the extrapolated one.
        """
        import colour

        root = colour.MUNSELL_COLOURS
        real = root["real"] if "real" in root else root["Munsell Colours Real"]
        every = root["all"] if "all" in root else root["Munsell Colours All"]
        return cls.from_records(real, every)

    # -- persistence -------------------------------------------------------
    def save(self, path: PathType) -> None:
        np.savez_compressed(
            path,
            standard=self._standard,
            extrapolated=self._extrapolated,
            neutral=self._neutral,
        )

    @classmethod
    def load(cls, path: PathType) -> "RenotationTable":
        with np.load(path) as data:
            return cls(data["standard"], data["extrapolated"], data["neutral"])

    # -- raw views ---------------------------------------------------------
    @property
    def standard(self) -> np.ndarray:
        return self._standard

    @property
    def extrapolated(self) -> np.ndarray:
        return self._extrapolated

    @property
    def max_extrapolated_chroma(self) -> np.ndarray:
        """(40, 9) array: largest chroma with data per hue row and value row."""
        return self._max_chroma

    # -- lookups -----------------------------------------------------------
    def neutral(self, value_index: int) -> Chromaticity:
        """Neutral grey of value row ``value_index`` (0..8 for N1..N9)."""
        if not 0 <= value_index < 9:
            raise IndexError(f"Value row must be in [0, 9), got {value_index}")
        x, y, Y = self._neutral[value_index]
        return Chromaticity(float(x), float(y), float(Y))

    def lookup(self, hue_index: int, value_index: int, chroma_index: int,
               extrapolate: bool = True) -> Optional[Chromaticity]:
        """
        Grid point at (hue row, value row, chroma column).

        The standard grid is consulted first; with ``extrapolate`` the
        extrapolated grid fills its gaps.  ``None`` means no data.
        """
        if not (0 <= hue_index < 40 and 0 <= value_index < 9
                and 1 <= chroma_index < GRID_SHAPE[2]):
            raise IndexError(
                f"Grid index ({hue_index}, {value_index}, {chroma_index}) out of range"
            )
        point = self._standard[hue_index, value_index, chroma_index]
        if np.isnan(point).any() and extrapolate:
            point = self._extrapolated[hue_index, value_index, chroma_index]
        if np.isnan(point).any():
            return None
        return Chromaticity(float(point[0]), float(point[1]), float(point[2]))

    def lookup_spec(self, hue: float, family: HueFamily, value: float,
                    chroma: float) -> Optional[Chromaticity]:
        """
        Grid point of a Munsell specification lying on the renotation grid.

        Args:
            hue: Prefix 2.5, 5, 7.5 or 10 (0 means 10 of the next family).
            family: Hue family.
            value: Integer value 1..9.
            chroma: 0 (neutral) or an even chroma 2..38.

        Returns:
            The chromaticity, or ``None`` when the grid has no data there.

        Raises:
            InvalidSpecificationError: The specification is off the grid.
        """
        if value < 1 or value > 9 or abs(value - round(value)) > _GRID_TOLERANCE:
            raise InvalidSpecificationError(
                f"Renotation value must be an integer between 1 and 9, got {value}"
            )
        value_index = int(round(value)) - 1
        if chroma == 0:
            return self.neutral(value_index)

        family = HueFamily(family)
        if abs(hue) < _GRID_TOLERANCE:
            hue, family = 10.0, family.next
        prefix = next((p for p in STANDARD_HUE_PREFIXES if abs(hue - p) <= _GRID_TOLERANCE), None)
        if prefix is None:
            raise InvalidSpecificationError(
                f"Renotation hue prefix must be 2.5, 5, 7.5 or 10, got {hue}"
            )
        if (chroma < 2 or chroma > MAX_TABLE_CHROMA
                or abs(chroma - 2.0 * round(chroma / 2.0)) > _GRID_TOLERANCE):
            raise InvalidSpecificationError(
                f"Renotation chroma must be an even number between 2 and {MAX_TABLE_CHROMA}, got {chroma}"
            )
        return self.lookup(renotation_hue_index(prefix, family), value_index,
                           int(round(chroma / 2.0)))

    def max_chroma_for_extrapolated_renotation(
        self,
        hue: float,
        family: HueFamily,
        value: float,
        method: LuminanceFunction = DEFAULT_LUMINANCE_FUNCTION,
    ) -> float:
        """
        Largest chroma for which extrapolated data exist at any hue and value.

        The limit is the minimum over the two bounding grid hues and the two
        bounding integer values.  Between value 9 and 10 the value-9 limit is
        drawn down linearly (in luminance factor) to zero at the ideal white.

        Raises:
            InvalidSpecificationError: ``value`` is below 1.
        """
        if value >= 9.99:
            return 0.0
        if value < 1.0:
            raise InvalidSpecificationError(
                f"Munsell value must be between 1 and 10 for a chroma limit, got {value}"
            )
        if value == math.floor(value):
            v_minus = v_plus = int(value)
        else:
            v_minus = int(math.floor(value))
            v_plus = v_minus + 1

        (cw_hue, cw_family), (ccw_hue, ccw_family) = bounding_renotation_hues(hue, family)
        cw = renotation_hue_index(cw_hue, cw_family)
        ccw = renotation_hue_index(ccw_hue, ccw_family)

        limit_cw = self._max_chroma[cw, v_minus - 1]
        limit_ccw = self._max_chroma[ccw, v_minus - 1]
        if v_plus <= 9:
            return float(min(limit_cw, limit_ccw,
                             self._max_chroma[cw, v_plus - 1],
                             self._max_chroma[ccw, v_plus - 1]))

        y9 = munsell_value_to_luminance_factor(9.0, method)
        y10 = munsell_value_to_luminance_factor(10.0, method)
        yv = munsell_value_to_luminance_factor(value, method)
        t = (yv - y9) / (y10 - y9)
        return float(min(limit_cw * (1.0 - t), limit_ccw * (1.0 - t)))

    def __repr__(self) -> str:
        n_std = int(np.isfinite(self._standard[..., 0]).sum())
        n_ext = int(np.isfinite(self._extrapolated[..., 0]).sum())
        return f"RenotationTable(standard={n_std} points, extrapolated={n_ext} points)"


@functools.lru_cache(maxsize=4)
def load_renotation_table(cache_path: Optional[PathType] = None) -> RenotationTable:
    """
    Process-wide renotation table.

    Built once from ``colour-science``.  With ``cache_path`` the table is
    read from that ``.npz`` file when present and written there otherwise.
    """
    path = Path(cache_path) if cache_path is not None else None
    if path is not None and path.exists():
        return RenotationTable.load(path)
    table = RenotationTable.from_colour_science()
    if path is not None:
        path.parent.mkdir(parents=True, exist_ok=True)
        table.save(path)
    return table

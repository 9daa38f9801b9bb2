# -*- coding: utf-8 -*-
"""
Swatch: Munsell renotation and colorimetry for surface colours
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

MacAdam Limits & Gamut Boundary
===============================
Membership in the object-colour solid and the largest Munsell chroma inside it.

The MacAdam limits of an illuminant are bounded by its optimal colours.  The
boundary is tessellated once (Delaunay, in XYZ with Y on 0..1) after adding
the black point and the illuminant white; a colour is inside when it falls in
one of the simplices.  The tessellation is convex, so slight concavities of
the true boundary are smoothed over.

GamutBoundary bisects on chroma for a fixed hue and value: a chroma is kept
when the forward conversion succeeds and its xyY lies inside the limits.
"""

from __future__ import annotations

import functools
import io
import warnings
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path
from typing import Final, Optional, TextIO, Tuple, Union

import numpy as np
from scipy.spatial import Delaunay

from swatch_colorengine import XY_WHITE_C, ArrayFloat, ColorSpaceEngine
from swatch_forward import MunsellToChromaticity
from swatch_notation import HueFamily, MunsellSpec, renotation_hue_from_index
from swatch_status import DataUnavailableError, InvalidSpecificationError

__all__ = [
    "OPTIMAL_COLOURS_SENTINEL",
    "OptimalColours",
    "MacAdamLimits",
    "macadam_limits",
    "GamutSettings",
    "GamutSearch",
    "GamutBoundary",
]

OPTIMAL_COLOURS_SENTINEL: Final[str] = "DESCRIPTION ENDS HERE"

# Illuminants with optimal colour tables in colour-science.
_COLOUR_SCIENCE_ILLUMINANTS: Final[Tuple[str, ...]] = ("A", "C", "D65")

PathType = Union[str, "PathLike[str]"]


def _white_xy(illuminant: str) -> Tuple[float, float]:
    if illuminant == "C":
        return XY_WHITE_C
    import colour

    try:
        xy = colour.CCS_ILLUMINANTS["CIE 1931 2 Degree Standard Observer"][illuminant]
    except KeyError:
        raise DataUnavailableError(f"No white point for illuminant {illuminant}") from None
    return float(xy[0]), float(xy[1])


# =============================================================================
# 1. OPTIMAL COLOURS
# =============================================================================

@dataclass(frozen=True, eq=False)
class OptimalColours:
    """
    Optimal colours of one illuminant.

    Attributes:
        illuminant: Illuminant name ("A", "C", "D65", ...).
        xyY: (N, 3) chromaticities with Y on the 0..100 scale (read-only).
    """
    illuminant: str
    xyY: np.ndarray = field(repr=False)

    def __post_init__(self) -> None:
        arr = np.array(self.xyY, dtype=np.float64)
        if arr.ndim != 2 or arr.shape[1] != 3 or arr.shape[0] < 4:
            raise ValueError(f"Optimal colours must be an (N >= 4, 3) xyY array, got {arr.shape}")
        arr.setflags(write=False)
        object.__setattr__(self, "xyY", arr)

    @classmethod
    def from_colour_science(cls, illuminant: str = "C") -> "OptimalColours":
        """
        Optimal colours tabulated by ``colour-science`` (A, C and D65).

        Raises:
            DataUnavailableError: No table exists for ``illuminant``.
        """
        import colour

        tables = colour.volume.OPTIMAL_COLOUR_STIMULI_ILLUMINANTS
        if illuminant not in tables:
            raise DataUnavailableError(
                f"No optimal colour data for illuminant {illuminant}; "
                f"available: {', '.join(_COLOUR_SCIENCE_ILLUMINANTS)}"
            )
        data = np.asarray(tables[illuminant], dtype=np.float64)
        # Some releases carry Y on 0..1.
        if data[:, 2].max() <= 1.5:
            data = data * np.array([1.0, 1.0, 100.0])
        return cls(illuminant, data)

    @classmethod
    def from_text(cls, source: Union[PathType, TextIO], illuminant: str) -> "OptimalColours":
        """
        Parse an optimal colour listing.

        Everything up to the line ``DESCRIPTION ENDS HERE`` is description;
        three header tokens follow, then whitespace separated x, y, Y triples.

        Raises:
            ValueError: Missing sentinel, or a trailing partial triple.
        """
        if isinstance(source, (str, Path)) or hasattr(source, "__fspath__"):
            with open(source, "r", encoding="utf-8") as fh:  # type: ignore[arg-type]
                text = fh.read()
        else:
            text = source.read()  # type: ignore[union-attr]

        lines = io.StringIO(text)
        for line in lines:
            if line.strip() == OPTIMAL_COLOURS_SENTINEL:
                break
        else:
            raise ValueError(f"Optimal colour file lacks the line {OPTIMAL_COLOURS_SENTINEL!r}")

        tokens = lines.read().split()[3:]
        if len(tokens) % 3:
            raise ValueError(f"Optimal colour data is not a list of (x, y, Y) triples ({len(tokens)} numbers)")
        data = np.array([float(t) for t in tokens], dtype=np.float64).reshape(-1, 3)
        return cls(illuminant, data)


# =============================================================================
# 2. MACADAM LIMITS
# =============================================================================

class MacAdamLimits:
    """
    Inside/outside test against the MacAdam limits of one illuminant.

    Args:
        optimal_colours: Boundary colours of the object-colour solid.
        white_xy: Chromaticity of the illuminant white; looked up when omitted.
    """
    __slots__ = ("_illuminant", "_points", "_hull")

    def __init__(self, optimal_colours: OptimalColours,
                 white_xy: Optional[Tuple[float, float]] = None) -> None:
        if white_xy is None:
            white_xy = _white_xy(optimal_colours.illuminant)
        xyY = optimal_colours.xyY / np.array([1.0, 1.0, 100.0])
        xyz = ColorSpaceEngine.xyY_to_xyz(xyY)
        extra = np.array([[0.0, 0.0, 0.0],
                          [white_xy[0] / white_xy[1], 1.0,
                           (1.0 - white_xy[0] - white_xy[1]) / white_xy[1]]])
        points = np.vstack([xyz, extra])
        points.setflags(write=False)
        self._illuminant = optimal_colours.illuminant
        self._points = points
        self._hull = Delaunay(points)

    @property
    def illuminant(self) -> str:
        return self._illuminant

    @property
    def points(self) -> np.ndarray:
        return self._points

    def contains(self, x: float, y: float, Y: float) -> bool:
        """True when xyY (Y on 0..100) lies within the limits."""
        return bool(self.contains_many(np.array([x, y, Y], dtype=np.float64))[0])

    def contains_many(self, xyY: ArrayFloat) -> np.ndarray:
        """Boolean mask for (N, 3) or (3,) xyY samples (Y on 0..100)."""
        arr = np.atleast_2d(np.asarray(xyY, dtype=np.float64))
        if arr.shape[-1] != 3:
            raise ValueError(f"Expected last dimension size 3, got {arr.shape[-1]}")
        xyz = ColorSpaceEngine.xyY_to_xyz(arr / np.array([1.0, 1.0, 100.0]))
        inside = self._hull.find_simplex(xyz) >= 0
        # xyY with y == 0 only describes black
        degenerate = (arr[:, 1] <= 0.0) & (arr[:, 2] > 0.0)
        return inside & ~degenerate


@functools.lru_cache(maxsize=8)
def macadam_limits(illuminant: str = "C") -> MacAdamLimits:
    """Cached MacAdam limits built from the ``colour-science`` optimal colours."""
    return MacAdamLimits(OptimalColours.from_colour_science(illuminant))


# =============================================================================
# 3. MAXIMUM CHROMA
# =============================================================================

@dataclass(slots=True, frozen=True)
class GamutSettings:
    """
    Bisection settings for the maximum chroma search.

    Attributes:
        upper: Chroma assumed to lie outside every gamut.
        tolerance: Width of the final bracket.
        warn_on_forward_failures: Warn when forward-conversion failures were
            counted as "outside".
    """
    upper: float = 50.0
    tolerance: float = 0.01
    warn_on_forward_failures: bool = True

    def __post_init__(self) -> None:
        if self.upper <= 0.0:
            raise ValueError(f"upper must be positive, got {self.upper}")
        if self.tolerance <= 0.0:
            raise ValueError(f"tolerance must be positive, got {self.tolerance}")


@dataclass(slots=True, frozen=True)
class GamutSearch:
    """
    Outcome of one maximum chroma bisection.

    ``forward_failures`` counts midpoints where the forward conversion had no
    data; those were treated as outside the gamut, so a non-zero count means
    ``max_chroma`` may be limited by the renotation data rather than by the
    MacAdam limits.
    """
    max_chroma: float
    forward_failures: int
    iterations: int


class GamutBoundary:
    """
    Largest chroma within the MacAdam limits for a hue and value.

    Args:
        forward: Munsell -> xyY conversion.
        limits: MacAdam limits of the illuminant (Illuminant C for the
            renotation).
        settings: Bisection settings.
    """
    __slots__ = ("_forward", "_limits", "_settings", "_matrix")

    def __init__(self, forward: MunsellToChromaticity, limits: MacAdamLimits,
                 settings: GamutSettings = GamutSettings()) -> None:
        self._forward = forward
        self._limits = limits
        self._settings = settings
        self._matrix: Optional[np.ndarray] = None

    @property
    def limits(self) -> MacAdamLimits:
        return self._limits

    def search(self, hue: float, family: HueFamily, value: float,
               upper: Optional[float] = None,
               tolerance: Optional[float] = None) -> GamutSearch:
        """
        Bisect chroma between 0 and ``upper`` down to ``tolerance``.

        Raises:
            InvalidSpecificationError: ``value`` outside [1, 9] or ``hue``
                outside [0, 10].
        """
        if value < 1.0 or value > 9.0:
            raise InvalidSpecificationError(f"Value must be between 1 and 9, got {value}")
        if hue < 0.0 or hue > 10.0:
            raise InvalidSpecificationError(f"Hue prefix must be between 0 and 10, got {hue}")
        family = HueFamily(family)
        high = self._settings.upper if upper is None else float(upper)
        tol = self._settings.tolerance if tolerance is None else float(tolerance)

        low = 0.0
        failures = 0
        iterations = 0
        while high - low >= tol:
            iterations += 1
            mid = 0.5 * (low + high)
            result = self._forward.convert(MunsellSpec(value, hue, family, mid))
            if not result.ok:
                failures += 1
                high = mid
                continue
            x, y, Y = result.value  # type: ignore[misc]
            if self._limits.contains(x, y, Y):
                low = mid
            else:
                high = mid
        return GamutSearch(low, failures, iterations)

    def max_chroma(self, hue: float, family: HueFamily, value: float,
                   upper: Optional[float] = None,
                   tolerance: Optional[float] = None) -> float:
        """
        Maximum chroma inside the MacAdam limits (lower end of the bracket).

        Emits a ``RuntimeWarning`` when missing renotation data stopped the
        search; see :class:`GamutSearch`.
        """
        outcome = self.search(hue, family, value, upper, tolerance)
        if outcome.forward_failures and self._settings.warn_on_forward_failures:
            warnings.warn(
                f"Maximum chroma of {hue:g}{HueFamily(family).name} value {value:g}: "
                f"{outcome.forward_failures} midpoint(s) beyond the renotation data "
                f"were treated as outside the MacAdam limits",
                RuntimeWarning,
                stacklevel=2,
            )
        return outcome.max_chroma

    def max_chroma_matrix(self) -> np.ndarray:
        """
        (40, 9) maximum chromas for the 40 grid hues (2.5R .. 10RP) and
        values 1..9.  Computed on first use and cached (read-only).
        """
        if self._matrix is None:
            matrix = np.empty((40, 9), dtype=np.float64)
            with warnings.catch_warnings():
                warnings.simplefilter("ignore", RuntimeWarning)
                for hue_index in range(40):
                    hue, family = renotation_hue_from_index(hue_index)
                    for value in range(1, 10):
                        matrix[hue_index, value - 1] = self.max_chroma(hue, family, value)
            matrix.setflags(write=False)
            self._matrix = matrix
        return self._matrix

    def save_matrix(self, path: PathType) -> None:
        np.savez_compressed(path, max_chroma=self.max_chroma_matrix(),
                            illuminant=np.array(self._limits.illuminant))

    def load_matrix(self, path: PathType) -> np.ndarray:
        """Adopt a matrix saved by :meth:`save_matrix` as the cached one."""
        with np.load(path) as data:
            matrix = np.array(data["max_chroma"], dtype=np.float64)
            illuminant = str(data["illuminant"])
        if matrix.shape != (40, 9):
            raise ValueError(f"Maximum chroma matrix must have shape (40, 9), got {matrix.shape}")
        if illuminant != self._limits.illuminant:
            raise ValueError(
                f"Matrix was computed for illuminant {illuminant}, not {self._limits.illuminant}"
            )
        matrix.setflags(write=False)
        self._matrix = matrix
        return matrix

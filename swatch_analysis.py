# -*- coding: utf-8 -*-
"""
Swatch: Munsell renotation and colorimetry for surface colours
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Munsell Analysis
================
High-level routines built on the renotation engine.

``MunsellEngine`` bundles the renotation table with the forward, inverse and
gamut components so they are built once and shared.  The functions below
take an engine argument and fall back to the process-wide default engine.

Colour differences follow CIEDE2000 in CIELAB against the Illuminant C white
at Y = 100.  sRGB is D65 referred; conversions to and from the renotation's
Illuminant C pass through a Bradford adaptation.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass, field
from typing import Final, List, NamedTuple, Optional, Tuple, Union

import numpy as np

from swatch_colorengine import (
    REF_WHITE_C,
    REF_WHITE_D65,
    XY_WHITE_C,
    ArrayFloat,
    ChromaticAdaptation,
    ColorMetrics,
    ColorSpaceEngine,
    white_from_xy,
)
from swatch_forward import MunsellToChromaticity
from swatch_gamut import GamutBoundary, GamutSettings, MacAdamLimits, macadam_limits
from swatch_illuminants import (
    C_2,
    IllumObsLike,
    reflectances_to_cie_with_white_y100,
    white_point_with_y100,
)
from swatch_inverse import ChromaticityToMunsell, InverseSettings
from swatch_luminance import DEFAULT_LUMINANCE_FUNCTION, LuminanceFunction
from swatch_notation import Chromaticity, MunsellSpec, parse_munsell
from swatch_renotation import PathType, RenotationTable, load_renotation_table
from swatch_status import ConversionResult, ConversionStatus

__all__ = [
    "MunsellEngine",
    "default_engine",
    "ReflectanceAnalysis",
    "SrgbColour",
    "MunsellMatch",
    "XyYMatch",
    "reflectance_to_munsell",
    "munsell_to_srgb",
    "srgb_to_munsell",
    "delta_e_between_munsell_specs",
    "best_match_for_munsell",
    "best_match_for_xyY",
    "mean_colour_difference_from_mean",
    "shadow_series",
]

# Spectra whose every reflectance reaches this level are reported as N10.
WHITE_REFLECTANCE_THRESHOLD: Final[float] = 0.99

SpecLike = Union[MunsellSpec, str]


# =============================================================================
# 1. ENGINE
# =============================================================================

class MunsellEngine:
    """
    The renotation conversion components, wired together.

    Args:
        table: Renotation grids.
        luminance: Value/luminance relation used in both directions.
        limits: MacAdam limits for Illuminant C (built from
            ``colour-science`` when omitted).
        inverse_settings: Thresholds of the inverse search.
        gamut_settings: Bisection settings of the maximum chroma search.
    """
    __slots__ = ("table", "forward", "limits", "inverse", "gamut")

    def __init__(self, table: RenotationTable,
                 luminance: LuminanceFunction = DEFAULT_LUMINANCE_FUNCTION,
                 limits: Optional[MacAdamLimits] = None,
                 inverse_settings: InverseSettings = InverseSettings(),
                 gamut_settings: GamutSettings = GamutSettings()) -> None:
        self.table = table
        self.forward = MunsellToChromaticity(table, luminance=luminance)
        self.limits = limits if limits is not None else macadam_limits("C")
        self.inverse = ChromaticityToMunsell(self.forward, self.limits, inverse_settings)
        self.gamut = GamutBoundary(self.forward, self.limits, gamut_settings)

    def to_xyY(self, spec: SpecLike) -> ConversionResult[Chromaticity]:
        return self.forward.convert(spec)

    def to_munsell(self, x: float, y: float, Y: float) -> ConversionResult[MunsellSpec]:
        return self.inverse.convert(x, y, Y)

    def __repr__(self) -> str:
        return f"MunsellEngine({self.table!r}, luminance={self.forward.luminance.name})"


@functools.lru_cache(maxsize=2)
def default_engine(cache_path: Optional[PathType] = None) -> MunsellEngine:
    """Process-wide engine on the default renotation table."""
    return MunsellEngine(load_renotation_table(cache_path))


def _engine(engine: Optional[MunsellEngine]) -> MunsellEngine:
    return engine if engine is not None else default_engine()


def _as_spec(spec: SpecLike) -> MunsellSpec:
    return parse_munsell(spec) if isinstance(spec, str) else spec


_WHITE_C_Y100: Final[ArrayFloat] = white_from_xy(XY_WHITE_C[0], XY_WHITE_C[1], 100.0)


def _lab_c(xyY: ArrayFloat) -> ArrayFloat:
    """CIELAB against the Illuminant C white, Y = 100."""
    return ColorSpaceEngine.xyY_to_lab(xyY, _WHITE_C_Y100)


# =============================================================================
# 2. REFLECTANCE SPECTRA
# =============================================================================

@dataclass(frozen=True, eq=False)
class ReflectanceAnalysis:
    """
    Munsell and CIE coordinates of a batch of reflectance spectra.

    Attributes:
        specs: One specification per spectrum, ``None`` where the
            conversion failed.
        statuses: Conversion status per spectrum.
        cie: (N, 6) rows of ``[X, Y, Z, x, y, Y]`` under Illuminant C / 2.
    """
    specs: Tuple[Optional[MunsellSpec], ...]
    statuses: Tuple[ConversionStatus, ...]
    cie: np.ndarray = field(repr=False)

    @property
    def ok(self) -> np.ndarray:
        return np.array([s is ConversionStatus.SUCCESS for s in self.statuses], dtype=bool)

    def __len__(self) -> int:
        return len(self.specs)


def reflectance_to_munsell(wavelengths: ArrayFloat, reflectances: ArrayFloat,
                           engine: Optional[MunsellEngine] = None) -> ReflectanceAnalysis:
    """
    Munsell specifications of reflectance spectra under Illuminant C / 2.

    Spectra at or above 0.99 everywhere are the ideal white N10.  A spectrum
    whose conversion fails is flagged in the result; the rest of the batch
    is still converted.

    Raises:
        ValueError: A reflectance lies outside [0, 1].
    """
    eng = _engine(engine)
    refl = np.atleast_2d(np.asarray(reflectances, dtype=np.float64))
    cie = np.atleast_2d(reflectances_to_cie_with_white_y100(wavelengths, refl, C_2))

    specs: List[Optional[MunsellSpec]] = []
    statuses: List[ConversionStatus] = []
    for row, coords in zip(refl, cie):
        if row.min() >= WHITE_REFLECTANCE_THRESHOLD:
            specs.append(MunsellSpec.neutral(10.0))
            statuses.append(ConversionStatus.SUCCESS)
            continue
        result = eng.inverse.convert(coords[3], coords[4], coords[5])
        specs.append(result.value)
        statuses.append(result.status)
    cie.setflags(write=False)
    return ReflectanceAnalysis(tuple(specs), tuple(statuses), cie)


# =============================================================================
# 3. sRGB
# =============================================================================

class SrgbColour(NamedTuple):
    """Gamma-encoded sRGB in [0, 1] (clipped) and whether clipping was needed."""
    rgb: np.ndarray
    in_gamut: bool


def munsell_to_srgb(spec: SpecLike, engine: Optional[MunsellEngine] = None) -> ConversionResult[SrgbColour]:
    """sRGB of a Munsell specification (Bradford adapted from C to D65)."""
    eng = _engine(engine)
    result = eng.forward.convert(_as_spec(spec))
    if not result.ok:
        return ConversionResult.failure(result.status, result.message)
    x, y, Y = result.value  # type: ignore[misc]
    xyz_c = ColorSpaceEngine.xyY_to_xyz(np.array([x, y, Y / 100.0]))
    xyz_d65 = ChromaticAdaptation.adapt(xyz_c, REF_WHITE_C, REF_WHITE_D65, clip_negative=False)
    in_gamut = bool(ColorSpaceEngine.srgb_in_gamut(xyz_d65))
    rgb = ColorSpaceEngine.xyz_to_srgb(xyz_d65, clip=True)
    return ConversionResult.success(SrgbColour(rgb, in_gamut))


def srgb_to_munsell(rgb: ArrayFloat, engine: Optional[MunsellEngine] = None) -> ConversionResult[MunsellSpec]:
    """
    Munsell specification of an sRGB colour in [0, 1].

    Black gives N0; otherwise the D65 colour is adapted to Illuminant C and
    inverted.  OUTSIDE_GAMUT means it lies beyond the MacAdam limits.
    """
    arr = np.asarray(rgb, dtype=np.float64)
    if arr.shape != (3,):
        raise ValueError(f"Expected a single sRGB triple, got shape {arr.shape}")
    if not np.any(arr):
        return ConversionResult.success(MunsellSpec.neutral(0.0))
    eng = _engine(engine)
    xyz_d65 = ColorSpaceEngine.srgb_to_xyz(arr)
    xyz_c = ChromaticAdaptation.adapt(xyz_d65, REF_WHITE_D65, REF_WHITE_C)
    x, y, Y = ColorSpaceEngine.xyz_to_xyY(xyz_c)
    return eng.inverse.convert(x, y, 100.0 * Y)


# =============================================================================
# 4. COLOUR DIFFERENCES & MATCHING
# =============================================================================

def delta_e_between_munsell_specs(spec1: SpecLike, spec2: SpecLike,
                                  engine: Optional[MunsellEngine] = None) -> float:
    """
    CIEDE2000 between two Munsell specifications.

    Raises:
        DataUnavailableError: Either specification lies beyond the
            renotation data.
    """
    eng = _engine(engine)
    c1 = eng.forward.convert_or_raise(_as_spec(spec1))
    c2 = eng.forward.convert_or_raise(_as_spec(spec2))
    return float(ColorMetrics.delta_E_2000(_lab_c(np.array(c1)), _lab_c(np.array(c2))))


class MunsellMatch(NamedTuple):
    index: int
    delta_e: float
    munsell: Optional[MunsellSpec]
    status: ConversionStatus


class XyYMatch(NamedTuple):
    index: int
    delta_e: float
    sorted_delta_e: np.ndarray
    sorted_indices: np.ndarray


def best_match_for_munsell(spec: SpecLike, wavelengths: ArrayFloat, reflectances: ArrayFloat,
                           engine: Optional[MunsellEngine] = None) -> MunsellMatch:
    """
    The reflectance spectrum closest (CIEDE2000, Illuminant C) to a Munsell
    specification, together with the Munsell specification of that spectrum.

    Raises:
        DataUnavailableError: ``spec`` lies beyond the renotation data.
    """
    eng = _engine(engine)
    target = eng.forward.convert_or_raise(_as_spec(spec))
    refl = np.atleast_2d(np.asarray(reflectances, dtype=np.float64))
    cie = np.atleast_2d(reflectances_to_cie_with_white_y100(wavelengths, refl, C_2))

    des = np.atleast_1d(ColorMetrics.delta_E_2000(_lab_c(np.array(target)), _lab_c(cie[:, 3:6])))
    best = int(np.argmin(des))
    if refl[best].min() >= WHITE_REFLECTANCE_THRESHOLD:
        return MunsellMatch(best, float(des[best]), MunsellSpec.neutral(10.0), ConversionStatus.SUCCESS)
    result = eng.inverse.convert(*cie[best, 3:6])
    return MunsellMatch(best, float(des[best]), result.value, result.status)


def best_match_for_xyY(x: float, y: float, Y: float, cie_coords: ArrayFloat,
                       illum_obs: IllumObsLike = C_2) -> XyYMatch:
    """
    Row of ``cie_coords`` (as returned by
    :func:`reflectances_to_cie_with_white_y100`) closest to xyY.
    """
    coords = np.atleast_2d(np.asarray(cie_coords, dtype=np.float64))
    if coords.shape[1] != 6:
        raise ValueError(f"CIE coordinates must have 6 columns, got {coords.shape[1]}")
    white = white_point_with_y100(illum_obs)
    lab_target = ColorSpaceEngine.xyY_to_lab(np.array([x, y, Y]), white)
    lab_samples = ColorSpaceEngine.xyY_to_lab(coords[:, 3:6], white)
    des = np.atleast_1d(ColorMetrics.delta_E_2000(lab_target, lab_samples))
    order = np.argsort(des, kind="stable")
    return XyYMatch(int(order[0]), float(des[order[0]]), des[order], order)


def mean_colour_difference_from_mean(wavelengths: ArrayFloat, reflectances: ArrayFloat,
                                     illum_obs: IllumObsLike = C_2) -> Tuple[float, np.ndarray]:
    """
    MCDM of a set of measurements: mean CIEDE2000 of each spectrum from the
    colour of the mean spectrum.

    Returns:
        ``(mcdm, differences)``.
    """
    refl = np.atleast_2d(np.asarray(reflectances, dtype=np.float64))
    white = white_point_with_y100(illum_obs)
    xyz_all = np.atleast_2d(reflectances_to_cie_with_white_y100(wavelengths, refl, illum_obs))[:, :3]
    xyz_mean = reflectances_to_cie_with_white_y100(wavelengths, refl.mean(axis=0), illum_obs)[:3]
    des = np.atleast_1d(ColorMetrics.delta_E_2000_xyz(xyz_mean, xyz_all, white))
    return float(des.mean()), des


# =============================================================================
# 5. SHADOW SERIES
# =============================================================================

def shadow_series(spec: SpecLike, engine: Optional[MunsellEngine] = None) -> List[MunsellSpec]:
    """
    The colour followed by its shadows: same chromaticity at each lower
    integer Munsell value.  Values whose chromaticity is beyond the
    renotation data (or the MacAdam limits) are skipped.

    Raises:
        DataUnavailableError: ``spec`` itself lies beyond the renotation data.
    """
    eng = _engine(engine)
    spec = _as_spec(spec)
    series = [spec]
    if spec.value <= 1.0:
        return series
    x, y, _ = eng.forward.convert_or_raise(spec)

    if abs(spec.value - round(spec.value)) < 1e-3:
        highest = int(round(spec.value)) - 1
    else:
        highest = int(np.floor(spec.value))
    for value in range(highest, 0, -1):
        result = eng.inverse.convert(x, y, eng.forward.luminance_factor(value))
        if result.ok:
            series.append(result.value)  # type: ignore[arg-type]
    return series

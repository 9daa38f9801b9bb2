# -*- coding: utf-8 -*-
"""
Swatch: Munsell renotation and colorimetry for surface colours
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Illuminant / Observer Registry
==============================
Spectral tristimulus integration for reflectance spectra.

Illuminant SPDs and colour-matching functions come from ``colour-science``
and are linearly interpolated onto the wavelengths of the samples (zero
outside their tabulated range).  Tristimulus values of reflectances are
normalised so that the perfect white has Y = 100:

    k = 100 / sum(S * ybar)
    X = k * sum(S * R * xbar), ...

Keys are written ``"C/2"`` or ``"D65_10"`` (any case).
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from enum import Enum
from typing import Final, Tuple, Union

import numpy as np

from swatch_colorengine import ArrayFloat, ColorSpaceEngine
from swatch_status import DataUnavailableError

__all__ = [
    "Illuminant",
    "Observer",
    "IlluminantObserver",
    "C_2",
    "DEFAULT_WAVELENGTHS",
    "illuminant_spd",
    "colour_matching_functions",
    "spectral_power_to_xyz",
    "reflectances_to_xyz",
    "reflectances_to_cie_with_white_y100",
    "white_point_with_y100",
    "chromaticity_of_white_point",
]

DEFAULT_WAVELENGTHS: Final[ArrayFloat] = np.arange(380.0, 781.0, 5.0)


class Illuminant(Enum):
    """CIE illuminants, valued by their ``colour-science`` dataset key."""
    A = "A"
    C = "C"
    D50 = "D50"
    D55 = "D55"
    D65 = "D65"
    D75 = "D75"
    E = "E"
    F2 = "FL2"
    F7 = "FL7"
    F11 = "FL11"


class Observer(Enum):
    CIE_1931_2 = "CIE 1931 2 Degree Standard Observer"
    CIE_1964_10 = "CIE 1964 10 Degree Standard Observer"

    @property
    def degrees(self) -> int:
        return 2 if self is Observer.CIE_1931_2 else 10


_OBSERVER_BY_DEGREES: Final = {"2": Observer.CIE_1931_2, "10": Observer.CIE_1964_10}


@dataclass(slots=True, frozen=True)
class IlluminantObserver:
    """An (illuminant, observer) pair such as C/2 or D65/10."""
    illuminant: Illuminant = Illuminant.C
    observer: Observer = Observer.CIE_1931_2

    @classmethod
    def parse(cls, text: Union[str, "IlluminantObserver"]) -> "IlluminantObserver":
        """
        Parse ``"D50/2"``, ``"d65_10"``, ``"F11/2"`` or ``"FL11/2"``.

        Raises:
            ValueError: Unknown illuminant or observer, or malformed key.
        """
        if isinstance(text, IlluminantObserver):
            return text
        compact = str(text).strip().replace("_", "/").upper()
        parts = compact.split("/")
        if len(parts) != 2:
            raise ValueError(f"Illuminant/observer must look like 'C/2', got {text!r}")
        name, degrees = parts[0].strip(), parts[1].strip()
        if name.startswith("FL"):
            name = "F" + name[2:]
        try:
            illuminant = Illuminant[name]
        except KeyError:
            raise ValueError(
                f"Unknown illuminant {parts[0]!r}; expected one of "
                f"{', '.join(i.name for i in Illuminant)}"
            ) from None
        if degrees not in _OBSERVER_BY_DEGREES:
            raise ValueError(f"Unknown observer {parts[1]!r}; expected 2 or 10")
        return cls(illuminant, _OBSERVER_BY_DEGREES[degrees])

    def __str__(self) -> str:
        return f"{self.illuminant.name}/{self.observer.degrees}"


C_2: Final[IlluminantObserver] = IlluminantObserver()

IllumObsLike = Union[str, IlluminantObserver]


# =============================================================================
# 1. SPECTRAL DATA
# =============================================================================

def _as_wavelengths(wavelengths: ArrayFloat) -> ArrayFloat:
    wl = np.asarray(wavelengths, dtype=np.float64).ravel()
    if wl.size < 2 or np.any(np.diff(wl) <= 0):
        raise ValueError("Wavelengths must be a strictly increasing sequence of at least two samples")
    return wl


@functools.lru_cache(maxsize=32)
def _illuminant_on_grid(illuminant: Illuminant, wavelengths: Tuple[float, ...]) -> ArrayFloat:
    wl = np.asarray(wavelengths)
    if illuminant is Illuminant.E:
        spd = np.full(wl.shape, 100.0)
    else:
        import colour

        try:
            sd = colour.SDS_ILLUMINANTS[illuminant.value]
        except KeyError:
            raise DataUnavailableError(
                f"No spectral data for illuminant {illuminant.name}"
            ) from None
        spd = np.interp(wl, np.asarray(sd.wavelengths), np.asarray(sd.values), left=0.0, right=0.0)
    spd.setflags(write=False)
    return spd


@functools.lru_cache(maxsize=16)
def _cmfs_on_grid(observer: Observer, wavelengths: Tuple[float, ...]) -> ArrayFloat:
    import colour

    wl = np.asarray(wavelengths)
    cmfs = colour.MSDS_CMFS[observer.value]
    src_wl = np.asarray(cmfs.wavelengths)
    src = np.asarray(cmfs.values)
    out = np.column_stack([
        np.interp(wl, src_wl, src[:, i], left=0.0, right=0.0) for i in range(3)
    ])
    out.setflags(write=False)
    return out


def illuminant_spd(illuminant: Illuminant, wavelengths: ArrayFloat = DEFAULT_WAVELENGTHS) -> ArrayFloat:
    """Relative SPD of ``illuminant`` sampled at ``wavelengths`` (read-only)."""
    wl = _as_wavelengths(wavelengths)
    return _illuminant_on_grid(illuminant, tuple(wl.tolist()))


def colour_matching_functions(observer: Observer,
                              wavelengths: ArrayFloat = DEFAULT_WAVELENGTHS) -> ArrayFloat:
    """(W, 3) xbar, ybar, zbar sampled at ``wavelengths`` (read-only)."""
    wl = _as_wavelengths(wavelengths)
    return _cmfs_on_grid(observer, tuple(wl.tolist()))


# =============================================================================
# 2. TRISTIMULUS INTEGRATION
# =============================================================================

def spectral_power_to_xyz(wavelengths: ArrayFloat, spectral_power: ArrayFloat,
                          observer: Observer = Observer.CIE_1931_2) -> ArrayFloat:
    """
    Unnormalised XYZ of emission spectra: sum(P * cmf) per spectrum.

    Args:
        wavelengths: (W,) sample wavelengths in nm.
        spectral_power: (W,) or (N, W) spectral power per wavelength.
    """
    wl = _as_wavelengths(wavelengths)
    power = np.asarray(spectral_power, dtype=np.float64)
    if power.shape[-1] != wl.size:
        raise ValueError(f"Expected {wl.size} spectral samples, got {power.shape[-1]}")
    return power @ colour_matching_functions(observer, wl)


def reflectances_to_xyz(wavelengths: ArrayFloat, reflectances: ArrayFloat,
                        illum_obs: IllumObsLike = C_2) -> ArrayFloat:
    """
    XYZ of reflectance spectra under an illuminant, perfect white at Y = 100.

    Args:
        wavelengths: (W,) sample wavelengths in nm.
        reflectances: (W,) or (N, W) reflectance factors.
        illum_obs: Illuminant/observer key.

    Returns:
        (3,) or (N, 3) XYZ.
    """
    key = IlluminantObserver.parse(illum_obs)
    wl = _as_wavelengths(wavelengths)
    refl = np.asarray(reflectances, dtype=np.float64)
    if refl.shape[-1] != wl.size:
        raise ValueError(f"Expected {wl.size} spectral samples, got {refl.shape[-1]}")
    spd = illuminant_spd(key.illuminant, wl)
    cmf = colour_matching_functions(key.observer, wl)
    weighted = spd[:, None] * cmf
    norm = np.sum(weighted[:, 1])
    if norm <= 0.0:
        raise DataUnavailableError(f"Illuminant {key} has no power over the sampled wavelengths")
    return (100.0 / norm) * (refl @ weighted)


def reflectances_to_cie_with_white_y100(wavelengths: ArrayFloat, reflectances: ArrayFloat,
                                        illum_obs: IllumObsLike = C_2) -> ArrayFloat:
    """
    Rows of ``[X, Y, Z, x, y, Y]`` for reflectance spectra.

    Black spectra report the chromaticity of the illuminant's white point.

    Raises:
        ValueError: A reflectance lies outside [0, 1].
    """
    refl = np.atleast_2d(np.asarray(reflectances, dtype=np.float64))
    if refl.size and (refl.max() > 1.0 or refl.min() < 0.0):
        raise ValueError("Reflectances must be between 0 and 1.")
    xyz = reflectances_to_xyz(wavelengths, refl, illum_obs)
    white_xy = chromaticity_of_white_point(illum_obs, wavelengths)
    xyY = ColorSpaceEngine.xyz_to_xyY(xyz, white_xy)
    out = np.hstack([xyz, xyY])
    if np.ndim(reflectances) == 1:
        return out[0]
    return out


def white_point_with_y100(illum_obs: IllumObsLike = C_2,
                          wavelengths: ArrayFloat = DEFAULT_WAVELENGTHS) -> ArrayFloat:
    """XYZ of the perfect reflecting diffuser, scaled to Y = 100."""
    wl = _as_wavelengths(wavelengths)
    return reflectances_to_xyz(wl, np.ones(wl.size), illum_obs)


def chromaticity_of_white_point(illum_obs: IllumObsLike = C_2,
                                wavelengths: ArrayFloat = DEFAULT_WAVELENGTHS) -> Tuple[float, float]:
    """(x, y) of the perfect reflecting diffuser."""
    X, Y, Z = white_point_with_y100(illum_obs, wavelengths)
    total = X + Y + Z
    return float(X / total), float(Y / total)

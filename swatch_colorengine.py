# -*- coding: utf-8 -*-
"""
Swatch: Munsell renotation and colorimetry for surface colours
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Colorimetric Engine
===================
CIE transforms shared by the Munsell conversion modules.

The renotation lives on Illuminant C / 2 degree xyY with Y on 0..100, while
display sRGB is D65 with Y on 0..1.  None of the transforms below fixes a
scale: the reference white handed in carries it.

Provided:
- sRGB <-> XYZ (IEC 61966-2-1), XYZ <-> xyY, XYZ <-> CIELAB, Lab <-> LCh.
- Bradford chromatic adaptation (composite matrices cached per white pair).
- CIEDE2000 with parametric weights, plus XYZ / xyY entry points.

References:
    - CIE 15:2004 "Colorimetry"
    - IEC 61966-2-1:1999 (sRGB)
    - Sharma, Wu & Dalal (2005), "The CIEDE2000 color-difference formula"
"""

import functools
import math
from typing import Any, Callable, Final, Sequence, Tuple, TypeAlias, Union

import numpy as np
import numpy.typing as npt
from numba import njit, prange

__all__ = [
    "ArrayFloat",
    "REF_WHITE_D65",
    "REF_WHITE_C",
    "XY_WHITE_C",
    "DEG2RAD",
    "RAD2DEG",
    "set_strict_ieee",
    "white_from_xy",
    "handle_shapes",
    "ColorSpaceEngine",
    "ChromaticAdaptation",
    "ColorMetrics",
]

# Kernels compute in float64; other dtypes are cast on entry.
ArrayFloat: TypeAlias = npt.NDArray[np.floating]

DEG2RAD: Final[float] = math.pi / 180.0
RAD2DEG: Final[float] = 180.0 / math.pi


def white_from_xy(x: float, y: float, Y: float = 1.0) -> ArrayFloat:
    """XYZ of a white point given its chromaticity, scaled to luminance ``Y``."""
    if y <= 0.0:
        raise ValueError(f"White point chromaticity y must be positive, got {y}")
    return np.array([x * Y / y, Y, (1.0 - x - y) * Y / y], dtype=np.float64)


# D65 as tabulated for sRGB (Y = 1).
REF_WHITE_D65: Final[ArrayFloat] = np.array([0.95047, 1.0, 1.08883], dtype=np.float64)

# Illuminant C as used by the 1943 renotation (Newhall, Nickerson & Judd).
XY_WHITE_C: Final[Tuple[float, float]] = (0.31006, 0.31616)
REF_WHITE_C: Final[ArrayFloat] = white_from_xy(*XY_WHITE_C)

# Column-vector matrices; row batches multiply by the transpose.
_SRGB_TO_XYZ: Final[ArrayFloat] = np.array([
    [0.4124564, 0.3575761, 0.1804375],
    [0.2126729, 0.7151522, 0.0721750],
    [0.0193339, 0.1191920, 0.9503041],
])
_XYZ_TO_SRGB: Final[ArrayFloat] = np.linalg.inv(_SRGB_TO_XYZ)
_BRADFORD: Final[ArrayFloat] = np.array([
    [0.8951, 0.2664, -0.1614],
    [-0.7502, 1.7135, 0.0367],
    [0.0389, -0.0685, 1.0296],
])
_BRADFORD_INV: Final[ArrayFloat] = np.linalg.inv(_BRADFORD)

# CIELAB companding: cube root above delta^3, a line of slope 1/(3 delta^2) below.
_LAB_DELTA: Final[float] = 6.0 / 29.0
_LAB_DELTA_CUBED: Final[float] = _LAB_DELTA ** 3
_LAB_SLOPE: Final[float] = 3.0 * _LAB_DELTA ** 2
_LAB_OFFSET: Final[float] = 4.0 / 29.0

_POW25_7: Final[float] = 25.0 ** 7

_STRICT_IEEE: bool = False


def set_strict_ieee(enabled: bool = True) -> None:
    """
    Route the transfer-curve kernels through ``fastmath=False`` builds.

    The fast builds may reassociate floating point operations; the strict
    ones keep IEEE 754 semantics at some cost in speed.
    """
    global _STRICT_IEEE
    _STRICT_IEEE = bool(enabled)


# =============================================================================
# 1. SHAPE HANDLING
# =============================================================================

def handle_shapes(func: Callable[..., ArrayFloat]) -> Callable[..., ArrayFloat]:
    """
    Let a row-wise (N, 3) transform also take a single (3,) colour.

    The wrapped function always receives a C-contiguous float64 (N, 3)
    array; a single colour in gives a single colour out.

    Raises:
        ValueError: The last axis does not hold three components.
    """
    @functools.wraps(func)
    def wrapper(arr: ArrayFloat, *args: Any, **kwargs: Any) -> ArrayFloat:
        arr = np.asarray(arr, dtype=np.float64)
        if arr.shape[-1:] != (3,):
            raise ValueError(f"Expected three components on the last axis, got shape {arr.shape}")
        res = func(np.ascontiguousarray(np.atleast_2d(arr)), *args, **kwargs)
        return res[0] if arr.ndim == 1 else res
    return wrapper


# =============================================================================
# 2. KERNELS
# =============================================================================
# Transfer curves are compiled twice from one Python source: a cached
# fastmath build and an uncached strict build selected by set_strict_ieee.

def _srgb_encode_py(linear):
    flat = linear.ravel()
    out = np.empty_like(flat)
    for i in range(flat.size):
        v = flat[i]
        if v <= 0.0031308:
            out[i] = 12.92 * v
        else:
            out[i] = 1.055 * v ** (1.0 / 2.4) - 0.055
    return out.reshape(linear.shape)


def _srgb_decode_py(encoded):
    flat = encoded.ravel()
    out = np.empty_like(flat)
    for i in range(flat.size):
        v = flat[i]
        if v <= 0.04045:
            out[i] = v / 12.92
        else:
            out[i] = ((v + 0.055) / 1.055) ** 2.4
    return out.reshape(encoded.shape)


def _lab_compand_py(t):
    flat = t.ravel()
    out = np.empty_like(flat)
    for i in range(flat.size):
        v = flat[i]
        if v > _LAB_DELTA_CUBED:
            out[i] = v ** (1.0 / 3.0)
        else:
            out[i] = v / _LAB_SLOPE + _LAB_OFFSET
    return out.reshape(t.shape)


def _lab_expand_py(f):
    flat = f.ravel()
    out = np.empty_like(flat)
    for i in range(flat.size):
        v = flat[i]
        if v > _LAB_DELTA:
            out[i] = v * v * v
        else:
            out[i] = _LAB_SLOPE * (v - _LAB_OFFSET)
    return out.reshape(f.shape)


def _dual_build(py_func: Callable[[ArrayFloat], ArrayFloat]) -> Callable[[ArrayFloat], ArrayFloat]:
    fast = njit(cache=True, fastmath=True)(py_func)
    strict = njit(fastmath=False)(py_func)

    def run(arr: ArrayFloat) -> ArrayFloat:
        kernel = strict if _STRICT_IEEE else fast
        return kernel(np.ascontiguousarray(arr, dtype=np.float64))
    return run


_srgb_encode = _dual_build(_srgb_encode_py)
_srgb_decode = _dual_build(_srgb_decode_py)
_lab_compand = _dual_build(_lab_compand_py)
_lab_expand = _dual_build(_lab_expand_py)


@njit(cache=True, fastmath=True)
def _lab_to_lch_rows(lab: ArrayFloat) -> ArrayFloat:
    out = np.empty_like(lab)
    for i in range(lab.shape[0]):
        a, b = lab[i, 1], lab[i, 2]
        hue = math.atan2(b, a) * RAD2DEG
        out[i, 0] = lab[i, 0]
        out[i, 1] = math.hypot(a, b)
        out[i, 2] = hue + 360.0 if hue < 0.0 else hue
    return out


@njit(cache=True, fastmath=True)
def _lch_to_lab_rows(lch: ArrayFloat) -> ArrayFloat:
    out = np.empty_like(lch)
    for i in range(lch.shape[0]):
        h = lch[i, 2] * DEG2RAD
        out[i, 0] = lch[i, 0]
        out[i, 1] = lch[i, 1] * math.cos(h)
        out[i, 2] = lch[i, 1] * math.sin(h)
    return out


@njit(cache=True, fastmath=True)
def _ciede2000(L1: float, a1: float, b1: float, L2: float, a2: float, b2: float,
               k_L: float, k_C: float, k_H: float) -> float:
    c_mean = 0.5 * (math.hypot(a1, b1) + math.hypot(a2, b2))
    c7 = c_mean ** 7
    stretch = 1.0 + 0.5 * (1.0 - math.sqrt(c7 / (c7 + _POW25_7)))

    c1 = math.hypot(stretch * a1, b1)
    c2 = math.hypot(stretch * a2, b2)
    h1 = math.degrees(math.atan2(b1, stretch * a1)) % 360.0
    h2 = math.degrees(math.atan2(b2, stretch * a2)) % 360.0
    chromatic = c1 * c2 != 0.0

    dh = 0.0
    h_mean = h1 + h2
    if chromatic:
        dh = h2 - h1
        if dh > 180.0:
            dh -= 360.0
        elif dh < -180.0:
            dh += 360.0
        if abs(h1 - h2) <= 180.0:
            h_mean *= 0.5
        elif h_mean < 360.0:
            h_mean = 0.5 * (h_mean + 360.0)
        else:
            h_mean = 0.5 * (h_mean - 360.0)

    dL = L2 - L1
    dC = c2 - c1
    dH = 2.0 * math.sqrt(c1 * c2) * math.sin(0.5 * dh * DEG2RAD)

    l_off = (0.5 * (L1 + L2) - 50.0) ** 2
    c_bar = 0.5 * (c1 + c2)
    t = (1.0
         - 0.17 * math.cos((h_mean - 30.0) * DEG2RAD)
         + 0.24 * math.cos(2.0 * h_mean * DEG2RAD)
         + 0.32 * math.cos((3.0 * h_mean + 6.0) * DEG2RAD)
         - 0.20 * math.cos((4.0 * h_mean - 63.0) * DEG2RAD))
    s_l = 1.0 + 0.015 * l_off / math.sqrt(20.0 + l_off)
    s_c = 1.0 + 0.045 * c_bar
    s_h = 1.0 + 0.015 * c_bar * t

    cb7 = c_bar ** 7
    rotation = 60.0 * math.exp(-(((h_mean - 275.0) / 25.0) ** 2))
    r_t = -2.0 * math.sqrt(cb7 / (cb7 + _POW25_7)) * math.sin(rotation * DEG2RAD)

    tl = dL / (k_L * s_l)
    tc = dC / (k_C * s_c)
    th = dH / (k_H * s_h)
    return math.sqrt(tl * tl + tc * tc + th * th + r_t * tc * th)


@njit(cache=True, fastmath=True, parallel=True)
def _ciede2000_rows(lab1: ArrayFloat, lab2: ArrayFloat,
                    k_L: float, k_C: float, k_H: float) -> ArrayFloat:
    out = np.empty(lab1.shape[0], dtype=np.float64)
    for i in prange(lab1.shape[0]):
        out[i] = _ciede2000(lab1[i, 0], lab1[i, 1], lab1[i, 2],
                            lab2[i, 0], lab2[i, 1], lab2[i, 2], k_L, k_C, k_H)
    return out


# =============================================================================
# 3. ROW TRANSFORMS
# =============================================================================
# Private helpers on validated (N, 3) float64 arrays.

def _xyz_to_xyY(xyz: ArrayFloat, black_xy: Tuple[float, float]) -> ArrayFloat:
    total = xyz.sum(axis=-1)
    lit = total > 1e-12
    out = np.empty_like(xyz)
    out[:, 0] = black_xy[0]
    out[:, 1] = black_xy[1]
    out[:, 2] = 0.0
    out[lit, 0] = xyz[lit, 0] / total[lit]
    out[lit, 1] = xyz[lit, 1] / total[lit]
    out[lit, 2] = xyz[lit, 1]
    return out


def _xyY_to_xyz(xyY: ArrayFloat) -> ArrayFloat:
    x, y, Y = xyY[:, 0], xyY[:, 1], xyY[:, 2]
    out = np.zeros_like(xyY)
    ok = y > 1e-12
    scale = Y[ok] / y[ok]
    out[ok, 0] = x[ok] * scale
    out[ok, 1] = Y[ok]
    out[ok, 2] = (1.0 - x[ok] - y[ok]) * scale
    return out


def _xyz_to_lab(xyz: ArrayFloat, white: ArrayFloat) -> ArrayFloat:
    f = _lab_compand(xyz / np.asarray(white, dtype=np.float64))
    return np.column_stack([
        116.0 * f[:, 1] - 16.0,
        500.0 * (f[:, 0] - f[:, 1]),
        200.0 * (f[:, 1] - f[:, 2]),
    ])


def _lab_to_xyz(lab: ArrayFloat, white: ArrayFloat) -> ArrayFloat:
    fy = (lab[:, 0] + 16.0) / 116.0
    f = np.column_stack([fy + lab[:, 1] / 500.0, fy, fy - lab[:, 2] / 200.0])
    return _lab_expand(f) * np.asarray(white, dtype=np.float64)


def _srgb_to_xyz(rgb: ArrayFloat, clip: bool) -> ArrayFloat:
    if clip:
        rgb = np.clip(rgb, 0.0, 1.0)
    return _srgb_decode(rgb) @ _SRGB_TO_XYZ.T


class ColorSpaceEngine:
    """
    Static CIE transforms.  Every method takes one colour (3,) or a batch
    (N, 3) and answers in the same shape.
    """

    @staticmethod
    @handle_shapes
    def srgb_to_xyz(rgb_array: ArrayFloat, clip: bool = True) -> ArrayFloat:
        """Gamma-encoded sRGB to XYZ (D65, Y on 0..1)."""
        return _srgb_to_xyz(rgb_array, clip)

    @staticmethod
    @handle_shapes
    def xyz_to_srgb(xyz_array: ArrayFloat, clip: bool = True) -> ArrayFloat:
        """XYZ (D65, Y on 0..1) to gamma-encoded sRGB, clipped to [0, 1] by default."""
        linear = xyz_array @ _XYZ_TO_SRGB.T
        if clip:
            linear = np.clip(linear, 0.0, 1.0)
        return _srgb_encode(linear)

    @staticmethod
    @handle_shapes
    def xyz_to_xyY(xyz_array: ArrayFloat,
                   black_xy: Tuple[float, float] = XY_WHITE_C) -> ArrayFloat:
        """
        XYZ to xyY.

        Black (X + Y + Z == 0) has no chromaticity of its own and reports
        ``black_xy`` with Y = 0; the default is the Illuminant C white that
        the renotation's neutral axis sits on.
        """
        return _xyz_to_xyY(xyz_array, black_xy)

    @staticmethod
    @handle_shapes
    def xyY_to_xyz(xyY_array: ArrayFloat) -> ArrayFloat:
        """xyY to XYZ; y == 0 maps to the origin."""
        return _xyY_to_xyz(xyY_array)

    @staticmethod
    @handle_shapes
    def xyz_to_lab(xyz_array: ArrayFloat, illuminant: ArrayFloat = REF_WHITE_D65) -> ArrayFloat:
        """XYZ to CIELAB against ``illuminant`` (same scale as the input)."""
        return _xyz_to_lab(xyz_array, illuminant)

    @staticmethod
    @handle_shapes
    def lab_to_xyz(lab_array: ArrayFloat, illuminant: ArrayFloat = REF_WHITE_D65) -> ArrayFloat:
        return _lab_to_xyz(lab_array, illuminant)

    @staticmethod
    @handle_shapes
    def lab_to_lch(lab_array: ArrayFloat) -> ArrayFloat:
        """CIELAB to LCh, hue in degrees [0, 360)."""
        return _lab_to_lch_rows(lab_array)

    @staticmethod
    @handle_shapes
    def lch_to_lab(lch_array: ArrayFloat) -> ArrayFloat:
        return _lch_to_lab_rows(lch_array)

    @staticmethod
    @handle_shapes
    def xyY_to_lab(xyY_array: ArrayFloat, illuminant: ArrayFloat = REF_WHITE_D65) -> ArrayFloat:
        return _xyz_to_lab(_xyY_to_xyz(xyY_array), illuminant)

    @staticmethod
    @handle_shapes
    def srgb_to_xyY(rgb_array: ArrayFloat) -> ArrayFloat:
        """sRGB to xyY; black reports the D65 chromaticity."""
        return _xyz_to_xyY(_srgb_to_xyz(rgb_array, True), (0.3127, 0.3290))

    @staticmethod
    def srgb_in_gamut(xyz_array: ArrayFloat, tolerance: float = 1e-6) -> Union[bool, np.ndarray]:
        """
        Whether XYZ (D65, Y on 0..1) has linear sRGB inside [0, 1].

        Returns a bool for a single colour, a boolean mask for a batch.
        """
        arr = np.asarray(xyz_array, dtype=np.float64)
        if arr.shape[-1:] != (3,):
            raise ValueError(f"Expected three components on the last axis, got shape {arr.shape}")
        linear = np.atleast_2d(arr) @ _XYZ_TO_SRGB.T
        inside = np.all((linear >= -tolerance) & (linear <= 1.0 + tolerance), axis=-1)
        return bool(inside[0]) if arr.ndim == 1 else inside


# =============================================================================
# 4. CHROMATIC ADAPTATION
# =============================================================================

def _white_key(white: Union[ArrayFloat, Sequence[float]]) -> Tuple[float, float, float]:
    a, b, c = (float(v) for v in np.asarray(white, dtype=np.float64).ravel())
    return a, b, c


@functools.lru_cache(maxsize=16)
def _bradford_row_matrix(src: Tuple[float, float, float],
                         dst: Tuple[float, float, float]) -> ArrayFloat:
    """Bradford composite M^-1 diag(dst/src) M, transposed for row vectors."""
    src_cone = _BRADFORD @ np.asarray(src)
    dst_cone = _BRADFORD @ np.asarray(dst)
    src_cone = np.where(np.abs(src_cone) < 1e-12, 1e-12, src_cone)
    composite = _BRADFORD_INV @ np.diag(dst_cone / src_cone) @ _BRADFORD
    out = composite.T.copy()
    out.setflags(write=False)
    return out


class ChromaticAdaptation:
    """Bradford white point adaptation."""

    @staticmethod
    def calc_transform_matrix(src_white: ArrayFloat, dst_white: ArrayFloat) -> ArrayFloat:
        """Row-vector adaptation matrix from ``src_white`` to ``dst_white`` (cached)."""
        return _bradford_row_matrix(_white_key(src_white), _white_key(dst_white))

    @staticmethod
    @handle_shapes
    def adapt(xyz: ArrayFloat, src_white: ArrayFloat, dst_white: ArrayFloat,
              clip_negative: bool = True) -> ArrayFloat:
        """
        Adapt XYZ from ``src_white`` to ``dst_white``.

        Args:
            clip_negative: Clamp negative results to 0.
        """
        if np.allclose(src_white, dst_white):
            res = xyz.copy()
        else:
            res = xyz @ ChromaticAdaptation.calc_transform_matrix(src_white, dst_white)
        if clip_negative:
            np.maximum(res, 0.0, out=res)
        return res


# =============================================================================
# 5. COLOUR DIFFERENCE
# =============================================================================

def _as_rows(lab: ArrayFloat) -> ArrayFloat:
    rows = np.ascontiguousarray(np.atleast_2d(np.asarray(lab, dtype=np.float64)))
    if rows.ndim != 2 or rows.shape[1] != 3:
        raise ValueError(f"Expected (N, 3) or (3,) colours, got shape {np.shape(lab)}")
    return rows


class ColorMetrics:

    @staticmethod
    def delta_E_2000(lab1: ArrayFloat, lab2: ArrayFloat,
                     k_L: float = 1.0, k_C: float = 1.0, k_H: float = 1.0,
                     textiles: bool = False) -> Union[float, ArrayFloat]:
        """
        CIEDE2000 between CIELAB colours.

        A single colour on either side is compared against every colour on
        the other.  Two single colours give a float.

        Args:
            k_L, k_C, k_H: Parametric weights.
            textiles: Shorthand for k_L = 2 (k_C = k_H = 1).
        """
        if textiles:
            k_L, k_C, k_H = 2.0, 1.0, 1.0
        r1, r2 = _as_rows(lab1), _as_rows(lab2)
        if r1.shape[0] != r2.shape[0]:
            if r1.shape[0] == 1:
                r1 = np.ascontiguousarray(np.broadcast_to(r1, r2.shape))
            elif r2.shape[0] == 1:
                r2 = np.ascontiguousarray(np.broadcast_to(r2, r1.shape))
            else:
                raise ValueError(f"Cannot pair {r1.shape[0]} colours with {r2.shape[0]}")
        res = _ciede2000_rows(r1, r2, float(k_L), float(k_C), float(k_H))
        if np.ndim(lab1) == 1 and np.ndim(lab2) == 1:
            return float(res[0])
        return res

    @staticmethod
    def delta_E_2000_xyz(xyz1: ArrayFloat, xyz2: ArrayFloat, white: ArrayFloat,
                         k_L: float = 1.0, k_C: float = 1.0,
                         k_H: float = 1.0) -> Union[float, ArrayFloat]:
        """CIEDE2000 between XYZ colours referred to ``white`` (same scale)."""
        return ColorMetrics.delta_E_2000(ColorSpaceEngine.xyz_to_lab(xyz1, white),
                                         ColorSpaceEngine.xyz_to_lab(xyz2, white),
                                         k_L, k_C, k_H)

    @staticmethod
    def delta_E_2000_xyY(xyY1: ArrayFloat, xyY2: ArrayFloat, white: ArrayFloat,
                         k_L: float = 1.0, k_C: float = 1.0,
                         k_H: float = 1.0) -> Union[float, ArrayFloat]:
        """CIEDE2000 between xyY colours referred to the XYZ ``white``."""
        return ColorMetrics.delta_E_2000(ColorSpaceEngine.xyY_to_lab(xyY1, white),
                                         ColorSpaceEngine.xyY_to_lab(xyY2, white),
                                         k_L, k_C, k_H)

# -*- coding: utf-8 -*-
"""
Swatch: Munsell renotation and colorimetry for surface colours
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Conversion outcomes and the error taxonomy.

Conversions never signal failure through magic numbers.  They return a
``ConversionResult`` carrying a ``ConversionStatus``; callers that prefer
exceptions call ``unwrap()``, which raises the matching ``SwatchError``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final, Generic, Optional, TypeVar

__all__ = [
    "ConversionStatus",
    "ConversionResult",
    "SwatchError",
    "DataUnavailableError",
    "OutsideGamutError",
    "NonConvergenceError",
    "InvalidSpecificationError",
]

T = TypeVar("T")


class SwatchError(Exception):
    """Base class of every conversion failure raised by this package."""


class DataUnavailableError(SwatchError, LookupError):
    """No renotation (or optimal colour) data exists for the request."""


class OutsideGamutError(SwatchError):
    """The colour lies outside the MacAdam limits of the illuminant."""


class NonConvergenceError(SwatchError, ArithmeticError):
    """The iterative inverse search ran out of attempts."""


class InvalidSpecificationError(SwatchError, ValueError):
    """Malformed Munsell input: bad string, value, chroma or hue family."""


class ConversionStatus(Enum):
    SUCCESS = "success"
    DATA_UNAVAILABLE = "beyond extrapolated renotation data"
    OUTSIDE_GAMUT = "outside MacAdam limits"
    NON_CONVERGENCE = "exceeded maximum number of iterations"
    INVALID_SPECIFICATION = "invalid Munsell specification"


_ERRORS: Final[dict[ConversionStatus, type[SwatchError]]] = {
    ConversionStatus.DATA_UNAVAILABLE: DataUnavailableError,
    ConversionStatus.OUTSIDE_GAMUT: OutsideGamutError,
    ConversionStatus.NON_CONVERGENCE: NonConvergenceError,
    ConversionStatus.INVALID_SPECIFICATION: InvalidSpecificationError,
}


@dataclass(slots=True, frozen=True)
class ConversionResult(Generic[T]):
    """
    Outcome of a single conversion.

    Attributes:
        status: What happened.
        value: The converted quantity, ``None`` unless ``status`` is SUCCESS.
        message: Human readable detail for failures.
        iterations: Search iterations spent (inverse conversion only).
        distance: Final chromaticity distance of the search, when known.
    """
    status: ConversionStatus
    value: Optional[T] = None
    message: str = ""
    iterations: int = 0
    distance: Optional[float] = None

    def __post_init__(self) -> None:
        if self.status is ConversionStatus.SUCCESS and self.value is None:
            raise ValueError("A successful ConversionResult needs a value.")
        if self.status is not ConversionStatus.SUCCESS and self.value is not None:
            raise ValueError(f"A {self.status.name} result cannot carry a value.")

    @property
    def ok(self) -> bool:
        return self.status is ConversionStatus.SUCCESS

    def unwrap(self) -> T:
        """Return the value or raise the exception matching the status."""
        if self.status is ConversionStatus.SUCCESS:
            return self.value  # type: ignore[return-value]
        detail = self.message or self.status.value
        raise _ERRORS[self.status](detail)

    @classmethod
    def success(cls, value: T, iterations: int = 0,
                distance: Optional[float] = None) -> "ConversionResult[T]":
        return cls(ConversionStatus.SUCCESS, value, "", iterations, distance)

    @classmethod
    def failure(cls, status: ConversionStatus, message: str = "",
                iterations: int = 0,
                distance: Optional[float] = None) -> "ConversionResult[T]":
        return cls(status, None, message or status.value, iterations, distance)

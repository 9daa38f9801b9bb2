# -*- coding: utf-8 -*-
"""
Swatch: Munsell renotation and colorimetry for surface colours
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Shared fixtures.  Building the renotation table and the MacAdam tessellation
takes a moment, so a single engine serves the whole session.
"""

import numpy as np
import pytest

from swatch_analysis import MunsellEngine, default_engine
from swatch_renotation import RenotationTable


@pytest.fixture(scope="session")
def engine() -> MunsellEngine:
    return default_engine()


@pytest.fixture(scope="session")
def table(engine: MunsellEngine) -> RenotationTable:
    return engine.table


@pytest.fixture(scope="session")
def wavelengths() -> np.ndarray:
    return np.arange(380.0, 781.0, 5.0)


def astm_difference(a: float, b: float) -> float:
    """Signed difference of two ASTM hues on the 100-step circle."""
    return (a - b + 50.0) % 100.0 - 50.0

# -*- coding: utf-8 -*-
# Swatch: Munsell renotation and colorimetry for surface colours
#
# Copyright (c) 2026 opticsWolf
#
# SPDX-License-Identifier: LGPL-3.0-or-later

"""
Swatch package metadata.  ``pyproject.toml`` reads the version from here.
"""

from typing import Final, Tuple

__title__: Final[str] = "Swatch"
__version__: Final[str] = "0.1.0"
__author__: Final[str] = "opticsWolf"
__license__: Final[str] = "LGPL-3.0-or-later"
__copyright__: Final[str] = "Copyright (c) 2026 opticsWolf"
__description__: Final[str] = (
    "Munsell renotation interpolation and inversion for surface colours, "
    "with illuminant C colorimetry, MacAdam limits and CIEDE2000."
)

# Published data the conversions rest on.
__data_sources__: Final[Tuple[str, ...]] = (
    "Newhall, Nickerson & Judd (1943), Munsell renotation (all.dat)",
    "CIE 15:2004 illuminants and 1931 / 1964 standard observers",
    "MacAdam optimal colour stimuli",
)


def metadata_summary() -> dict[str, object]:
    """Project metadata as a plain dict."""
    return {
        "title": __title__,
        "version": __version__,
        "author": __author__,
        "license": __license__,
        "copyright": __copyright__,
        "description": __description__,
        "data_sources": list(__data_sources__),
    }

# -*- coding: utf-8 -*-
"""
Swatch: Munsell renotation and colorimetry for surface colours
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later
"""

import pytest

from swatch_notation import (
    HueFamily,
    MunsellSpec,
    approximate_munsell_from_lch,
    astm_hue_to_munsell_hue,
    bounding_renotation_hues,
    check_if_neutral,
    chromaticity_angle_to_munsell_hue,
    format_munsell,
    munsell_hue_to_astm_hue,
    munsell_hue_to_chromaticity_angle,
    order_munsell_specs,
    parse_munsell,
    renotation_hue_from_index,
    renotation_hue_index,
    spec_from_astm_hue,
)
from swatch_status import InvalidSpecificationError


class TestParsing:
    def test_chromatic(self):
        spec = parse_munsell("5R 4/6")
        assert spec == MunsellSpec(4.0, 5.0, HueFamily.R, 6.0)
        assert not spec.is_neutral

    def test_case_and_whitespace(self):
        assert parse_munsell(" 2.5pb  5 / 8.5 ") == MunsellSpec(5.0, 2.5, HueFamily.PB, 8.5)

    @pytest.mark.parametrize("text", ["N 5.5", "n5.5", "N5.5/", "N5.5/0"])
    def test_neutral(self, text):
        spec = parse_munsell(text)
        assert spec.is_neutral
        assert spec.value == 5.5
        assert spec.chroma == 0.0

    def test_zero_chroma_is_neutral(self):
        assert parse_munsell("5R 4/0") == MunsellSpec.neutral(4.0)

    def test_zero_hue_moves_to_next_family(self):
        spec = parse_munsell("0YR 5/4")
        assert (spec.hue, spec.family) == (10.0, HueFamily.R)

    @pytest.mark.parametrize("text", ["5XX 4/6", "5R 4", "R 4/6", "", "5R 11/2", "12R 4/6"])
    def test_invalid(self, text):
        with pytest.raises(InvalidSpecificationError):
            parse_munsell(text)

    def test_invalid_is_value_error(self):
        with pytest.raises(ValueError):
            parse_munsell("not a colour")


class TestFormatting:
    def test_default_decimals(self):
        assert format_munsell(parse_munsell("5R 4/6")) == "5.00R 4.00/6.00"
        assert format_munsell(MunsellSpec.neutral(5)) == "N5.00"

    def test_custom_decimals(self):
        assert format_munsell(parse_munsell("5R 4/6"), 0, 0, 0) == "5R 4/6"

    def test_str_reparses(self):
        spec = parse_munsell("7.5GY 6.5/3.25")
        assert parse_munsell(str(spec)) == spec


class TestMunsellSpec:
    @pytest.mark.parametrize("args", [(11.0,), (-0.1,), (5.0, 5.0, HueFamily.R, -1.0)])
    def test_out_of_range(self, args):
        with pytest.raises(InvalidSpecificationError):
            MunsellSpec(*args)

    def test_chromatic_needs_family(self):
        with pytest.raises(InvalidSpecificationError):
            MunsellSpec(5.0, 5.0, None, 4.0)

    def test_chromatic_constructor_accepts_letters(self):
        assert MunsellSpec.chromatic(5, "yr", 6, 8).family is HueFamily.YR

    def test_with_chroma_zero_is_neutral(self):
        assert parse_munsell("5R 4/6").with_chroma(0).is_neutral

    def test_colorlab_vector(self):
        assert parse_munsell("5R 4/6").as_colorlab() == (5.0, 4.0, 6.0, 7.0)
        assert MunsellSpec.neutral(3).as_colorlab() == (3.0,)

    def test_family_cycle(self):
        assert HueFamily.PB.next is HueFamily.B
        assert HueFamily.B.previous is HueFamily.PB
        assert HueFamily.R.next is HueFamily.RP


class TestHueScales:
    @pytest.mark.parametrize("hue, family, astm", [
        (10.0, HueFamily.RP, 0.0),
        (10.0, HueFamily.R, 10.0),
        (5.0, HueFamily.YR, 15.0),
        (5.0, HueFamily.PB, 75.0),
        (2.5, HueFamily.RP, 92.5),
    ])
    def test_astm_hue(self, hue, family, astm):
        assert munsell_hue_to_astm_hue(hue, family) == pytest.approx(astm)

    def test_astm_hue_inverse(self):
        assert astm_hue_to_munsell_hue(75.0) == (5.0, HueFamily.PB)
        assert astm_hue_to_munsell_hue(0.0) == (10.0, HueFamily.RP)
        assert astm_hue_to_munsell_hue(100.0) == (10.0, HueFamily.RP)

    def test_bounding_hues_off_grid(self):
        assert bounding_renotation_hues(1.0, HueFamily.R) == ((10.0, HueFamily.RP), (2.5, HueFamily.R))
        assert bounding_renotation_hues(8.0, HueFamily.YR) == ((7.5, HueFamily.YR), (10.0, HueFamily.YR))

    def test_bounding_hues_on_grid(self):
        assert bounding_renotation_hues(5.0, HueFamily.R) == ((5.0, HueFamily.R), (5.0, HueFamily.R))

    def test_renotation_index(self):
        assert renotation_hue_index(2.5, HueFamily.R) == 0
        assert renotation_hue_index(5.0, HueFamily.YR) == 5
        assert renotation_hue_index(10.0, HueFamily.RP) == 39
        assert renotation_hue_from_index(5) == (5.0, HueFamily.YR)

    def test_renotation_index_rejects_off_grid(self):
        with pytest.raises(InvalidSpecificationError):
            renotation_hue_index(3.0, HueFamily.R)

    def test_chromaticity_angle_inverts(self):
        angle = munsell_hue_to_chromaticity_angle(3.7, HueFamily.GY)
        hue, family = chromaticity_angle_to_munsell_hue(angle)
        assert family is HueFamily.GY
        assert hue == pytest.approx(3.7)


class TestUtilities:
    def test_approximate_from_lch(self):
        spec = approximate_munsell_from_lch(50.0, 25.0, 10.0)
        assert spec.family is HueFamily.R
        assert spec.hue == pytest.approx(10.0 / 36.0 * 10.0)
        assert spec.value == 5.0
        assert spec.chroma == 5.0

    def test_check_if_neutral(self):
        assert check_if_neutral(["N5", "5R 4/6", MunsellSpec.neutral(2)]) == [True, False, True]

    def test_order(self):
        specs = [parse_munsell(s) for s in ("5R 4/6", "N5", "5YR 4/6", "5R 3/6")]
        ordered = [format_munsell(s, 0, 0, 0) for s in order_munsell_specs(specs)]
        assert ordered == ["N5", "5R 3/6", "5R 4/6", "5YR 4/6"]

    def test_spec_from_astm_hue(self):
        assert spec_from_astm_hue(4.0, 6.0, 5.0) == MunsellSpec(4.0, 5.0, HueFamily.R, 6.0)

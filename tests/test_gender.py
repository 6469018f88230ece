"""
Тесты нормализации пола
"""

import pytest

from fitnorms.models import Sex
from fitnorms.utils.gender import normalize_sex, to_native


class TestNormalizeSex:

    @pytest.mark.parametrize("token", ["М", "м", " МУЖ ", "M", "male", "MALE"])
    def test_male_tokens(self, token):
        assert normalize_sex(token) == Sex.MALE

    @pytest.mark.parametrize("token", ["Ж", "ж", "ЖЕН", "F", "female", " FEMALE"])
    def test_female_tokens(self, token):
        assert normalize_sex(token) == Sex.FEMALE

    @pytest.mark.parametrize("token", [None, "", "   ", "X", "мальчик", 42])
    def test_unknown_tokens_do_not_raise(self, token):
        assert normalize_sex(token) is None

    def test_canonical_passthrough(self):
        assert normalize_sex(Sex.FEMALE) is Sex.FEMALE

    def test_latin_m_and_cyrillic_m_are_same(self):
        """Латинская M и кириллическая М выглядят одинаково, но это разные символы"""
        assert "M" != "М"
        assert normalize_sex("M") == normalize_sex("М") == Sex.MALE


class TestToNative:

    def test_round_trip_display(self):
        assert to_native("MALE") == "М"
        assert to_native("f") == "Ж"

    def test_unknown(self):
        assert to_native("?") is None

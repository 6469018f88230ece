"""
Тесты извлечения класса из названия группы
"""

import pytest

from fitnorms.models import Group
from fitnorms.utils.group_class import extract_class_number


@pytest.mark.parametrize("name,expected", [
    ("2 П", 2),
    ("4 А", 4),
    ("6Б", 6),
    ("3-спец", 3),
    ("Сборная", None),
    ("", None),
    (None, None),
    ("0 класс", None),
])
def test_extract_class_number(name, expected):
    assert extract_class_number(name) == expected


def test_group_prefers_explicit_class():
    g = Group(name="4 А", academic_year="2024/2025", class_number=5)
    assert g.effective_class_number == 5


def test_group_falls_back_to_name():
    g = Group(name="6Б", academic_year="2024/2025", class_number=None)
    assert g.effective_class_number == 6


def test_group_without_class_is_valid():
    g = Group(name="ОФП", academic_year="2024/2025")
    assert g.effective_class_number is None

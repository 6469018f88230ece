"""
Тесты применимости замера к ученикам (ограничение по полу)
"""

from types import SimpleNamespace

import pytest

from fitnorms.models import Sex, SexScope
from fitnorms.utils.eligibility import effective_sex_scope, eligible_students


def student(name, sex, active=True):
    return SimpleNamespace(id=name, full_name=name, sex=sex, is_active=active)


@pytest.fixture
def roster():
    return [
        student("boy", Sex.MALE),
        student("girl", Sex.FEMALE),
        student("unknown", None),
        student("gone", Sex.MALE, active=False),
    ]


class TestEligibleStudents:

    def test_all_keeps_every_active_student(self, roster):
        names = [s.id for s in eligible_students(SexScope.ALL, roster)]
        assert names == ["boy", "girl", "unknown"]

    def test_male_only(self, roster):
        assert [s.id for s in eligible_students(SexScope.MALE, roster)] == ["boy"]

    def test_female_only(self, roster):
        assert [s.id for s in eligible_students(SexScope.FEMALE, roster)] == ["girl"]

    def test_none_scope_means_all(self, roster):
        assert len(eligible_students(None, roster)) == 3

    def test_raw_tokens_in_roster(self):
        roster = [student("a", "М"), student("b", "ж")]
        assert [s.id for s in eligible_students(SexScope.FEMALE, roster)] == ["b"]

    def test_empty_roster(self):
        assert eligible_students(SexScope.ALL, []) == []


class TestEffectiveSexScope:

    def test_instance_override_wins(self):
        inst = SimpleNamespace(sex_scope=SexScope.FEMALE, template=SimpleNamespace(sex_scope=SexScope.MALE))
        assert effective_sex_scope(inst) == SexScope.FEMALE

    def test_inherits_template_scope(self):
        inst = SimpleNamespace(sex_scope=None, template=SimpleNamespace(sex_scope=SexScope.MALE))
        assert effective_sex_scope(inst) == SexScope.MALE

    def test_falls_back_to_all(self):
        inst = SimpleNamespace(sex_scope=None, template=SimpleNamespace(sex_scope=None))
        assert effective_sex_scope(inst) == SexScope.ALL

# fitnorms/utils/eligibility.py
from __future__ import annotations

from typing import Iterable, List, Optional

from fitnorms.models.enums import SexScope
from fitnorms.utils.gender import normalize_sex


def effective_sex_scope(instance) -> SexScope:
    """
    Для кого действует замер. Порядок разрешения:
      1) собственная настройка замера (instance.sex_scope);
      2) настройка шаблона (template.sex_scope);
      3) ALL.
    """
    if instance.sex_scope is not None:
        return SexScope(instance.sex_scope)
    template = instance.template
    if template is not None and template.sex_scope is not None:
        return SexScope(template.sex_scope)
    return SexScope.ALL


def is_eligible(scope: SexScope, student) -> bool:
    if not student.is_active:
        return False
    if scope == SexScope.ALL:
        return True
    sex = normalize_sex(student.sex)
    # Пол неизвестен: под ограничение по полу не попадает
    return sex is not None and sex.value == scope.value


def eligible_students(scope: Optional[SexScope], roster: Iterable) -> List:
    """
    Подмножество ростера, к которому относится замер.
    Влияет только на состав/счётчики, но не на выбор границ оценок:
    границы всегда ищутся по собственному полу ученика.
    """
    scope = SexScope(scope) if scope is not None else SexScope.ALL
    return [s for s in roster if is_eligible(scope, s)]

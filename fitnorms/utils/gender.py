# fitnorms/utils/gender.py
from __future__ import annotations

from typing import Optional

from fitnorms.models.enums import Sex

# Токены приходят и кириллицей (М/Ж), и латиницей (M/F, MALE/FEMALE)
_MALE_TOKENS = {"М", "МУЖ", "M", "MALE"}
_FEMALE_TOKENS = {"Ж", "ЖЕН", "F", "FEMALE"}

_NATIVE = {Sex.MALE: "М", Sex.FEMALE: "Ж"}


def normalize_sex(token) -> Optional[Sex]:
    """
    Приводит произвольный токен пола к Sex.MALE / Sex.FEMALE.
    Нераспознанное значение → None («пол неизвестен»), исключений не бросает.
    """
    if isinstance(token, Sex):
        return token
    if token is None:
        return None
    if not isinstance(token, str):
        token = getattr(token, "value", str(token))

    normalized = token.strip().upper()
    if normalized in _MALE_TOKENS:
        return Sex.MALE
    if normalized in _FEMALE_TOKENS:
        return Sex.FEMALE
    return None


def to_native(token) -> Optional[str]:
    """Обратное преобразование для отображения: MALE → «М», FEMALE → «Ж»."""
    sex = normalize_sex(token)
    return _NATIVE.get(sex) if sex else None

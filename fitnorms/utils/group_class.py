# fitnorms/utils/group_class.py
from __future__ import annotations

import re
from typing import Optional

_DIGIT = re.compile(r"\d")

MIN_CLASS = 1
MAX_CLASS = 11


def extract_class_number(group_name: Optional[str]) -> Optional[int]:
    """
    Извлекает школьный класс из названия группы: первая цифра в названии.

      "2 П"     → 2
      "4 А"     → 4
      "6Б"      → 6
      "3-спец"  → 3
      "Сборная" → None

    Класс должен быть от 1 до 11, иначе None.
    """
    if not group_name:
        return None

    match = _DIGIT.search(group_name)
    if not match:
        return None

    class_number = int(match.group(0))
    if MIN_CLASS <= class_number <= MAX_CLASS:
        return class_number
    return None

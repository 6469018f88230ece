# fitnorms/utils/grading.py
"""
Перевод результата замера в оценку по таблице границ.

Таблица границ: набор записей (оценка, пол, класс, от, до), диапазоны включительные.
Берётся либо из собственных границ замера (use_custom_boundaries), либо из шаблона.

Алгоритм resolve_grade:
  1) класс неизвестен → UNRESOLVED("class_unknown");
  2) пол неизвестен   → UNRESOLVED("sex_unknown");
  3) фильтр по (пол, класс);
  4) сортировка по оценке по убыванию (5, 4, 3, 2);
  5) ответ: первая запись, в [from, to] которой попадает значение;
  6) ничего не подошло → UNRESOLVED("out_of_range").

При пересечении диапазонов побеждает более высокая оценка (шаги 4–5).
Направление шаблона (LOWER/HIGHER_IS_BETTER) на алгоритм не влияет.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from loguru import logger

from fitnorms.models.enums import Sex
from fitnorms.utils.errors import InvalidGradeCodeError
from fitnorms.utils.gender import normalize_sex

# --------------------- Коды оценок ---------------------

UNSET = "-"
SICK = "Б"     # больной
EXEMPT = "О"   # освобождён
GRADES = (5, 4, 3, 2)
GRADE_CODES = (UNSET, "2", "3", "4", "5", SICK, EXEMPT)

CLASS_UNKNOWN = "class_unknown"
SEX_UNKNOWN = "sex_unknown"
OUT_OF_RANGE = "out_of_range"


def grade_to_code(grade: Optional[int]) -> str:
    """5 → "5", None → "-"."""
    if grade is None:
        return UNSET
    return str(grade)


def normalize_grade_code(code: Optional[str]) -> str:
    """
    Проверяет код оценки. Пустое значение трактуется как "-".
    Латинские B/O, набранные по ошибке, приводятся к кириллице.
    """
    if code is None:
        return UNSET
    c = str(code).strip().upper()
    if not c:
        return UNSET
    c = {"B": SICK, "O": EXEMPT}.get(c, c)
    if c not in GRADE_CODES:
        raise InvalidGradeCodeError(code)
    return c


# --------------------- Таблица границ ---------------------

@dataclass(frozen=True)
class BoundaryEntry:
    grade: int
    sex: Sex
    class_number: int
    from_value: float
    to_value: float

    def contains(self, value: float) -> bool:
        return self.from_value <= value <= self.to_value

    @classmethod
    def from_row(cls, row) -> "BoundaryEntry":
        """Из строки БД (TemplateBoundary / InstanceBoundary) или любого объекта с теми же полями."""
        return cls(
            grade=int(row.grade),
            sex=normalize_sex(row.sex),
            class_number=int(row.class_number),
            from_value=float(row.from_value),
            to_value=float(row.to_value),
        )


@dataclass(frozen=True)
class BoundaryTable:
    entries: Tuple[BoundaryEntry, ...] = ()
    source: str = "template"  # template | instance

    @classmethod
    def of(cls, rows: Iterable, source: str = "template") -> "BoundaryTable":
        return cls(entries=tuple(BoundaryEntry.from_row(r) for r in rows), source=source)

    @classmethod
    def for_instance(cls, instance) -> "BoundaryTable":
        """Собственные границы замера, если включены, иначе границы шаблона."""
        if instance.use_custom_boundaries:
            return cls.of(instance.boundaries, source="instance")
        return cls.of(instance.template.boundaries, source="template")

    def scope(self, sex: Sex, class_number: int) -> List[BoundaryEntry]:
        """Записи для (пол, класс), отсортированные от лучшей оценки к худшей."""
        matching = [e for e in self.entries if e.sex == sex and e.class_number == class_number]
        return sorted(matching, key=lambda e: e.grade, reverse=True)

    def overlaps(self) -> List[Tuple[BoundaryEntry, BoundaryEntry]]:
        """
        Пары пересекающихся диапазонов внутри одного (пол, класс).
        Это только предупреждение для настройщика: расчёт всё равно детерминирован.
        """
        found: List[Tuple[BoundaryEntry, BoundaryEntry]] = []
        ordered = sorted(self.entries, key=lambda e: (e.sex.value, e.class_number, -e.grade))
        for i, a in enumerate(ordered):
            for b in ordered[i + 1:]:
                if (a.sex, a.class_number) != (b.sex, b.class_number):
                    break
                if a.from_value <= b.to_value and b.from_value <= a.to_value:
                    found.append((a, b))
        return found

    def __len__(self) -> int:
        return len(self.entries)


# --------------------- Расчёт ---------------------

@dataclass(frozen=True)
class GradeResult:
    grade: Optional[int] = None
    reason: Optional[str] = None

    @property
    def resolved(self) -> bool:
        return self.grade is not None

    @property
    def code(self) -> str:
        return grade_to_code(self.grade)


def unresolved(reason: str) -> GradeResult:
    return GradeResult(grade=None, reason=reason)


def resolve_grade(
    value: float,
    sex: Optional[Sex],
    class_number: Optional[int],
    table: BoundaryTable,
) -> GradeResult:
    """Оценка 5/4/3/2 или UNRESOLVED с причиной. Исключений для неполных данных не бросает."""
    if class_number is None:
        return unresolved(CLASS_UNKNOWN)

    canonical = normalize_sex(sex)
    if canonical is None:
        return unresolved(SEX_UNKNOWN)

    for entry in table.scope(canonical, class_number):
        if entry.contains(value):
            return GradeResult(grade=entry.grade)

    logger.debug(
        "Значение {} вне всех диапазонов (пол={}, класс={}, источник={})",
        value, canonical.value, class_number, table.source,
    )
    return unresolved(OUT_OF_RANGE)

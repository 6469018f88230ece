# fitnorms/utils/progress.py
"""
Прогресс за учебный год: сопоставление замеров начала и конца года.

Работает над уже загруженными объектами (замеры с результатами, ростер) и ничего
не пишет. Правила:
  - пара складывается по шаблону: нужен и START_OF_YEAR, и END_OF_YEAR,
    иначе шаблон молча исключается из отчёта;
  - delta = end - start, только если оба значения есть;
  - для LOWER_IS_BETTER улучшение: это уменьшение значения;
  - промежуточные REGULAR-замеры в [start_date, end_date]: только для информации.
"""
from __future__ import annotations

from collections import OrderedDict
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from fitnorms.models.enums import Direction, Period
from fitnorms.utils.eligibility import effective_sex_scope, eligible_students

IMPROVED = "improved"
WORSENED = "worsened"
UNCHANGED = "unchanged"
NO_DATA = "no_data"

TOP_PROGRESS_LIMIT = 20
CLASS_TOP_PROGRESS_LIMIT = 50


# --------------------- Структуры отчёта ---------------------

@dataclass
class IntermediatePoint:
    instance_id: str
    date: date
    value: Optional[float]
    grade: str


@dataclass
class StudentProgress:
    student_id: str
    full_name: str
    start_value: Optional[float]
    end_value: Optional[float]
    delta: Optional[float]
    outcome: str
    start_grade: Optional[str] = None
    end_grade: Optional[str] = None
    intermediate: List[IntermediatePoint] = field(default_factory=list)


@dataclass
class ProgressSummary:
    improved_count: int = 0
    worsened_count: int = 0
    same_count: int = 0
    no_data_count: int = 0

    def add(self, outcome: str) -> None:
        if outcome == IMPROVED:
            self.improved_count += 1
        elif outcome == WORSENED:
            self.worsened_count += 1
        elif outcome == UNCHANGED:
            self.same_count += 1
        else:
            self.no_data_count += 1


@dataclass
class TemplateProgress:
    instance_id: str  # замер начала года: идентификатор пары
    end_instance_id: str
    template_id: str
    name: str
    unit: Optional[str]
    direction: str
    start_date: date
    end_date: date
    results: List[StudentProgress] = field(default_factory=list)
    summary: Optional[ProgressSummary] = None


@dataclass
class ProgressReport:
    academic_year: str
    group_id: str
    group_name: str
    student_id: Optional[str] = None
    student_name: Optional[str] = None
    norms: List[TemplateProgress] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class TemplatePair:
    start: Any
    end: Any
    intermediate: List[Any] = field(default_factory=list)


# --------------------- Правила ---------------------

def compute_delta(start_value: Optional[float], end_value: Optional[float]) -> Optional[float]:
    if start_value is None or end_value is None:
        return None
    return end_value - start_value


def classify_outcome(delta: Optional[float], direction) -> str:
    """improved / worsened / unchanged / no_data с учётом направления шаблона."""
    if delta is None:
        return NO_DATA
    if delta == 0:
        return UNCHANGED
    better = delta < 0 if Direction(direction) == Direction.LOWER_IS_BETTER else delta > 0
    return IMPROVED if better else WORSENED


def directional_progress(start_value: float, end_value: float, direction) -> float:
    """Прогресс со знаком «чем больше, тем лучше» для любого направления."""
    if Direction(direction) == Direction.LOWER_IS_BETTER:
        return start_value - end_value
    return end_value - start_value


def is_better(direction, candidate: float, current: float) -> bool:
    if Direction(direction) == Direction.LOWER_IS_BETTER:
        return candidate < current
    return candidate > current


def pair_instances(instances: Iterable, include_intermediate: bool = False) -> "OrderedDict[str, TemplatePair]":
    """
    Группирует замеры по шаблону и оставляет только полные пары START/END.
    Если замеров одного периода несколько (старые данные), берётся самый поздний.
    """
    ordered = sorted(instances, key=lambda i: (i.test_date, i.id))
    by_template: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()

    for inst in ordered:
        entry = by_template.setdefault(inst.template_id, {"start": None, "end": None, "regular": []})
        period = Period(inst.period)
        if period == Period.START_OF_YEAR:
            entry["start"] = inst
        elif period == Period.END_OF_YEAR:
            entry["end"] = inst
        elif include_intermediate:
            entry["regular"].append(inst)

    pairs: "OrderedDict[str, TemplatePair]" = OrderedDict()
    for template_id, entry in by_template.items():
        start, end = entry["start"], entry["end"]
        if start is None or end is None:
            continue
        window = [
            r for r in entry["regular"]
            if start.test_date <= r.test_date <= end.test_date
        ]
        pairs[template_id] = TemplatePair(start=start, end=end, intermediate=window)
    return pairs


def _results_by_student(instance) -> Dict[str, Any]:
    return {r.student_id: r for r in instance.results}


def _intermediate_points(pair: TemplatePair, student_id: str) -> List[IntermediatePoint]:
    points: List[IntermediatePoint] = []
    for inst in pair.intermediate:
        record = _results_by_student(inst).get(student_id)
        if record is None:
            continue
        points.append(IntermediatePoint(
            instance_id=inst.id,
            date=inst.test_date,
            value=record.value,
            grade=record.grade,
        ))
    return points


def _template_progress(pair: TemplatePair) -> TemplateProgress:
    start, end = pair.start, pair.end
    template = start.template
    return TemplateProgress(
        instance_id=start.id,
        end_instance_id=end.id,
        template_id=template.id,
        name=start.display_name,
        unit=start.display_unit,
        direction=Direction(template.direction).value,
        start_date=start.test_date,
        end_date=end.test_date,
    )


def _student_row(pair: TemplatePair, student, start_results, end_results, direction) -> StudentProgress:
    start_rec = start_results.get(student.id)
    end_rec = end_results.get(student.id)
    start_value = start_rec.value if start_rec else None
    end_value = end_rec.value if end_rec else None
    delta = compute_delta(start_value, end_value)
    return StudentProgress(
        student_id=student.id,
        full_name=student.full_name,
        start_value=start_value,
        end_value=end_value,
        delta=delta,
        outcome=classify_outcome(delta, direction),
        start_grade=start_rec.grade if start_rec else None,
        end_grade=end_rec.grade if end_rec else None,
        intermediate=_intermediate_points(pair, student.id) if pair.intermediate else [],
    )


# --------------------- Отчёты ---------------------

def build_group_report(
    group,
    instances: Iterable,
    roster: Iterable,
    academic_year: str,
    include_intermediate: bool = False,
) -> ProgressReport:
    """Отчёт по группе: строки по всем подходящим ученикам + сводка по каждому шаблону."""
    roster = list(roster)
    report = ProgressReport(academic_year=academic_year, group_id=group.id, group_name=group.name)

    for pair in pair_instances(instances, include_intermediate).values():
        item = _template_progress(pair)
        item.summary = ProgressSummary()
        start_results = _results_by_student(pair.start)
        end_results = _results_by_student(pair.end)

        # Состав строк задаёт замер начала года; ограничение по полу у замера конца года не учитывается
        for student in eligible_students(effective_sex_scope(pair.start), roster):
            row = _student_row(pair, student, start_results, end_results, item.direction)
            item.results.append(row)
            item.summary.add(row.outcome)

        report.norms.append(item)
    return report


def build_student_report(
    student,
    group,
    instances: Iterable,
    academic_year: str,
    include_intermediate: bool = False,
) -> ProgressReport:
    """Отчёт по одному ученику: одна строка на каждую полную пару шаблона."""
    report = ProgressReport(
        academic_year=academic_year,
        group_id=group.id,
        group_name=group.name,
        student_id=student.id,
        student_name=student.full_name,
    )
    for pair in pair_instances(instances, include_intermediate).values():
        item = _template_progress(pair)
        item.results.append(_student_row(
            pair, student, _results_by_student(pair.start), _results_by_student(pair.end), item.direction,
        ))
        report.norms.append(item)
    return report


# --------------------- Лучшие результаты ---------------------

def _control_values(instances: Iterable, active_ids: set) -> "OrderedDict[tuple, Dict[str, Any]]":
    """(student_id, template_id) → {start, end, template} по контрольным замерам."""
    values: "OrderedDict[tuple, Dict[str, Any]]" = OrderedDict()
    for inst in sorted(instances, key=lambda i: (i.test_date, i.id)):
        period = Period(inst.period)
        if period == Period.REGULAR:
            continue
        slot = "start" if period == Period.START_OF_YEAR else "end"
        for rec in inst.results:
            if rec.value is None or rec.student_id not in active_ids:
                continue
            entry = values.setdefault(
                (rec.student_id, inst.template_id),
                {"start": None, "end": None, "template": inst.template},
            )
            entry[slot] = rec.value
    return values


def best_by_template(instances: Iterable, roster: Iterable) -> List[Dict[str, Any]]:
    """
    Лучший «текущий» результат по каждому шаблону среди активных учеников.
    Текущий = конец года, если есть, иначе начало года.
    """
    students = {s.id: s for s in roster if s.is_active}
    best: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()

    for (student_id, template_id), entry in _control_values(instances, set(students)).items():
        current = entry["end"] if entry["end"] is not None else entry["start"]
        if current is None:
            continue
        template = entry["template"]
        existing = best.get(template_id)
        if existing is None or is_better(template.direction, current, existing["value"]):
            best[template_id] = {
                "template_id": template_id,
                "template_name": template.name,
                "student_id": student_id,
                "student_name": students[student_id].full_name,
                "value": current,
            }
    return list(best.values())


def top_progress(instances: Iterable, roster: Iterable, limit: Optional[int] = TOP_PROGRESS_LIMIT) -> List[Dict[str, Any]]:
    """Рейтинг прогресса между началом и концом года (лучшие сначала)."""
    students = {s.id: s for s in roster if s.is_active}
    items: List[Dict[str, Any]] = []

    for (student_id, template_id), entry in _control_values(instances, set(students)).items():
        if entry["start"] is None or entry["end"] is None:
            continue
        template = entry["template"]
        items.append({
            "student_id": student_id,
            "student_name": students[student_id].full_name,
            "template_id": template_id,
            "template_name": template.name,
            "start_value": entry["start"],
            "end_value": entry["end"],
            "progress": directional_progress(entry["start"], entry["end"], template.direction),
        })

    items.sort(key=lambda x: x["progress"], reverse=True)
    return items[:limit]


def group_stats(group, instances: Iterable, roster: Iterable) -> List[Dict[str, Any]]:
    """
    Сводка группы по каждому шаблону: среднее и лучшее «текущее» значение
    среди активных учеников (для сравнения групп одного класса).
    """
    students = {s.id: s for s in roster if s.is_active}
    stats: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()

    for (student_id, template_id), entry in _control_values(instances, set(students)).items():
        current = entry["end"] if entry["end"] is not None else entry["start"]
        if current is None:
            continue
        template = entry["template"]
        agg = stats.setdefault(template_id, {
            "template": template, "sum": 0.0, "count": 0, "best": None, "best_student_id": None,
        })
        agg["sum"] += current
        agg["count"] += 1
        if agg["best"] is None or is_better(template.direction, current, agg["best"]):
            agg["best"] = current
            agg["best_student_id"] = student_id

    return [
        {
            "group_id": group.id,
            "group_name": group.name,
            "template_id": template_id,
            "template_name": agg["template"].name,
            "avg_value": agg["sum"] / agg["count"],
            "best_value": agg["best"],
            "best_student_id": agg["best_student_id"],
            "best_student_name": students[agg["best_student_id"]].full_name,
        }
        for template_id, agg in stats.items()
    ]

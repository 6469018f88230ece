# fitnorms/utils/instances.py
from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fitnorms.models.enums import Period, Sex, SexScope
from fitnorms.models.group import Group
from fitnorms.models.instance import InstanceBoundary, MeasurementInstance
from fitnorms.models.template import NormTemplate
from fitnorms.utils.errors import ContractError, InstanceAlreadyExistsError, NotFoundError
from fitnorms.utils.grading import BoundaryTable, GRADES
from fitnorms.utils.gender import normalize_sex


def _parse_period(period) -> Period:
    try:
        return Period(period) if not isinstance(period, Period) else period
    except ValueError as e:
        raise ContractError(f"period должен быть одним из {[p.value for p in Period]}") from e


def _boundary_rows(boundaries: Iterable[Dict[str, Any]]) -> List[InstanceBoundary]:
    rows: List[InstanceBoundary] = []
    for b in boundaries:
        grade = int(b["grade"])
        if grade not in GRADES:
            raise ContractError(f"Оценка границы должна быть 2..5, получено {grade}")
        sex = normalize_sex(b.get("sex"))
        if sex is None:
            raise ContractError(f"Некорректный пол в границе: {b.get('sex')!r}")
        from_value, to_value = float(b["from_value"]), float(b["to_value"])
        if from_value > to_value:
            raise ContractError(f"Граница {grade}: from_value > to_value ({from_value} > {to_value})")
        rows.append(InstanceBoundary(
            grade=grade,
            sex=Sex(sex),
            class_number=int(b["class_number"]),
            from_value=from_value,
            to_value=to_value,
        ))
    return rows


def create_instance(
    db: Session,
    group_id: str,
    template_id: str,
    test_date: date,
    period: Period | str = Period.REGULAR,
    name_override: Optional[str] = None,
    unit_override: Optional[str] = None,
    sex_scope: Optional[SexScope] = None,
    use_custom_boundaries: bool = False,
    boundaries: Optional[Iterable[Dict[str, Any]]] = None,
) -> MeasurementInstance:
    """
    Создаёт замер для группы по шаблону.

    Уникальность контрольных замеров (START/END на группу, шаблон и учебный год)
    обеспечивает уникальный индекс в БД, а не предварительная проверка:
    конфликт превращается в InstanceAlreadyExistsError.
    """
    group = db.get(Group, group_id)
    if not group:
        raise NotFoundError("Группа", group_id)
    template = db.get(NormTemplate, template_id)
    if not template:
        raise NotFoundError("Шаблон", template_id)

    period = _parse_period(period)
    class_number = group.effective_class_number
    if not template.covers_class(class_number):
        raise ContractError(
            f"Шаблон предназначен для классов {template.class_from}-{template.class_to}, "
            f"а группа имеет класс {class_number}"
        )

    instance = MeasurementInstance(
        group_id=group.id,
        template_id=template.id,
        test_date=test_date,
        period=period,
        academic_year=group.academic_year,
        name_override=name_override or None,
        unit_override=unit_override or None,
        sex_scope=SexScope(sex_scope) if sex_scope else None,
        use_custom_boundaries=bool(use_custom_boundaries),
    )
    if use_custom_boundaries and boundaries:
        instance.boundaries = _boundary_rows(boundaries)

    db.add(instance)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if period == Period.REGULAR:
            raise
        raise InstanceAlreadyExistsError(group.id, template.id, period.value, group.academic_year) from e

    db.refresh(instance)
    if instance.use_custom_boundaries:
        for a, b in BoundaryTable.for_instance(instance).overlaps():
            logger.warning(
                "Замер {}: пересекаются диапазоны оценок {} и {} ({}, класс {})",
                instance.id, a.grade, b.grade, a.sex.value, a.class_number,
            )
    logger.info(
        "Создан замер {} ({}) для группы {} по шаблону {}",
        instance.id, period.value, group.id, template.id,
    )
    return instance

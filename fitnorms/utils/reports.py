# fitnorms/utils/reports.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from loguru import logger
from sqlalchemy.orm import Session, selectinload

from fitnorms.models.enums import CONTROL_PERIODS, Period
from fitnorms.models.group import Group, Student
from fitnorms.models.instance import MeasurementInstance
from fitnorms.utils.errors import ContractError, NotFoundError
from fitnorms.utils.progress import (
    CLASS_TOP_PROGRESS_LIMIT,
    ProgressReport,
    best_by_template,
    build_group_report,
    build_student_report,
    group_stats,
    top_progress,
)


def _load_instances(db: Session, group_id: str, academic_year: str, include_intermediate: bool) -> List[MeasurementInstance]:
    periods = list(CONTROL_PERIODS) + ([Period.REGULAR] if include_intermediate else [])
    return (
        db.query(MeasurementInstance)
        .options(
            selectinload(MeasurementInstance.template),
            selectinload(MeasurementInstance.results),
        )
        .filter(
            MeasurementInstance.group_id == group_id,
            MeasurementInstance.academic_year == academic_year,
            MeasurementInstance.period.in_(periods),
        )
        .order_by(MeasurementInstance.test_date.asc())
        .all()
    )


def group_progress_report(
    db: Session,
    group_id: str,
    academic_year: Optional[str] = None,
    include_intermediate: bool = False,
) -> ProgressReport:
    """Отчёт о прогрессе группы; год по умолчанию: учебный год группы."""
    group = db.get(Group, group_id)
    if not group:
        raise NotFoundError("Группа", group_id)
    year = academic_year or group.academic_year

    instances = _load_instances(db, group.id, year, include_intermediate)
    report = build_group_report(group, instances, group.students, year, include_intermediate)
    logger.debug("Отчёт по группе {} за {}: шаблонов {}", group.id, year, len(report.norms))
    return report


def student_progress_report(
    db: Session,
    student_id: str,
    academic_year: Optional[str] = None,
    include_intermediate: bool = False,
) -> ProgressReport:
    """Отчёт о прогрессе ученика; год по умолчанию: учебный год его группы."""
    student = db.get(Student, student_id)
    if not student:
        raise NotFoundError("Ученик", student_id)
    group = student.group
    year = academic_year or group.academic_year

    instances = _load_instances(db, group.id, year, include_intermediate)
    return build_student_report(student, group, instances, year, include_intermediate)


def control_best(db: Session, group_id: str, academic_year: Optional[str] = None) -> Dict[str, Any]:
    """Лучшие результаты по нормативам и топ прогресса группы за год."""
    group = db.get(Group, group_id)
    if not group:
        raise NotFoundError("Группа", group_id)
    year = academic_year or group.academic_year

    instances = _load_instances(db, group.id, year, include_intermediate=False)
    return {
        "academic_year": year,
        "best_by_norm": best_by_template(instances, group.students),
        "top_progress": top_progress(instances, group.students),
    }


def grade_control_best(db: Session, class_number: int, academic_year: Optional[str] = None) -> Dict[str, Any]:
    """
    Сравнение групп одного класса (параллели): сводка по каждой группе и шаблону
    и общий топ прогресса. Без явного года каждая группа берётся за свой учебный год.
    """
    if not 1 <= class_number <= 11:
        raise ContractError(f"Номер класса должен быть от 1 до 11, получено {class_number}")

    groups = sorted(
        (g for g in db.query(Group).all() if g.effective_class_number == class_number),
        key=lambda g: g.name,
    )

    stats: List[Dict[str, Any]] = []
    progress: List[Dict[str, Any]] = []
    for group in groups:
        year = academic_year or group.academic_year
        instances = _load_instances(db, group.id, year, include_intermediate=False)
        stats.extend(group_stats(group, instances, group.students))
        for item in top_progress(instances, group.students, limit=None):
            progress.append({"group_id": group.id, "group_name": group.name, **item})

    stats.sort(key=lambda s: (s["group_name"], s["template_name"]))
    progress.sort(key=lambda x: x["progress"], reverse=True)
    logger.debug("Сводка по {} классу: групп {}, строк прогресса {}", class_number, len(groups), len(progress))
    return {
        "class_number": class_number,
        "academic_year": academic_year,
        "group_stats": stats,
        "top_progress": progress[:CLASS_TOP_PROGRESS_LIMIT],
    }

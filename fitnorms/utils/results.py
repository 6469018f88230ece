# fitnorms/utils/results.py
from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fitnorms.models.group import Student
from fitnorms.models.instance import MeasurementInstance
from fitnorms.models.result import ResultRecord
from fitnorms.utils.errors import ContractError, NotFoundError
from fitnorms.utils.grading import UNSET, BoundaryTable, normalize_grade_code, resolve_grade


def _get_instance(db: Session, instance_id: str) -> MeasurementInstance:
    instance = db.get(MeasurementInstance, instance_id)
    if not instance:
        raise NotFoundError("Замер", instance_id)
    return instance


def _get_student(db: Session, student_id: str) -> Student:
    student = db.get(Student, student_id)
    if not student:
        raise NotFoundError("Ученик", student_id)
    return student


def compute_grade_code(student: Student, instance: MeasurementInstance, value: Optional[float]) -> str:
    """Автоматическая оценка: по собственному полу ученика и классу группы. UNRESOLVED → "-"."""
    if value is None:
        return UNSET
    result = resolve_grade(
        value,
        student.sex,
        instance.group.effective_class_number,
        BoundaryTable.for_instance(instance),
    )
    if not result.resolved:
        logger.info(
            "Оценка не определена: ученик={} замер={} значение={} причина={}",
            student.id, instance.id, value, result.reason,
        )
    return result.code


def _apply(
    record: ResultRecord,
    student: Student,
    instance: MeasurementInstance,
    value: Optional[float],
    override: str,
    reset_override: bool,
) -> None:
    record.value = value
    record.template_id = instance.template_id
    record.title = instance.display_name
    record.unit = instance.display_unit
    record.measured_on = instance.test_date

    if reset_override:
        record.grade_is_manual = False

    if override != UNSET:
        # Ручная оценка всегда важнее автоматической
        record.grade = override
        record.grade_is_manual = True
    elif not record.grade_is_manual:
        record.grade = compute_grade_code(student, instance, value)


def upsert_result(
    db: Session,
    student_id: str,
    instance_id: str,
    value: Optional[float],
    explicit_grade: Optional[str] = None,
    reset_override: bool = False,
    commit: bool = True,
) -> ResultRecord:
    """
    Записывает результат ученика по замеру: не более одной записи на пару (ученик, замер).

    - explicit_grade (кроме "-") сохраняется как есть и закрепляется: последующие
      отправки без ручной оценки пересчитывают только значение, но не оценку;
    - иначе оценка считается по таблице границ (UNRESOLVED → "-");
    - существующая запись обновляется на месте, иначе создаётся новая.
    Исключения: NotFoundError, ContractError, InvalidGradeCodeError.
    """
    instance = _get_instance(db, instance_id)
    student = _get_student(db, student_id)
    if student.group_id != instance.group_id:
        raise ContractError(f"Ученик '{student_id}' не состоит в группе замера '{instance_id}'")

    override = normalize_grade_code(explicit_grade)
    value = float(value) if value is not None else None

    record = (
        db.query(ResultRecord)
        .filter(ResultRecord.student_id == student_id, ResultRecord.instance_id == instance_id)
        .first()
    )
    if record is None:
        record = ResultRecord(student_id=student_id, instance_id=instance_id, grade=UNSET, grade_is_manual=False)
        _apply(record, student, instance, value, override, reset_override)
        try:
            with db.begin_nested():
                db.add(record)
        except IntegrityError:
            # Параллельная вставка успела раньше: обновляем её запись (последняя запись побеждает)
            logger.warning("Гонка вставки результата: ученик={} замер={}", student_id, instance_id)
            record = (
                db.query(ResultRecord)
                .filter(ResultRecord.student_id == student_id, ResultRecord.instance_id == instance_id)
                .one()
            )
            _apply(record, student, instance, value, override, reset_override)
    else:
        _apply(record, student, instance, value, override, reset_override)

    if commit:
        db.commit()
        db.refresh(record)
    else:
        db.flush()
    return record


def upsert_results(db: Session, instance_id: str, entries: Iterable[Dict[str, Any]]) -> List[ResultRecord]:
    """
    Пакетная запись результатов одного замера в одной транзакции.
    entries: [{student_id, value, grade?}]
    """
    records: List[ResultRecord] = []
    try:
        for e in entries:
            records.append(upsert_result(
                db,
                student_id=e["student_id"],
                instance_id=instance_id,
                value=e.get("value"),
                explicit_grade=e.get("grade"),
                commit=False,
            ))
        db.commit()
    except Exception:
        db.rollback()
        raise

    for r in records:
        db.refresh(r)
    logger.info("Сохранено результатов по замеру {}: {}", instance_id, len(records))
    return records


def add_individual_result(
    db: Session,
    student_id: str,
    title: str,
    grade: Optional[str],
    value: Optional[float] = None,
    unit: Optional[str] = None,
    measured_on: Optional[date] = None,
    comment: Optional[str] = None,
) -> ResultRecord:
    """Индивидуальная запись из карточки ученика: без замера, оценка вносится вручную."""
    student = _get_student(db, student_id)
    if not title or not title.strip():
        raise ContractError("Название норматива обязательно")

    code = normalize_grade_code(grade)
    record = ResultRecord(
        student_id=student.id,
        instance_id=None,
        title=title.strip(),
        unit=unit or None,
        value=float(value) if value is not None else None,
        grade=code,
        grade_is_manual=code != UNSET,
        measured_on=measured_on or date.today(),
        comment=comment or None,
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    return record

from __future__ import annotations
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from fitnorms.database import get_db
from fitnorms.models.instance import MeasurementInstance
from fitnorms.routers.errors import to_http
from fitnorms.schemas.instance import EligibleOut, InstanceCreate, InstanceOut, StudentOut
from fitnorms.schemas.result import IndividualResultIn, ResultOut, ResultsSubmit
from fitnorms.utils.eligibility import effective_sex_scope, eligible_students
from fitnorms.utils.errors import NormsError
from fitnorms.utils.instances import create_instance
from fitnorms.utils.results import add_individual_result, upsert_results

router = APIRouter(tags=["Instances"])


@router.post("/groups/{group_id}/instances", response_model=InstanceOut, status_code=201)
def create_group_instance(group_id: str, payload: InstanceCreate, db: Session = Depends(get_db)):
    """
    Создаёт замер для группы. Повторный замер начала/конца года
    по тому же шаблону за тот же учебный год → 409.
    """
    try:
        return create_instance(
            db,
            group_id=group_id,
            template_id=payload.template_id,
            test_date=payload.test_date,
            period=payload.period,
            name_override=payload.name_override,
            unit_override=payload.unit_override,
            sex_scope=payload.sex_scope,
            use_custom_boundaries=payload.use_custom_boundaries,
            boundaries=[b.model_dump() for b in payload.boundaries],
        )
    except NormsError as e:
        raise to_http(e)


@router.get("/instances/{instance_id}/eligible", response_model=EligibleOut)
def list_eligible(instance_id: str, db: Session = Depends(get_db)):
    """Ученики группы, к которым относится замер (по ограничению пола)."""
    instance = db.get(MeasurementInstance, instance_id)
    if not instance:
        raise HTTPException(status_code=404, detail="Замер не найден")

    scope = effective_sex_scope(instance)
    students = eligible_students(scope, instance.group.students)
    return EligibleOut(
        instance_id=instance.id,
        sex_scope=scope.value,
        students=[StudentOut.model_validate(s) for s in students],
    )


@router.post("/instances/{instance_id}/results", response_model=List[ResultOut])
def submit_results(instance_id: str, payload: ResultsSubmit, db: Session = Depends(get_db)):
    """Сохраняет результаты замера (обновление на месте, без дублей)."""
    try:
        return upsert_results(db, instance_id, [r.model_dump() for r in payload.results])
    except NormsError as e:
        raise to_http(e)


@router.post("/students/{student_id}/results/individual", response_model=ResultOut, status_code=201)
def add_individual(student_id: str, payload: IndividualResultIn, db: Session = Depends(get_db)):
    try:
        return add_individual_result(
            db,
            student_id=student_id,
            title=payload.title,
            grade=payload.grade,
            value=payload.value,
            unit=payload.unit,
            measured_on=payload.measured_on,
            comment=payload.comment,
        )
    except NormsError as e:
        raise to_http(e)

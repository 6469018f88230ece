from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from fitnorms.database import get_db
from fitnorms.models.instance import MeasurementInstance
from fitnorms.models.template import NormTemplate
from fitnorms.schemas.grading import ResolveGradeRequest, ResolveGradeResponse
from fitnorms.utils.gender import normalize_sex
from fitnorms.utils.grading import BoundaryTable, resolve_grade

router = APIRouter(prefix="/grades", tags=["Grades"])


@router.post("/resolve", response_model=ResolveGradeResponse)
def resolve(payload: ResolveGradeRequest, db: Session = Depends(get_db)):
    """
    Рассчитывает оценку по значению без сохранения.
    Границы берутся из замера (instance_id) или из шаблона (template_id).
    """
    if payload.instance_id:
        instance = db.get(MeasurementInstance, payload.instance_id)
        if not instance:
            raise HTTPException(status_code=404, detail="Замер не найден")
        table = BoundaryTable.for_instance(instance)
    elif payload.template_id:
        template = db.get(NormTemplate, payload.template_id)
        if not template:
            raise HTTPException(status_code=404, detail="Шаблон не найден")
        table = BoundaryTable.of(template.boundaries)
    else:
        raise HTTPException(status_code=400, detail="Нужен instance_id или template_id")

    result = resolve_grade(payload.value, normalize_sex(payload.sex), payload.class_number, table)
    return ResolveGradeResponse(
        resolved=result.resolved,
        grade=result.grade,
        code=result.code,
        reason=result.reason,
    )

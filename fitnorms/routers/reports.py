from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from fitnorms.database import get_db
from fitnorms.routers.errors import to_http
from fitnorms.schemas.report import ControlBestOut, GradeControlBestOut, ProgressReportOut
from fitnorms.utils.errors import NormsError
from fitnorms.utils.reports import (
    control_best,
    grade_control_best,
    group_progress_report,
    student_progress_report,
)

router = APIRouter(tags=["Reports"])


@router.get("/groups/{group_id}/reports/progress", response_model=ProgressReportOut)
def group_progress(
    group_id: str,
    year: Optional[str] = Query(None, description="Учебный год, например 2024/2025"),
    include_intermediate: bool = False,
    db: Session = Depends(get_db),
):
    """
    Прогресс группы: начало vs конец года по каждому шаблону.
    Шаблоны без пары START/END в отчёт не попадают.
    """
    try:
        return group_progress_report(db, group_id, year, include_intermediate).to_dict()
    except NormsError as e:
        raise to_http(e)


@router.get("/students/{student_id}/reports/progress", response_model=ProgressReportOut)
def student_progress(
    student_id: str,
    year: Optional[str] = None,
    include_intermediate: bool = False,
    db: Session = Depends(get_db),
):
    try:
        return student_progress_report(db, student_id, year, include_intermediate).to_dict()
    except NormsError as e:
        raise to_http(e)


@router.get("/groups/{group_id}/control-best", response_model=ControlBestOut)
def group_control_best(group_id: str, year: Optional[str] = None, db: Session = Depends(get_db)):
    """Лучшие результаты по нормативам и топ-20 прогресса за год."""
    try:
        return control_best(db, group_id, year)
    except NormsError as e:
        raise to_http(e)


@router.get("/grades/{class_number}/control-best", response_model=GradeControlBestOut)
def class_control_best(class_number: int, year: Optional[str] = None, db: Session = Depends(get_db)):
    """Сравнение групп одного класса: средние и лучшие результаты, общий топ прогресса."""
    try:
        return grade_control_best(db, class_number, year)
    except NormsError as e:
        raise to_http(e)

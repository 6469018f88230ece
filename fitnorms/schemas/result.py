from datetime import date, datetime
from pydantic import BaseModel
from typing import List, Optional


class ResultIn(BaseModel):
    student_id: str
    value: Optional[float] = None
    grade: Optional[str] = None  # ручная оценка: "2".."5", "Б", "О"; "-": считать автоматически


class ResultsSubmit(BaseModel):
    results: List[ResultIn]


class IndividualResultIn(BaseModel):
    title: str
    grade: str
    value: Optional[float] = None
    unit: Optional[str] = None
    measured_on: Optional[date] = None
    comment: Optional[str] = None


class ResultOut(BaseModel):
    id: str
    student_id: str
    instance_id: Optional[str] = None
    title: Optional[str] = None
    unit: Optional[str] = None
    value: Optional[float] = None
    grade: str
    grade_is_manual: bool
    measured_on: date
    updated_at: datetime
    class Config:
        from_attributes = True

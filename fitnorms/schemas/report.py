from datetime import date
from pydantic import BaseModel
from typing import List, Optional


class IntermediatePointOut(BaseModel):
    instance_id: str
    date: date
    value: Optional[float] = None
    grade: str


class StudentProgressOut(BaseModel):
    student_id: str
    full_name: str
    start_value: Optional[float] = None
    end_value: Optional[float] = None
    delta: Optional[float] = None
    outcome: str
    start_grade: Optional[str] = None
    end_grade: Optional[str] = None
    intermediate: List[IntermediatePointOut] = []


class SummaryOut(BaseModel):
    improved_count: int
    worsened_count: int
    same_count: int
    no_data_count: int


class TemplateProgressOut(BaseModel):
    instance_id: str
    end_instance_id: str
    template_id: str
    name: str
    unit: Optional[str] = None
    direction: str
    start_date: date
    end_date: date
    results: List[StudentProgressOut]
    summary: Optional[SummaryOut] = None


class ProgressReportOut(BaseModel):
    academic_year: str
    group_id: str
    group_name: str
    student_id: Optional[str] = None
    student_name: Optional[str] = None
    norms: List[TemplateProgressOut]


class BestByNormOut(BaseModel):
    template_id: str
    template_name: str
    student_id: str
    student_name: str
    value: float


class TopProgressOut(BaseModel):
    student_id: str
    student_name: str
    template_id: str
    template_name: str
    start_value: float
    end_value: float
    progress: float


class ControlBestOut(BaseModel):
    academic_year: str
    best_by_norm: List[BestByNormOut]
    top_progress: List[TopProgressOut]


class GroupStatOut(BaseModel):
    group_id: str
    group_name: str
    template_id: str
    template_name: str
    avg_value: float
    best_value: float
    best_student_id: str
    best_student_name: str


class ClassTopProgressOut(TopProgressOut):
    group_id: str
    group_name: str


class GradeControlBestOut(BaseModel):
    class_number: int
    academic_year: Optional[str] = None
    group_stats: List[GroupStatOut]
    top_progress: List[ClassTopProgressOut]

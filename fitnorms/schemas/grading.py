from pydantic import BaseModel
from typing import Optional


class ResolveGradeRequest(BaseModel):
    value: float
    sex: Optional[str] = None           # М/Ж, M/F, MALE/FEMALE
    class_number: Optional[int] = None
    # Таблица границ: замер (с учётом его собственных границ) или шаблон
    instance_id: Optional[str] = None
    template_id: Optional[str] = None


class ResolveGradeResponse(BaseModel):
    resolved: bool
    grade: Optional[int] = None
    code: str
    reason: Optional[str] = None

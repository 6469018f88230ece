from datetime import date
from pydantic import BaseModel, Field
from typing import List, Literal, Optional


class BoundaryIn(BaseModel):
    grade: int = Field(ge=2, le=5)
    sex: str
    class_number: int
    from_value: float
    to_value: float


class InstanceCreate(BaseModel):
    template_id: str
    test_date: date
    period: Literal["REGULAR", "START_OF_YEAR", "END_OF_YEAR"] = "REGULAR"
    name_override: Optional[str] = None
    unit_override: Optional[str] = None
    sex_scope: Optional[Literal["ALL", "MALE", "FEMALE"]] = None
    use_custom_boundaries: bool = False
    boundaries: List[BoundaryIn] = []


class InstanceOut(BaseModel):
    id: str
    template_id: str
    group_id: str
    test_date: date
    period: str
    academic_year: str
    name_override: Optional[str] = None
    unit_override: Optional[str] = None
    sex_scope: Optional[str] = None
    use_custom_boundaries: bool
    class Config:
        from_attributes = True


class StudentOut(BaseModel):
    id: str
    full_name: str
    sex: Optional[str] = None
    class Config:
        from_attributes = True


class EligibleOut(BaseModel):
    instance_id: str
    sex_scope: str
    students: List[StudentOut]

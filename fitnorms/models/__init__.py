from fitnorms.models.enums import Sex, SexScope, Direction, Period, CONTROL_PERIODS
from fitnorms.models.template import NormTemplate, TemplateBoundary
from fitnorms.models.group import Group, Student
from fitnorms.models.instance import MeasurementInstance, InstanceBoundary
from fitnorms.models.result import ResultRecord

__all__ = [
    "Sex",
    "SexScope",
    "Direction",
    "Period",
    "CONTROL_PERIODS",
    "NormTemplate",
    "TemplateBoundary",
    "Group",
    "Student",
    "MeasurementInstance",
    "InstanceBoundary",
    "ResultRecord",
]

# fitnorms/models/instance.py
from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    Column, String, Integer, Float, Boolean, Date, DateTime, Enum, ForeignKey, Index, CheckConstraint, text,
)
from sqlalchemy.orm import relationship

from fitnorms.database import Base
from fitnorms.models.enums import Period, Sex, SexScope


class MeasurementInstance(Base):
    """
    Контрольный замер: один шаблон, одна группа, одна дата.
    START_OF_YEAR / END_OF_YEAR: контрольные замеры начала и конца учебного года.
    """
    __tablename__ = "measurement_instances"

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))

    template_id = Column(String, ForeignKey("norm_templates.id"), nullable=False, index=True)
    template = relationship("NormTemplate", back_populates="instances")

    group_id = Column(String, ForeignKey("groups.id"), nullable=False, index=True)
    group = relationship("Group", back_populates="instances")

    test_date = Column(Date, nullable=False)
    period = Column(Enum(Period, native_enum=False, length=20), nullable=False, default=Period.REGULAR)
    # Учебный год фиксируется при создании (копия Group.academic_year)
    academic_year = Column(String, nullable=False)

    name_override = Column(String, nullable=True)
    unit_override = Column(String, nullable=True)
    # NULL: наследуется от шаблона
    sex_scope = Column(Enum(SexScope, native_enum=False, length=10), nullable=True)

    use_custom_boundaries = Column(Boolean, nullable=False, default=False)
    boundaries = relationship("InstanceBoundary", back_populates="instance", cascade="all, delete-orphan")

    results = relationship("ResultRecord", back_populates="instance", cascade="all, delete-orphan")

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        # Не более одного замера начала/конца года на (группа, шаблон, год).
        # Обычных (REGULAR) замеров может быть сколько угодно.
        Index(
            "uq_control_instance",
            "group_id", "template_id", "period", "academic_year",
            unique=True,
            sqlite_where=text("period != 'REGULAR'"),
            postgresql_where=text("period != 'REGULAR'"),
        ),
    )

    @property
    def display_name(self) -> str:
        return self.name_override or self.template.name

    @property
    def display_unit(self) -> str | None:
        return self.unit_override or self.template.unit


class InstanceBoundary(Base):
    """Собственная граница оценки замера (используется при use_custom_boundaries)."""
    __tablename__ = "instance_boundaries"

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    instance_id = Column(String, ForeignKey("measurement_instances.id", ondelete="CASCADE"), nullable=False, index=True)
    instance = relationship("MeasurementInstance", back_populates="boundaries")

    grade = Column(Integer, nullable=False)
    sex = Column(Enum(Sex, native_enum=False, length=10), nullable=False)
    class_number = Column(Integer, nullable=False)
    from_value = Column(Float, nullable=False)
    to_value = Column(Float, nullable=False)

    __table_args__ = (
        CheckConstraint("grade BETWEEN 2 AND 5", name="ck_instance_boundary_grade"),
    )

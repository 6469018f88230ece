# fitnorms/models/result.py
from datetime import datetime, date
from uuid import uuid4

from sqlalchemy import Column, String, Float, Boolean, Date, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from fitnorms.database import Base


class ResultRecord(Base):
    """
    Результат ученика. Ровно одна запись на пару (ученик, замер);
    индивидуальные записи (instance_id = NULL) не ограничены.
    """
    __tablename__ = "result_records"

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))

    student_id = Column(String, ForeignKey("students.id"), nullable=False, index=True)
    student = relationship("Student", back_populates="results")

    instance_id = Column(String, ForeignKey("measurement_instances.id", ondelete="CASCADE"), nullable=True, index=True)
    instance = relationship("MeasurementInstance", back_populates="results")

    # Для индивидуальных записей шаблона может не быть: тогда хранится свободное название
    template_id = Column(String, ForeignKey("norm_templates.id"), nullable=True)
    title = Column(String, nullable=True)
    unit = Column(String, nullable=True)

    value = Column(Float, nullable=True)
    grade = Column(String(2), nullable=False, default="-")  # "-", "2".."5", "Б", "О"
    # Оценка выставлена вручную: автоматический пересчёт её не трогает
    grade_is_manual = Column(Boolean, nullable=False, default=False)
    comment = Column(String, nullable=True)

    measured_on = Column(Date, nullable=False, default=date.today)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("student_id", "instance_id", name="uq_result_student_instance"),
    )

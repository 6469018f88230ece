# fitnorms/models/template.py
from uuid import uuid4

from sqlalchemy import Column, String, Integer, Float, Boolean, Enum, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from fitnorms.database import Base
from fitnorms.models.enums import Direction, Sex, SexScope


def _uuid() -> str:
    return str(uuid4())


class NormTemplate(Base):
    """
    Шаблон норматива (например, «Бег 30 м»).
    Хранит единицу измерения, диапазон классов и границы оценок по умолчанию.
    """
    __tablename__ = "norm_templates"

    id = Column(String, primary_key=True, default=_uuid)
    # Код шаблона из YAML-каталога (для идемпотентного импорта); у ручных шаблонов пуст
    code = Column(String, unique=True, nullable=True, index=True)
    name = Column(String, nullable=False)
    unit = Column(String, nullable=True)

    class_from = Column(Integer, nullable=False)
    class_to = Column(Integer, nullable=False)

    direction = Column(Enum(Direction, native_enum=False, length=20), nullable=False)
    sex_scope = Column(Enum(SexScope, native_enum=False, length=10), nullable=False, default=SexScope.ALL)

    # Видимость: общий шаблон или личный шаблон тренера
    is_public = Column(Boolean, nullable=False, default=True)
    owner_id = Column(String, nullable=True, index=True)

    boundaries = relationship("TemplateBoundary", back_populates="template", cascade="all, delete-orphan")
    instances = relationship("MeasurementInstance", back_populates="template")

    __table_args__ = (
        CheckConstraint("class_from <= class_to", name="ck_template_class_range"),
    )

    def covers_class(self, class_number: int | None) -> bool:
        # Класс не определён: проверять нечего
        if class_number is None:
            return True
        return self.class_from <= class_number <= self.class_to


class TemplateBoundary(Base):
    """Граница оценки по умолчанию: [from_value, to_value] включительно."""
    __tablename__ = "norm_template_boundaries"

    id = Column(String, primary_key=True, default=_uuid)
    template_id = Column(String, ForeignKey("norm_templates.id", ondelete="CASCADE"), nullable=False, index=True)
    template = relationship("NormTemplate", back_populates="boundaries")

    grade = Column(Integer, nullable=False)   # 2..5
    sex = Column(Enum(Sex, native_enum=False, length=10), nullable=False)
    class_number = Column(Integer, nullable=False)
    from_value = Column(Float, nullable=False)
    to_value = Column(Float, nullable=False)

    __table_args__ = (
        CheckConstraint("grade BETWEEN 2 AND 5", name="ck_template_boundary_grade"),
    )

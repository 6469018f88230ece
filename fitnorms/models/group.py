# fitnorms/models/group.py
from uuid import uuid4

from sqlalchemy import Column, String, Integer, Boolean, Enum, ForeignKey
from sqlalchemy.orm import relationship

from fitnorms.database import Base
from fitnorms.models.enums import Sex
from fitnorms.utils.group_class import extract_class_number


class Group(Base):
    __tablename__ = "groups"

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    name = Column(String, nullable=False)
    academic_year = Column(String, nullable=False, index=True)  # "2024/2025"
    # Может быть не задан: это допустимое состояние, а не ошибка
    class_number = Column(Integer, nullable=True)

    students = relationship("Student", back_populates="group", order_by="Student.full_name")
    instances = relationship("MeasurementInstance", back_populates="group")

    @property
    def effective_class_number(self) -> int | None:
        """Класс группы: явно заданный, иначе извлечённый из названия («4 А» → 4)."""
        if self.class_number is not None:
            return self.class_number
        return extract_class_number(self.name)


class Student(Base):
    __tablename__ = "students"

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    full_name = Column(String, nullable=False)
    # NULL: пол неизвестен (не смогли нормализовать при загрузке)
    sex = Column(Enum(Sex, native_enum=False, length=10), nullable=True)

    group_id = Column(String, ForeignKey("groups.id"), nullable=False, index=True)
    group = relationship("Group", back_populates="students")

    # Отчисленные не участвуют в новых расчётах, но их результаты сохраняются
    is_active = Column(Boolean, nullable=False, default=True)

    results = relationship("ResultRecord", back_populates="student")

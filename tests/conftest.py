"""
Pytest configuration and fixtures for fitnorms tests
"""

import sys
from datetime import date
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from fitnorms.database import Base, configure_sqlite  # noqa: E402
from fitnorms.models import (  # noqa: E402
    Direction,
    Group,
    MeasurementInstance,
    NormTemplate,
    Period,
    Sex,
    SexScope,
    Student,
    TemplateBoundary,
)

# 30 м, класс 4: мальчики и девочки
SPRINT_BOUNDARIES = {
    Sex.MALE: {5: (1, 6.2), 4: (6.3, 6.8), 3: (6.9, 7.2), 2: (7.3, 15)},
    Sex.FEMALE: {5: (1, 6.4), 4: (6.5, 7.0), 3: (7.1, 7.5), 2: (7.6, 15)},
}


@pytest.fixture(scope="function")
def engine():
    """In-memory SQLite shared between threads (TestClient runs handlers in a threadpool)"""
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    configure_sqlite(eng)
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture(scope="function")
def db(engine):
    Session = sessionmaker(bind=engine, autoflush=False)
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sprint_template(db):
    template = NormTemplate(
        name="Бег 30 м",
        unit="с",
        class_from=1,
        class_to=11,
        direction=Direction.LOWER_IS_BETTER,
        sex_scope=SexScope.ALL,
    )
    for sex, grades in SPRINT_BOUNDARIES.items():
        for grade, (lo, hi) in grades.items():
            template.boundaries.append(TemplateBoundary(
                grade=grade, sex=sex, class_number=4, from_value=lo, to_value=hi,
            ))
    db.add(template)
    db.commit()
    return template


@pytest.fixture
def jump_template(db):
    template = NormTemplate(
        name="Прыжок в длину",
        unit="см",
        class_from=2,
        class_to=6,
        direction=Direction.HIGHER_IS_BETTER,
        sex_scope=SexScope.ALL,
    )
    template.boundaries = [
        TemplateBoundary(grade=5, sex=Sex.MALE, class_number=4, from_value=150, to_value=300),
        TemplateBoundary(grade=4, sex=Sex.MALE, class_number=4, from_value=135, to_value=149),
        TemplateBoundary(grade=3, sex=Sex.MALE, class_number=4, from_value=120, to_value=134),
        TemplateBoundary(grade=2, sex=Sex.MALE, class_number=4, from_value=0, to_value=119),
    ]
    db.add(template)
    db.commit()
    return template


@pytest.fixture
def group(db):
    g = Group(name="4 А", academic_year="2024/2025", class_number=4)
    db.add(g)
    db.commit()
    return g


@pytest.fixture
def students(db, group):
    """ivan (M), maria (F), nameless (sex unknown), withdrawn (M, inactive)"""
    roster = {
        "ivan": Student(full_name="Иванов Иван", sex=Sex.MALE, group=group),
        "maria": Student(full_name="Петрова Мария", sex=Sex.FEMALE, group=group),
        "nameless": Student(full_name="Сидоров Алекс", sex=None, group=group),
        "withdrawn": Student(full_name="Яковлев Олег", sex=Sex.MALE, group=group, is_active=False),
    }
    db.add_all(roster.values())
    db.commit()
    return roster


@pytest.fixture
def make_instance(db, group):
    """Factory: add a MeasurementInstance directly (bypassing create_instance checks)"""

    def _make(template, period=Period.REGULAR, test_date=date(2024, 9, 10), **kwargs):
        inst = MeasurementInstance(
            template=template,
            group=kwargs.pop("group", group),
            test_date=test_date,
            period=period,
            academic_year=kwargs.pop("academic_year", "2024/2025"),
            **kwargs,
        )
        db.add(inst)
        db.commit()
        return inst

    return _make

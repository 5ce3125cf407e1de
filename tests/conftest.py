import os
from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from dentalcare.database import Base  # noqa: E402
from dentalcare.models.appointment import Appointment  # noqa: E402
from dentalcare.models.blocked_date import BlockedDate  # noqa: E402
from dentalcare.models.dentist import Dentist  # noqa: E402
from dentalcare.models.patient import Patient  # noqa: E402

TABLES = [Dentist.__table__, Patient.__table__, Appointment.__table__, BlockedDate.__table__]

# 2026-01-05 is a Monday.
FIXED_NOW = datetime(2026, 1, 5, 8, 0)


@pytest.fixture
def session_factory():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine, tables=TABLES)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        Base.metadata.drop_all(bind=engine, tables=list(reversed(TABLES)))
        engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def skip_schema_checks(monkeypatch: pytest.MonkeyPatch) -> None:
    for module in (
        'dentalcare.routes.appointments_routes',
        'dentalcare.routes.blocked_dates_routes',
        'dentalcare.routes.dentists_routes',
        'dentalcare.routes.patients_routes',
    ):
        monkeypatch.setattr(f'{module}.ensure_database_ready', lambda: None)


@pytest.fixture
def frozen_now(monkeypatch: pytest.MonkeyPatch) -> datetime:
    monkeypatch.setattr('dentalcare.routes.appointments_routes.current_time', lambda: FIXED_NOW)
    monkeypatch.setattr('dentalcare.routes.availability_routes.current_time', lambda: FIXED_NOW)
    return FIXED_NOW


@pytest.fixture
def dentist(db) -> Dentist:
    record = Dentist(
        dentist_id='D-100',
        name='Dr. Ada Molar',
        email='ada@clinic.test',
        work_days_from='Monday',
        work_days_to='Friday',
        work_time_from='09:00:00',
        work_time_to='12:00:00',
        appointment_duration='30 minutes',
        appointment_fee='80',
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


@pytest.fixture
def patient(db) -> Patient:
    record = Patient(patient_id='P-1', name='Sam Patient', email='sam@example.com')
    db.add(record)
    db.commit()
    db.refresh(record)
    return record

import pytest
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.pool import StaticPool

from dentalcare import database


@pytest.fixture
def legacy_engine(monkeypatch: pytest.MonkeyPatch):
    engine = create_engine('sqlite://', connect_args={'check_same_thread': False}, poolclass=StaticPool)
    with engine.begin() as connection:
        connection.execute(
            text(
                'CREATE TABLE appointments ('
                'appointment_id INTEGER PRIMARY KEY, patient_id VARCHAR, dentist_id VARCHAR, '
                'date DATE, time_from TIME, time_to TIME, status VARCHAR)'
            )
        )
        connection.execute(
            text(
                'CREATE TABLE blocked_dates ('
                'blocked_date_id INTEGER PRIMARY KEY, dentist_id VARCHAR, date DATE, time_from TIME, time_to TIME)'
            )
        )

    monkeypatch.setattr(database, 'engine', engine)
    monkeypatch.setattr(database, '_appointment_schema_checked', False)
    monkeypatch.setattr(database, '_blocked_date_schema_checked', False)
    try:
        yield engine
    finally:
        engine.dispose()


def test_ensure_appointment_schema_adds_missing_columns_and_indexes(legacy_engine) -> None:
    database.ensure_appointment_schema()

    inspector = inspect(legacy_engine)
    columns = {column['name'] for column in inspector.get_columns('appointments')}
    indexes = {index['name'] for index in inspector.get_indexes('appointments')}

    assert {'fee', 'note', 'payment_status'} <= columns
    assert {'idx_appointments_dentist_date', 'idx_appointments_patient_date'} <= indexes
    assert database._appointment_schema_checked is True


def test_ensure_appointment_schema_runs_once(legacy_engine) -> None:
    database.ensure_appointment_schema()
    database.ensure_appointment_schema()

    columns = [column['name'] for column in inspect(legacy_engine).get_columns('appointments')]

    assert columns.count('fee') == 1


def test_ensure_blocked_date_schema_adds_index(legacy_engine) -> None:
    database.ensure_blocked_date_schema()

    indexes = {index['name'] for index in inspect(legacy_engine).get_indexes('blocked_dates')}

    assert 'idx_blocked_dates_dentist_date' in indexes

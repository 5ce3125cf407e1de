from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from dentalcare.core import config


DATABASE_URL = config.DATABASE_URL

connect_args = {'check_same_thread': False} if DATABASE_URL.startswith('sqlite') else {}
engine = create_engine(DATABASE_URL, echo=config.SQL_ECHO, connect_args=connect_args)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_appointment_schema_checked = False
_blocked_date_schema_checked = False


def ensure_appointment_schema() -> None:
    global _appointment_schema_checked

    if _appointment_schema_checked:
        return

    with _schema_lock:
        if _appointment_schema_checked:
            return

        inspector = inspect(engine)

        if 'appointments' not in inspector.get_table_names():
            _appointment_schema_checked = True
            return

        existing_columns = {column['name'] for column in inspector.get_columns('appointments')}
        migration_steps = [
            ('fee', 'ALTER TABLE appointments ADD COLUMN fee VARCHAR'),
            ('note', 'ALTER TABLE appointments ADD COLUMN note VARCHAR'),
            ('payment_status', 'ALTER TABLE appointments ADD COLUMN payment_status VARCHAR'),
        ]

        with engine.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_appointments_dentist_date ON appointments(dentist_id, date)')
            )
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_appointments_patient_date ON appointments(patient_id, date)')
            )

        _appointment_schema_checked = True


def ensure_blocked_date_schema() -> None:
    global _blocked_date_schema_checked

    if _blocked_date_schema_checked:
        return

    with _schema_lock:
        if _blocked_date_schema_checked:
            return

        inspector = inspect(engine)

        if 'blocked_dates' not in inspector.get_table_names():
            _blocked_date_schema_checked = True
            return

        with engine.begin() as connection:
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_blocked_dates_dentist_date ON blocked_dates(dentist_id, date)')
            )

        _blocked_date_schema_checked = True

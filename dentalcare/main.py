import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from dentalcare.core import config
from dentalcare.database import Base, engine, ensure_appointment_schema, ensure_blocked_date_schema
from dentalcare.models import appointment, blocked_date, dentist, patient  # noqa: F401
from dentalcare.routes import (
    appointments_routes,
    availability_routes,
    blocked_dates_routes,
    dentists_routes,
    patients_routes,
)

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)

app = FastAPI(title='Dental Care Scheduling API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()
    try:
        Base.metadata.create_all(bind=engine)
        ensure_appointment_schema()
        ensure_blocked_date_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.get('/')
def root():
    return {'status': 'Dental Care API Running'}


app.include_router(dentists_routes.router, prefix='/dentists')
app.include_router(patients_routes.router, prefix='/patients')
app.include_router(appointments_routes.router, prefix='/appointments')
app.include_router(blocked_dates_routes.router, prefix='/blocked-dates')
app.include_router(availability_routes.router, prefix='/availability')

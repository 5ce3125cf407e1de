import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from dentalcare.routes.dentists_routes import (
    CreateDentistRequest,
    DentistFields,
    count_dentists,
    create_dentist,
    delete_dentist,
    get_dentist_work_info,
    update_dentist,
)
from dentalcare.routes.patients_routes import CreatePatientRequest, create_patient, get_patient


def _dentist_request(**overrides) -> CreateDentistRequest:
    fields = {
        'dentist_id': 'D-300',
        'name': 'Dr. Rene Crown',
        'email': ' Rene@Clinic.Test ',
        'work_days_from': 'monday',
        'work_days_to': 'FRIDAY',
        'work_time_from': '8:30 AM',
        'work_time_to': '4:00 PM',
        'appointment_duration': '45 minutes',
        'appointment_fee': '120',
    }
    fields.update(overrides)
    return CreateDentistRequest(**fields)


def test_create_dentist_request_normalizes_work_info() -> None:
    request = _dentist_request()

    assert request.email == 'rene@clinic.test'
    assert request.work_days_from == 'Monday'
    assert request.work_days_to == 'Friday'
    assert request.work_time_from == '08:30:00'
    assert request.work_time_to == '16:00:00'


def test_create_dentist_request_rejects_unknown_weekday() -> None:
    with pytest.raises(ValidationError):
        _dentist_request(work_days_to='Someday')


def test_create_dentist_and_read_work_info(db) -> None:
    create_dentist(_dentist_request(), db=db)

    work_info = get_dentist_work_info('D-300', db=db)

    assert work_info.work_time_from == '08:30:00'
    assert work_info.appointment_duration == '45 minutes'
    assert count_dentists(db=db) == 1


def test_create_dentist_rejects_duplicate_id(db) -> None:
    create_dentist(_dentist_request(), db=db)

    with pytest.raises(HTTPException) as exception_info:
        create_dentist(_dentist_request(email='other@clinic.test'), db=db)

    assert exception_info.value.status_code == 409
    assert exception_info.value.detail == 'Dentist ID already exists.'


def test_update_dentist_only_changes_supplied_fields(db) -> None:
    create_dentist(_dentist_request(), db=db)

    updated = update_dentist('D-300', DentistFields(work_time_to='18:00'), db=db)

    assert updated.work_time_to == '18:00:00'
    assert updated.work_time_from == '08:30:00'
    assert updated.name == 'Dr. Rene Crown'


def test_delete_dentist_returns_not_found_when_missing(db) -> None:
    with pytest.raises(HTTPException) as exception_info:
        delete_dentist('D-404', db=db)

    assert exception_info.value.status_code == 404


def test_create_patient_rejects_duplicate_email(db) -> None:
    create_patient(CreatePatientRequest(patient_id='P-7', name='Lee', email='lee@example.com'), db=db)

    with pytest.raises(HTTPException) as exception_info:
        create_patient(CreatePatientRequest(patient_id='P-8', name='Lee Two', email=' LEE@example.com '), db=db)

    assert exception_info.value.status_code == 409
    assert get_patient('P-7', db=db).email == 'lee@example.com'


def test_create_dentist_rejects_email_in_use(db) -> None:
    create_dentist(_dentist_request(), db=db)

    with pytest.raises(HTTPException) as exception_info:
        create_dentist(_dentist_request(dentist_id='D-301', email='rene@clinic.test'), db=db)

    assert exception_info.value.status_code == 409
    assert exception_info.value.detail == 'A dentist with this email already exists.'
    assert count_dentists(db=db) == 1


def test_update_dentist_rejects_email_of_another_dentist(db) -> None:
    create_dentist(_dentist_request(), db=db)
    create_dentist(_dentist_request(dentist_id='D-301', email='molar@clinic.test'), db=db)

    with pytest.raises(HTTPException) as exception_info:
        update_dentist('D-301', DentistFields(email='RENE@clinic.test'), db=db)

    assert exception_info.value.status_code == 409
    assert update_dentist('D-300', DentistFields(email='rene@clinic.test'), db=db).email == 'rene@clinic.test'

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from dentalcare.auth import jwt_handler
from dentalcare.models.patient import Patient
from dentalcare.routes.dependencies import get_db

optional_security = HTTPBearer(auto_error=False)


def get_optional_patient(
    credentials: HTTPAuthorizationCredentials | None = Depends(optional_security),
    db: Session = Depends(get_db),
) -> Patient | None:
    """Resolve the calling patient from a bearer token, or None for anonymous callers."""
    if credentials is None:
        return None

    try:
        payload = jwt_handler.decode_access_token(credentials.credentials)
    except jwt.PyJWTError as exc:
        raise HTTPException(status_code=401, detail="Invalid token") from exc

    subject = payload.get("sub")
    if not subject:
        raise HTTPException(status_code=401, detail="Invalid token subject")
    if jwt_handler.token_role(payload) != jwt_handler.PATIENT_ROLE:
        return None

    patient = db.query(Patient).filter(
        (Patient.patient_id == subject) | (Patient.email == subject)
    ).first()
    if patient is None:
        raise HTTPException(status_code=401, detail="Patient not found")
    return patient

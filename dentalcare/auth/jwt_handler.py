from datetime import datetime, timedelta, timezone

import jwt

from dentalcare.core import config

PATIENT_ROLE = "patient"


def create_access_token(subject: str, role: str = PATIENT_ROLE, expires_minutes: int | None = None) -> str:
    """Issue a signed token for ``subject`` (a patient id or email) carrying its role."""
    issued_at = datetime.now(timezone.utc)
    lifetime = timedelta(minutes=expires_minutes or config.JWT_EXPIRES_MINUTES)
    payload = {"sub": subject, "role": role, "iat": issued_at, "exp": issued_at + lifetime}
    return jwt.encode(payload, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    return jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])


def token_role(payload: dict) -> str:
    # Tokens issued before roles were added belong to patients.
    return payload.get("role") or PATIENT_ROLE

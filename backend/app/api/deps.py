from collections.abc import Generator

from fastapi import Depends, HTTPException, Path, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from app.core.security import decode_token
from app.db.session import SessionLocal

security = HTTPBearer()


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_student_id(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> str:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_token(credentials.credentials)
    except JWTError as exc:
        raise credentials_exception from exc

    student_id = payload.get("sub")
    if not student_id:
        raise credentials_exception
    return str(student_id)


def require_own_timetable(
    student_id: str = Path(min_length=1, max_length=64),
    current_student_id: str = Depends(get_current_student_id),
) -> str:
    if student_id != current_student_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cannot access another student's timetable")
    return student_id

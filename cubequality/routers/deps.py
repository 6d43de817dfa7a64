from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from cubequality.core.security import OPERATOR_SUBJECT, decode_access_token
from cubequality.db.session import get_db
from cubequality.services.store import ReportStore

bearer_scheme = HTTPBearer(auto_error=False)


def get_store(db: Session = Depends(get_db)) -> ReportStore:
    return ReportStore(db)


def is_read_only(credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme)) -> bool:
    """Requests without a valid operator token are served as guests."""
    if credentials is None:
        return True
    try:
        payload = decode_access_token(credentials.credentials)
    except ValueError:
        return True
    return payload.get("sub") != OPERATOR_SUBJECT


def require_editor(read_only: bool = Depends(is_read_only)) -> None:
    if read_only:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Read-only mode: sign in to modify reports")

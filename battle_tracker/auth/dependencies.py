from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from .models import User
from . import service
from ..database import get_db
from ..core.exceptions import AuthenticationError

security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the bearer token to its owner. Every DM endpoint depends on this."""
    if not credentials:
        raise AuthenticationError("Authentication required")

    user = service.get_user(db, service.decode_access_token(credentials.credentials))
    if not user:
        raise AuthenticationError("User no longer exists")
    return user

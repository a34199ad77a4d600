from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from . import service
from .dependencies import get_current_user
from .models import User
from .schemas import UserRegister, UserLogin, UserResponse, TokenResponse

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=TokenResponse, status_code=201)
def register(data: UserRegister, db: Session = Depends(get_db)):
    """Create an account and return a bearer token for it."""
    return service.register(db, data)


@router.post("/login", response_model=TokenResponse)
def login(data: UserLogin, db: Session = Depends(get_db)):
    """Exchange email and password for a bearer token."""
    return service.login(db, data)


@router.get("/me", response_model=UserResponse)
def me(user: User = Depends(get_current_user)):
    """Get the account behind the current token."""
    return user

from .router import router
from .models import User
from .dependencies import get_current_user
from .schemas import (
    UserRegister,
    UserLogin,
    UserResponse,
    TokenResponse,
)

__all__ = [
    "router",
    "User",
    "get_current_user",
    "UserRegister",
    "UserLogin",
    "UserResponse",
    "TokenResponse",
]

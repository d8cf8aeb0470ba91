# __init__.py
# Package exports for the users API

from .models import LoginRequest, UserRegister, UserResponse, UserUpdate
from .service import UserService
from .router import router as users_router

__all__ = [
    # Models
    "LoginRequest",
    "UserRegister",
    "UserResponse",
    "UserUpdate",
    # Services
    "UserService",
    # Router
    "users_router",
]

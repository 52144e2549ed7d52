from .base import Base, BaseModel, TimeStamp
from .user import User, UserRole

__all__ = [
    "Base",
    "BaseModel",
    "TimeStamp",
    "User",
    "UserRole",
]

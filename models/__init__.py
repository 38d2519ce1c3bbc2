"""
Models package initialization.
"""

from .base import SOFT_DELETE_FIELD, Base, BaseModel, SoftDeleteMixin, utcnow
from .file import File
from .user import User

__all__ = [
    "Base",
    "BaseModel",
    "SoftDeleteMixin",
    "SOFT_DELETE_FIELD",
    "utcnow",
    "User",
    "File",
]

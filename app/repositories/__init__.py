"""Repositories over the soft-delete aware models."""

from app.repositories.file import FileRepository
from app.repositories.soft_delete import SoftDeleteRepository, any_deletion_state
from app.repositories.user import UserRepository

__all__ = ["SoftDeleteRepository", "any_deletion_state", "FileRepository", "UserRepository"]

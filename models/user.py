"""
Provides the User model for the application's database schema.

The User model is the identity anchor of the storage service: every stored
file belongs to exactly one user. It inherits common behaviors and attributes
from the `BaseModel` and supports soft deletion through `SoftDeleteMixin`.

Attributes
----------
email : sqlalchemy.Column
    The email address of the user, which must be unique.
password_hash : sqlalchemy.Column
    Hash of the user's password; the plain password is never stored.
name : sqlalchemy.Column
    Optional display name.
deleted_at : sqlalchemy.Column
    Soft-delete marker; ``NULL`` while the account is active.

Relationships
-------------
files : sqlalchemy.orm.relationship
    Defines a one-to-many relationship with the `File` model.
"""

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from .base import BaseModel, SoftDeleteMixin


class User(SoftDeleteMixin, BaseModel):
    """
    Represents a user entity in the application.

    :ivar email: Email address of the user. It must be unique.
    :type email: str
    :ivar password_hash: Hash of the user's password.
    :type password_hash: str
    :ivar name: Display name of the user. This is optional.
    :type name: str
    """

    __tablename__ = "users"

    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(100))

    files = relationship("File", back_populates="user", cascade="all, delete-orphan")

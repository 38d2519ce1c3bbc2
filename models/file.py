"""
File model for stored file metadata.
"""

from sqlalchemy import BigInteger, CheckConstraint, Column, ForeignKey, Index, String
from sqlalchemy.orm import relationship, validates

from .base import UUID, BaseModel, SoftDeleteMixin


class File(SoftDeleteMixin, BaseModel):
    """
    Metadata of a single stored object.

    ``path`` is the locator returned by the storage provider (a local path or a
    bucket URL); ``storage_key`` is the provider-agnostic key used to address
    the object again, and ``storage_provider`` records which provider actually
    holds it.
    """

    __tablename__ = "files"
    __table_args__ = (
        CheckConstraint("size >= 0", name="ck_files_size_non_negative"),
        Index("idx_files_user_created", "user_id", "created_at"),
    )

    user_id = Column(UUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    size = Column(BigInteger, nullable=False, default=0)
    mime_type = Column(String(255), nullable=False)
    path = Column(String(1024), nullable=False, unique=True)
    storage_key = Column(String(1024), nullable=False)
    storage_provider = Column(String(20), nullable=False, default="local")

    user = relationship("User", back_populates="files")

    @validates("user_id")
    def validate_user_id(self, _key, value):
        # Owner is fixed once assigned
        if self.user_id is not None and value != self.user_id:
            raise ValueError("File owner cannot be changed")
        return value

    @validates("size")
    def validate_size(self, _key, value):
        if value is not None and value < 0:
            raise ValueError("File size cannot be negative")
        return value

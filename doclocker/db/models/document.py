from sqlalchemy import Column, String, Text, Integer, ForeignKey, UUID, DateTime, JSON
from sqlalchemy.orm import relationship

from doclocker.db.base import BaseModel


class Document(BaseModel):
    __tablename__ = "documents"

    owner_id = Column(UUID(as_uuid=True), ForeignKey("users.uuid"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    category = Column(String(20), nullable=False, default="others", index=True)
    description = Column(Text, nullable=True)
    file_name = Column(String(255), nullable=False)
    file_type = Column(String(255), nullable=False)
    file_size = Column(Integer, nullable=False)
    file_data = Column(Text, nullable=False)  # base64

    # Состояние общего доступа: ссылка активна, пока задан share_token
    share_token = Column(String(128), unique=True, nullable=True)
    share_expires_at = Column(DateTime(timezone=True), nullable=True)
    share_issued_at = Column(DateTime(timezone=True), nullable=True)
    shared_with = Column(JSON, nullable=False, default=list)

    # Relationships
    owner = relationship("User", back_populates="owned_documents")

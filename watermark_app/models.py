import uuid
from datetime import datetime

from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from watermark_app.deps import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    """Account that owns watermark texts"""
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=_new_id)
    name = Column(String, nullable=False)  # Display name, used for the default watermark text
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    watermark_texts = relationship("WatermarkText", back_populates="owner", cascade="all, delete-orphan")

    def to_dict(self):
        return {"id": self.id, "name": self.name, "email": self.email}


class WatermarkText(Base):
    """Reusable watermark text owned by one user"""
    __tablename__ = "watermark_text"

    id = Column(String, primary_key=True, default=_new_id)
    owner_id = Column(String, ForeignKey("users.id"), index=True, nullable=False)
    text = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    owner = relationship("User", back_populates="watermark_texts")

    def to_dict(self):
        return {
            "id": self.id,
            "text": self.text,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

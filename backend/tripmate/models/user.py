from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import Session
from sqlalchemy.sql import func
from tripmate.database import Base


class User(Base):
    """A user known to the service. Identity itself is owned by the auth provider."""
    __tablename__ = "users"

    id = Column(String(64), primary_key=True)
    name = Column(String(128), nullable=True)
    email = Column(String(256), nullable=True)
    phone = Column(String(32), nullable=True)

    created_at = Column(DateTime, server_default=func.now())

    @classmethod
    def get_or_create(cls, db: Session, user_id: str) -> "User":
        user = db.query(cls).filter(cls.id == user_id).first()
        if not user:
            user = cls(id=user_id)
            db.add(user)
            db.commit()
            db.refresh(user)
        return user

    @property
    def display_name(self) -> str:
        return self.name or self.email or "User"

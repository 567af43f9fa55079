from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from campusqa.core.database import Base


class User(Base):
    """Forum member. Credentials live with the external auth service."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

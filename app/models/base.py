from sqlalchemy import Column, Integer, DateTime

from app.core.database import Base
from app.core.identifiers import utcnow


class BaseModel(Base):
    """Colonnes communes à toutes les tables"""
    __abstract__ = True

    id = Column(Integer, primary_key=True, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

import uuid

from sqlalchemy import Column, DateTime, Integer, Uuid

from doccollab.core.clock import utcnow
from doccollab.core.db import Base


class BaseModel(Base):
    """Общие колонки всех таблиц"""
    __abstract__ = True

    # Суррогатный ключ задает порядок вставки при равных метках времени
    id = Column(Integer, primary_key=True, autoincrement=True)
    uuid = Column(Uuid(as_uuid=True), unique=True, index=True, nullable=False, default=uuid.uuid4)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

from sqlalchemy import Column, Integer, Text, DateTime
from sqlalchemy.sql import func

from catalog.config.database import Base


class MediaItem(Base):
    """업로드된 파일 참조 (파일 저장 자체는 외부)"""
    __tablename__ = "media_library"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    url = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __mapper_args__ = {"eager_defaults": True}

from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Index, Text, DateTime
from sqlalchemy.sql import func

from catalog.config.database import Base


class Category(Base):
    """
    카테고리 계층 구조를 관리하는 테이블 (materialized path)
    - path: 루트부터의 slug 경로 (예: "root/electronics/laptops")
    - desc_product_count: 자신과 모든 하위 카테고리에 속한 활성 상품 수
    """
    __tablename__ = 'categories'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True)
    parent_id = Column(Integer, ForeignKey('categories.id', ondelete='SET NULL'), nullable=True)
    path = Column(String(1024), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    featured_only = Column(Boolean, nullable=False, default=False)
    desc_product_count = Column(Integer, nullable=False, default=0)
    sort_order = Column(Integer, nullable=False, default=0)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # 인덱스 생성
    __table_args__ = (
        Index('idx_categories_parent_sort', 'parent_id', 'sort_order'),
        Index('idx_categories_path', 'path', mysql_length=255),
    )
    __mapper_args__ = {"eager_defaults": True}

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, path='{self.path}')>"

from sqlalchemy import Column, Integer, String, ForeignKey, Boolean, DateTime, Text, JSON, Index
from sqlalchemy.sql import func

from catalog.config.database import Base


class Product(Base):
    """상품 모델 (미디어: 대표 이미지 + 갤러리 + 문서 하나)"""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True)
    sku = Column(String(100), nullable=True, unique=True)
    price = Column(Integer, nullable=False)  # 최소 화폐 단위
    is_active = Column(Boolean, nullable=False, default=True)
    is_featured = Column(Boolean, nullable=False, default=False)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False)
    primary_image_url = Column(Text, nullable=True)
    gallery = Column(JSON, nullable=False, default=list)
    doc_url = Column(Text, nullable=True)
    doc_meta = Column(JSON, nullable=True)
    content_html = Column(Text, nullable=True)
    specs_html = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("idx_products_category_active", "category_id", "is_active"),
    )
    __mapper_args__ = {"eager_defaults": True}

    @property
    def has_docs(self) -> bool:
        return self.doc_url is not None

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, slug='{self.slug}')>"

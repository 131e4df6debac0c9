from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class GalleryImage(BaseModel):
    id: Optional[str] = None
    url: str
    alt: Optional[str] = None
    sort: int = 0
    mime: Optional[str] = None
    size: Optional[int] = None
    filename: Optional[str] = None


class ProductBase(BaseModel):
    name: str
    slug: str
    sku: Optional[str] = None
    price: int
    is_active: bool = True
    is_featured: bool = False
    category_id: int
    primary_image_url: Optional[str] = None
    gallery: List[GalleryImage] = []
    doc_url: Optional[str] = None
    doc_meta: Optional[Dict[str, Any]] = None
    content_html: Optional[str] = None
    specs_html: Optional[str] = None


class ProductCreate(ProductBase):
    pass


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    slug: Optional[str] = None
    sku: Optional[str] = None
    price: Optional[int] = None
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None
    category_id: Optional[int] = None
    primary_image_url: Optional[str] = None
    gallery: Optional[List[GalleryImage]] = None
    doc_url: Optional[str] = None
    doc_meta: Optional[Dict[str, Any]] = None
    content_html: Optional[str] = None
    specs_html: Optional[str] = None


class ProductResponse(ProductBase):
    id: int
    has_docs: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ProductPage(BaseModel):
    items: List[ProductResponse]
    page: int
    limit: int
    total: int
    pages: int

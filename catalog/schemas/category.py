from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CategoryBase(BaseModel):
    name: str = Field(..., min_length=1)
    slug: str
    parent_id: Optional[int] = None
    is_active: bool = True
    featured_only: bool = False
    sort_order: int = 0
    description: Optional[str] = None


class CategoryCreate(CategoryBase):
    pass


class CategoryUpdate(BaseModel):
    """보낸 필드만 반영 (parent_id: null 은 최상위로 이동)"""
    name: Optional[str] = Field(None, min_length=1)
    slug: Optional[str] = None
    parent_id: Optional[int] = None
    is_active: Optional[bool] = None
    featured_only: Optional[bool] = None
    sort_order: Optional[int] = None
    description: Optional[str] = None


class CategoryResponse(CategoryBase):
    id: int
    path: str
    desc_product_count: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CategoryTreeNode(BaseModel):
    id: int
    name: str
    slug: str
    path: str
    parent_id: Optional[int] = None
    featured_only: bool
    desc_product_count: int
    sort_order: int
    description: Optional[str] = None
    children: List["CategoryTreeNode"] = []

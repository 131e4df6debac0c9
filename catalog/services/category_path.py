"""Materialized path 계산/검증.

카테고리의 path는 가상의 루트부터 자신까지의 slug를 "/"로 이어 붙인 문자열이다.
    root/electronics/laptops
하위 카테고리 판별은 항상 "/" 경계 기준으로 한다 ("root/a"는 "root/ab"의 조상이 아님).
"""
from typing import List, Optional

from catalog.core.exceptions import ValidationError

ROOT = "root"
SEPARATOR = "/"
# GET /categories/tree 와 겹치는 slug
RESERVED_CATEGORY_SLUGS = frozenset({"tree"})


def validate_slug(slug: Optional[str]) -> str:
    if not slug or SEPARATOR in slug:
        raise ValidationError("INVALID_SLUG", "Slug must be non-empty and must not contain '/'", slug=slug)
    return slug


def validate_category_slug(slug: Optional[str]) -> str:
    validate_slug(slug)
    if slug in RESERVED_CATEGORY_SLUGS:
        raise ValidationError("INVALID_SLUG", f"Slug '{slug}' is reserved", slug=slug)
    return slug


def root_path(slug: str) -> str:
    return f"{ROOT}{SEPARATOR}{validate_slug(slug)}"


def child_path(parent_path: str, slug: str) -> str:
    return f"{parent_path}{SEPARATOR}{validate_slug(slug)}"


def build_path(slug: str, parent_path: Optional[str] = None) -> str:
    """부모가 없으면 root/slug, 있으면 parent.path/slug"""
    if parent_path is None:
        return root_path(slug)
    return child_path(parent_path, slug)


def is_descendant_or_self(candidate_path: str, ancestor_path: str) -> bool:
    return candidate_path == ancestor_path or candidate_path.startswith(ancestor_path + SEPARATOR)


def ancestor_paths(path: str) -> List[str]:
    """path 자신을 포함한 모든 조상 path (얕은 것부터). 가상 루트는 제외"""
    segments = path.split(SEPARATOR)
    return [SEPARATOR.join(segments[:i]) for i in range(2, len(segments) + 1)]


def rebase_path(path: str, old_prefix: str, new_prefix: str) -> str:
    """old_prefix 아래의 path를 new_prefix 아래로 옮긴 path"""
    if not is_descendant_or_self(path, old_prefix):
        raise ValueError(f"{path!r} is not under {old_prefix!r}")
    return new_prefix + path[len(old_prefix):]


def depth(path: str) -> int:
    return path.count(SEPARATOR)

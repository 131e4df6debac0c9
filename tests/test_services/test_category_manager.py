"""Tests for CategoryManager."""

import pytest
from sqlalchemy import select

from catalog.core.exceptions import ConflictError, InvalidReferenceError, NotFoundError, ValidationError
from catalog.models.category import Category


async def assert_path_invariant(session):
    result = await session.execute(select(Category.id, Category.slug, Category.parent_id, Category.path))
    rows = {row.id: row for row in result.all()}
    for row in rows.values():
        if row.parent_id is None:
            assert row.path == f"root/{row.slug}"
        else:
            assert row.path == f"{rows[row.parent_id].path}/{row.slug}"


class TestCreateCategory:
    """Tests for category creation."""

    @pytest.mark.asyncio
    async def test_create_top_level_and_child(self, make_category, db_session):
        electronics = await make_category("electronics")
        laptops = await make_category("laptops", parent=electronics)

        assert electronics.path == "root/electronics"
        assert laptops.path == "root/electronics/laptops"
        assert laptops.desc_product_count == 0
        await assert_path_invariant(db_session)

    @pytest.mark.asyncio
    async def test_duplicate_slug(self, make_category):
        await make_category("electronics")
        with pytest.raises(ConflictError) as exc_info:
            await make_category("electronics")
        assert exc_info.value.code == "DUPLICATE_SLUG"

    @pytest.mark.asyncio
    async def test_missing_parent(self, category_manager):
        with pytest.raises(InvalidReferenceError) as exc_info:
            await category_manager.create_category(name="Laptops", slug="laptops", parent_id=999)
        assert exc_info.value.code == "PARENT_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_invalid_slug(self, category_manager):
        with pytest.raises(ValidationError) as exc_info:
            await category_manager.create_category(name="Bad", slug="a/b")
        assert exc_info.value.code == "INVALID_SLUG"

    @pytest.mark.asyncio
    async def test_reserved_slug(self, category_manager):
        with pytest.raises(ValidationError) as exc_info:
            await category_manager.create_category(name="Tree", slug="tree")
        assert exc_info.value.code == "INVALID_SLUG"


class TestUpdateCategory:
    """Rename, move and flag updates."""

    @pytest.mark.asyncio
    async def test_flag_update_keeps_path(self, make_category, category_manager):
        electronics = await make_category("electronics")

        updated = await category_manager.update_category(
            electronics.id, {"name": "Electronics & Co", "featured_only": True, "sort_order": 5}
        )

        assert updated.name == "Electronics & Co"
        assert updated.featured_only is True
        assert updated.sort_order == 5
        assert updated.path == "root/electronics"

    @pytest.mark.asyncio
    async def test_rename_rewrites_subtree(self, make_category, category_manager, db_session):
        electronics = await make_category("electronics")
        laptops = await make_category("laptops", parent=electronics)
        await make_category("gaming", parent=laptops)

        await category_manager.update_category(laptops.id, {"slug": "notebooks"})

        result = await db_session.execute(select(Category.slug, Category.path))
        paths = dict(result.all())
        assert paths["notebooks"] == "root/electronics/notebooks"
        assert paths["gaming"] == "root/electronics/notebooks/gaming"
        await assert_path_invariant(db_session)

    @pytest.mark.asyncio
    async def test_move_does_not_touch_prefix_lookalike(self, make_category, category_manager, db_session):
        electronics = await make_category("electronics")
        electronics2 = await make_category("electronics2")
        await make_category("cables", parent=electronics2)
        accessories = await make_category("accessories")

        await category_manager.update_category(electronics.id, {"parent_id": accessories.id})

        result = await db_session.execute(select(Category.slug, Category.path))
        paths = dict(result.all())
        assert paths["electronics"] == "root/accessories/electronics"
        assert paths["electronics2"] == "root/electronics2"
        assert paths["cables"] == "root/electronics2/cables"

    @pytest.mark.asyncio
    async def test_move_to_top_level(self, make_category, category_manager):
        electronics = await make_category("electronics")
        laptops = await make_category("laptops", parent=electronics)

        moved = await category_manager.update_category(laptops.id, {"parent_id": None})

        assert moved.parent_id is None
        assert moved.path == "root/laptops"

    @pytest.mark.asyncio
    async def test_move_under_own_descendant_rejected(self, make_category, category_manager):
        electronics = await make_category("electronics")
        laptops = await make_category("laptops", parent=electronics)
        electronics_id, laptops_id = electronics.id, laptops.id

        with pytest.raises(ValidationError) as exc_info:
            await category_manager.update_category(electronics_id, {"parent_id": laptops_id})
        assert exc_info.value.code == "INVALID_PARENT"

        with pytest.raises(ValidationError):
            await category_manager.update_category(electronics_id, {"parent_id": electronics_id})

    @pytest.mark.asyncio
    async def test_rename_to_taken_slug(self, make_category, category_manager):
        await make_category("electronics")
        accessories = await make_category("accessories")

        with pytest.raises(ConflictError) as exc_info:
            await category_manager.update_category(accessories.id, {"slug": "electronics"})
        assert exc_info.value.code == "DUPLICATE_SLUG"

    @pytest.mark.asyncio
    async def test_rename_to_reserved_slug(self, make_category, category_manager):
        accessories = await make_category("accessories")
        accessories_id = accessories.id

        with pytest.raises(ValidationError) as exc_info:
            await category_manager.update_category(accessories_id, {"slug": "tree"})
        assert exc_info.value.code == "INVALID_SLUG"

    @pytest.mark.asyncio
    async def test_update_missing_category(self, category_manager):
        with pytest.raises(NotFoundError):
            await category_manager.update_category(404, {"name": "x"})


class TestDeleteCategory:
    """Deletion rules."""

    @pytest.mark.asyncio
    async def test_delete_leaf(self, make_category, category_manager):
        electronics = await make_category("electronics")

        await category_manager.delete_category(electronics.id)

        with pytest.raises(NotFoundError):
            await category_manager.get_category(electronics.id)

    @pytest.mark.asyncio
    async def test_delete_with_children(self, make_category, category_manager):
        electronics = await make_category("electronics")
        await make_category("laptops", parent=electronics)

        with pytest.raises(ConflictError) as exc_info:
            await category_manager.delete_category(electronics.id)
        assert exc_info.value.code == "HAS_CHILDREN"

    @pytest.mark.asyncio
    async def test_delete_with_products(self, make_category, make_product, category_manager):
        electronics = await make_category("electronics")
        await make_product("phone", electronics, is_active=False)

        with pytest.raises(ConflictError) as exc_info:
            await category_manager.delete_category(electronics.id)
        assert exc_info.value.code == "HAS_PRODUCTS"

    @pytest.mark.asyncio
    async def test_delete_missing(self, category_manager):
        with pytest.raises(NotFoundError):
            await category_manager.delete_category(12345)


class TestCategoryReads:
    @pytest.mark.asyncio
    async def test_children_by_slug_or_id_in_sibling_order(self, make_category, category_manager):
        electronics = await make_category("electronics")
        await make_category("tablets", parent=electronics, name="Tablets", sort_order=1)
        await make_category("phones", parent=electronics, name="Phones", sort_order=1)
        await make_category("laptops", parent=electronics, name="Laptops", sort_order=0)
        await make_category("hidden", parent=electronics, is_active=False)

        by_slug = await category_manager.get_children("electronics")
        by_id = await category_manager.get_children(str(electronics.id))

        assert [c.slug for c in by_slug] == ["laptops", "phones", "tablets"]
        assert [c.slug for c in by_id] == ["laptops", "phones", "tablets"]

    @pytest.mark.asyncio
    async def test_children_of_unknown_parent(self, category_manager):
        with pytest.raises(NotFoundError):
            await category_manager.get_children("nope")

    @pytest.mark.asyncio
    async def test_ancestors_and_subcategories(self, make_category, category_manager):
        electronics = await make_category("electronics")
        computers = await make_category("computers", parent=electronics)
        laptops = await make_category("laptops", parent=computers)
        await make_category("electronics2")

        ancestors = await category_manager.get_ancestors(laptops.id)
        subcategories = await category_manager.get_subcategories(electronics.id)

        assert [c.slug for c in ancestors] == ["electronics", "computers"]
        assert [c.slug for c in subcategories] == ["computers", "laptops"]

    @pytest.mark.asyncio
    async def test_list_categories_parentless_first(self, make_category, category_manager):
        electronics = await make_category("electronics", sort_order=2)
        await make_category("laptops", parent=electronics)
        await make_category("accessories", sort_order=1)

        categories = await category_manager.list_categories()

        assert [c.slug for c in categories] == ["accessories", "electronics", "laptops"]

"""Tests for ProductManager."""

import pytest

from catalog.core.exceptions import ConflictError, InvalidReferenceError, NotFoundError, ValidationError
from catalog.services.order_manager import OrderManager
from catalog.services.product_manager import normalize_gallery


class TestCreateProduct:
    """Tests for product creation."""

    @pytest.mark.asyncio
    async def test_create_product(self, make_category, make_product):
        electronics = await make_category("electronics")

        product = await make_product(
            "phone", electronics, price=99900, sku="PH-1", doc_url="https://cdn.example.com/phone.pdf"
        )

        assert product.id is not None
        assert product.price == 99900
        assert product.is_active is True
        assert product.has_docs is True
        assert product.created_at is not None

    @pytest.mark.asyncio
    async def test_has_docs_follows_doc_url(self, make_category, make_product, product_manager):
        electronics = await make_category("electronics")
        product = await make_product("phone", electronics)
        assert product.has_docs is False

        updated = await product_manager.update_product(product.id, {"doc_url": "https://cdn.example.com/a.pdf"})
        assert updated.has_docs is True

    @pytest.mark.asyncio
    async def test_gallery_is_stored_in_sort_order(self, make_category, make_product):
        electronics = await make_category("electronics")

        product = await make_product("phone", electronics, gallery=[
            {"url": "c.jpg", "sort": 2},
            {"url": "a.jpg", "sort": 0},
            {"url": "b1.jpg", "sort": 1},
            {"url": "b2.jpg", "sort": 1},
        ])

        assert [image["url"] for image in product.gallery] == ["a.jpg", "b1.jpg", "b2.jpg", "c.jpg"]

    @pytest.mark.parametrize("price", [-1, "100", 9.5, None, True])
    @pytest.mark.asyncio
    async def test_invalid_price(self, price, make_category, product_manager):
        electronics = await make_category("electronics")

        with pytest.raises(ValidationError) as exc_info:
            await product_manager.create_product(
                {"name": "Phone", "slug": "phone", "price": price, "category_id": electronics.id}
            )
        assert exc_info.value.code == "INVALID_PRICE"

    @pytest.mark.asyncio
    async def test_unknown_category(self, product_manager):
        with pytest.raises(InvalidReferenceError) as exc_info:
            await product_manager.create_product({"name": "Phone", "slug": "phone", "price": 1, "category_id": 999})
        assert exc_info.value.code == "CATEGORY_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_invalid_slug(self, make_category, product_manager):
        electronics = await make_category("electronics")

        with pytest.raises(ValidationError) as exc_info:
            await product_manager.create_product({"name": "Phone", "slug": "", "price": 1, "category_id": electronics.id})
        assert exc_info.value.code == "INVALID_SLUG"

    @pytest.mark.asyncio
    async def test_duplicate_slug_and_sku(self, make_category, make_product, product_manager, counts):
        electronics = await make_category("electronics")
        category_id = electronics.id
        await make_product("phone", electronics, sku="PH-1")

        with pytest.raises(ConflictError) as exc_info:
            await product_manager.create_product({"name": "P", "slug": "phone", "price": 1, "category_id": category_id})
        assert exc_info.value.code == "DUPLICATE_SLUG"

        with pytest.raises(ConflictError) as exc_info:
            await product_manager.create_product(
                {"name": "P", "slug": "phone-2", "sku": "PH-1", "price": 1, "category_id": category_id}
            )
        assert exc_info.value.code == "DUPLICATE_SKU"

        # 실패한 쓰기는 카운트를 바꾸지 않음
        assert await counts() == {"electronics": 1}


class TestUpdateDeleteProduct:
    @pytest.mark.asyncio
    async def test_update_missing(self, product_manager):
        with pytest.raises(NotFoundError):
            await product_manager.update_product(999, {"name": "x"})

    @pytest.mark.asyncio
    async def test_update_to_unknown_category_keeps_counts(self, make_category, make_product, product_manager, counts):
        electronics = await make_category("electronics")
        product = await make_product("phone", electronics)
        product_id = product.id

        with pytest.raises(InvalidReferenceError):
            await product_manager.update_product(product_id, {"category_id": 999})

        assert await counts() == {"electronics": 1}

    @pytest.mark.asyncio
    async def test_delete_product_in_orders(self, make_category, make_product, product_manager, db_session, counts):
        electronics = await make_category("electronics")
        product = await make_product("phone", electronics)
        product_id = product.id
        await OrderManager(db_session).place_order([{"product_id": product_id, "qty": 1}])

        with pytest.raises(ConflictError) as exc_info:
            await product_manager.delete_product(product_id)
        assert exc_info.value.code == "PRODUCT_IN_ORDERS"
        assert await counts() == {"electronics": 1}

    @pytest.mark.asyncio
    async def test_delete_missing(self, product_manager):
        with pytest.raises(NotFoundError):
            await product_manager.delete_product(999)


class TestListProducts:
    @pytest.mark.asyncio
    async def test_filters_and_newest_first(self, make_category, make_product, product_manager):
        electronics = await make_category("electronics")
        accessories = await make_category("accessories")
        await make_product("phone-case", accessories, name="Phone Case")
        await make_product("phone", electronics, name="Phone")
        await make_product("old-phone", electronics, name="Old Phone", is_active=False)

        everything = await product_manager.list_products()
        phones = await product_manager.list_products(q="PHONE", category_id=electronics.id)
        active = await product_manager.list_products(is_active=True)

        assert [p.slug for p in everything] == ["old-phone", "phone", "phone-case"]
        assert [p.slug for p in phones] == ["old-phone", "phone"]
        assert [p.slug for p in active] == ["phone", "phone-case"]


def test_normalize_gallery_handles_missing():
    assert normalize_gallery(None) == []
    assert normalize_gallery([{"url": "b", "sort": 1}, {"url": "a"}]) == [{"url": "a"}, {"url": "b", "sort": 1}]

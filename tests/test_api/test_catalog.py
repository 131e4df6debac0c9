"""Tests for public catalog endpoints."""

import pytest
from httpx import AsyncClient


class TestCategoryEndpoints:
    """Tree, category, children and subtree listing."""

    @pytest.mark.asyncio
    async def test_tree(self, client: AsyncClient, new_category, new_product):
        electronics = await new_category("electronics", sort_order=2)
        await new_category("accessories", sort_order=1)
        laptops = await new_category("laptops", parent_id=electronics["id"])
        await new_product("laptop", laptops["id"])

        response = await client.get("/api/categories/tree")

        assert response.status_code == 200
        tree = response.json()
        assert [node["slug"] for node in tree] == ["accessories", "electronics"]
        assert tree[1]["desc_product_count"] == 1
        assert tree[1]["children"][0]["slug"] == "laptops"

    @pytest.mark.asyncio
    async def test_category_and_children(self, client: AsyncClient, new_category):
        electronics = await new_category("electronics")
        await new_category("phones", parent_id=electronics["id"])
        await new_category("hidden", parent_id=electronics["id"], is_active=False)

        response = await client.get("/api/categories/electronics")
        assert response.status_code == 200
        assert response.json()["path"] == "root/electronics"

        response = await client.get("/api/categories/electronics/children")
        assert [c["slug"] for c in response.json()] == ["phones"]

        response = await client.get(f"/api/categories/{electronics['id']}/children")
        assert [c["slug"] for c in response.json()] == ["phones"]

    @pytest.mark.asyncio
    async def test_unknown_category(self, client: AsyncClient):
        response = await client.get("/api/categories/missing")

        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "NOT_FOUND"
        assert (await client.get("/api/categories/missing/children")).status_code == 404
        assert (await client.get("/api/categories/missing/products")).status_code == 404

    @pytest.mark.asyncio
    async def test_subtree_products_paging(self, client: AsyncClient, new_category, new_product):
        shop = await new_category("shop")
        for i in range(3):
            await new_product(f"item-{i}", shop["id"], price=100 * (i + 1))

        response = await client.get("/api/categories/shop/products", params={"limit": 2, "sort": "price_desc"})

        assert response.status_code == 200
        page = response.json()
        assert [p["price"] for p in page["items"]] == [300, 200]
        assert (page["page"], page["limit"], page["total"], page["pages"]) == (1, 2, 3, 2)

    @pytest.mark.asyncio
    async def test_featured_only_listing(self, client: AsyncClient, new_category, new_product):
        deals = await new_category("deals", featured_only=True)
        await new_product("star", deals["id"], is_featured=True)
        await new_product("plain", deals["id"])

        response = await client.get("/api/categories/deals/products")

        assert [p["slug"] for p in response.json()["items"]] == ["star"]


class TestProductEndpoints:
    @pytest.mark.asyncio
    async def test_search(self, client: AsyncClient, new_category, new_product):
        electronics = await new_category("electronics")
        toys = await new_category("toys")
        await new_product("usb-cable", electronics["id"], name="USB Cable")
        await new_product("toy-cable", toys["id"], name="Toy Cable")

        response = await client.get("/api/products/search", params={"q": "cable", "category": "electronics"})
        assert [p["slug"] for p in response.json()["items"]] == ["usb-cable"]

        response = await client.get("/api/products/search", params={"category": "nowhere"})
        assert response.json()["total"] == 0

    @pytest.mark.asyncio
    async def test_product_card(self, client: AsyncClient, new_category, new_product):
        shop = await new_category("shop")
        await new_product("phone", shop["id"], doc_url="https://cdn/manual.pdf")
        await new_product("draft", shop["id"], is_active=False)

        response = await client.get("/api/products/phone")
        assert response.status_code == 200
        assert response.json()["has_docs"] is True

        assert (await client.get("/api/products/draft")).status_code == 404


class TestOrderEndpoints:
    """Order placement over HTTP."""

    @pytest.mark.asyncio
    async def test_create_and_retry(self, client: AsyncClient, new_category, new_product):
        shop = await new_category("shop")
        phone = await new_product("phone", shop["id"], price=1200)
        payload = {
            "idempotency_key": "checkout-1",
            "customer_name": "Lee",
            "items": [{"product_id": phone["id"], "qty": 2}],
        }

        first = await client.post("/api/orders", json=payload)
        assert first.status_code == 201
        assert first.json()["total_amount"] == 2400

        second = await client.post("/api/orders", json=payload)
        assert second.status_code == 200
        assert second.json() == {"order_id": first.json()["order_id"], "status": "duplicate"}

    @pytest.mark.asyncio
    async def test_inactive_product(self, client: AsyncClient, new_category, new_product):
        shop = await new_category("shop")
        draft = await new_product("draft", shop["id"], is_active=False)

        response = await client.post("/api/orders", json={"items": [{"product_id": draft["id"], "qty": 1}]})

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "INVALID_PRODUCT"

    @pytest.mark.asyncio
    async def test_invalid_qty_and_empty_items(self, client: AsyncClient, new_category, new_product):
        shop = await new_category("shop")
        phone = await new_product("phone", shop["id"])

        response = await client.post("/api/orders", json={"items": [{"product_id": phone["id"], "qty": 0}]})
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "INVALID_QTY"

        response = await client.post("/api/orders", json={"items": []})
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "ITEMS_REQUIRED"

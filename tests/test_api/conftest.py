"""Helpers that create catalog data through the admin API."""

import pytest


@pytest.fixture
def new_category(client):
    async def _create(slug, parent_id=None, **fields):
        payload = {"name": slug.title(), "slug": slug, "parent_id": parent_id, **fields}
        response = await client.post("/api/admin/categories", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
def new_product(client):
    async def _create(slug, category_id, price=1000, **fields):
        payload = {"name": slug.title(), "slug": slug, "price": price, "category_id": category_id, **fields}
        response = await client.post("/api/admin/products", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _create

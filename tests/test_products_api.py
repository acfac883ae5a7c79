"""Catalogue endpoints: only what order placement relies on."""
from decimal import Decimal


def test_create_and_fetch_product(client, create_product):
    product = create_product(name="Santal 33", price="19.99", stock=7, category="Women")

    response = client.get(f"/products/{product['id']}")

    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Santal 33"
    assert Decimal(body["price"]) == Decimal("19.99")
    assert body["stock"] == 7
    assert body["isActive"] is True


def test_catalogue_writes_are_admin_only(client, user_headers):
    payload = {"name": "Oud Wood", "price": "10.00", "stock": 1, "category": "Men"}
    assert client.post("/products/", json=payload, headers=user_headers).status_code == 403
    assert client.post("/products/", json=payload).status_code == 401


def test_invalid_product_fields_are_bad_requests(client, admin_headers):
    base = {"name": "Oud Wood", "price": "10.00", "stock": 1, "category": "Men"}
    for override in ({"price": "0"}, {"stock": -1}, {"name": "ab"}, {"category": "Kids"}):
        response = client.post("/products/", json={**base, **override}, headers=admin_headers)
        assert response.status_code == 400, override
        assert response.json()["field"] == next(iter(override))


def test_soft_delete_hides_product_and_restore_brings_it_back(client, create_product, admin_headers):
    product = create_product()

    deleted = client.delete(f"/products/{product['id']}", headers=admin_headers)
    assert deleted.status_code == 200
    assert deleted.json()["isActive"] is False
    assert client.get(f"/products/{product['id']}").status_code == 404
    assert client.get("/products/").json() == []

    restored = client.post(f"/products/{product['id']}/restore", headers=admin_headers)
    assert restored.status_code == 200
    assert client.get(f"/products/{product['id']}").status_code == 200


def test_restock_credits_stock(client, create_product, admin_headers):
    product = create_product(stock=1)

    response = client.post(f"/products/{product['id']}/restock", json={"quantity": 4}, headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["stock"] == 5


def test_update_cannot_touch_stock(client, create_product, admin_headers):
    product = create_product(stock=3)

    response = client.put(
        f"/products/{product['id']}", json={"price": "12.50", "stock": 100}, headers=admin_headers
    )

    assert response.status_code == 200
    assert Decimal(response.json()["price"]) == Decimal("12.50")
    assert response.json()["stock"] == 3


def _names(response):
    assert response.status_code == 200, response.text
    return [p["name"] for p in response.json()]


def test_listing_filters_by_category_and_price(client, create_product):
    create_product(name="Oud Wood", price="40.00", category="Men")
    create_product(name="Santal 33", price="25.00", category="Unisex")
    create_product(name="Bal d'Afrique", price="15.00", category="Men")

    assert sorted(_names(client.get("/products/", params={"category": "Men"}))) == ["Bal d'Afrique", "Oud Wood"]
    assert _names(client.get("/products/", params={"minPrice": "20", "maxPrice": "30"})) == ["Santal 33"]


def test_listing_sorts_and_paginates(client, create_product):
    for name, price in (("Alpha", "30.00"), ("Bravo", "10.00"), ("Charlie", "20.00")):
        create_product(name=name, price=price)

    by_price = {"sort": "price", "order": "asc"}
    assert _names(client.get("/products/", params=by_price)) == ["Bravo", "Charlie", "Alpha"]
    assert _names(client.get("/products/", params={**by_price, "limit": 2})) == ["Bravo", "Charlie"]
    assert _names(client.get("/products/", params={**by_price, "limit": 2, "page": 2})) == ["Alpha"]
    assert _names(client.get("/products/", params={"sort": "name", "order": "DESC"})) == ["Charlie", "Bravo", "Alpha"]


def test_listing_rejects_bad_paging_and_price_range(client):
    response = client.get("/products/", params={"limit": 101})
    assert response.status_code == 400
    assert response.json()["field"] == "limit"

    assert client.get("/products/", params={"page": 0}).status_code == 400

    response = client.get("/products/", params={"minPrice": "50", "maxPrice": "10"})
    assert response.status_code == 400
    assert response.json()["field"] == "minPrice"


def test_admin_listing_includes_soft_deleted_products(client, create_product, admin_headers, user_headers):
    kept = create_product(name="Oud Wood")
    retired = create_product(name="Santal 33")
    client.delete(f"/products/{retired['id']}", headers=admin_headers)

    assert _names(client.get("/products/")) == ["Oud Wood"]
    assert sorted(_names(client.get("/products/admin/all", headers=admin_headers))) == ["Oud Wood", "Santal 33"]
    inactive = client.get("/products/admin/all", params={"isActive": "false"}, headers=admin_headers)
    assert [p["id"] for p in inactive.json()] == [retired["id"]]
    assert kept["id"] not in [p["id"] for p in inactive.json()]

    assert client.get("/products/admin/all", headers=user_headers).status_code == 403

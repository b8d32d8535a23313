def test_create_and_get(client, auth_headers, product):
    assert product["cases_per_pallet"] == 49
    assert product["available"] is True
    r = client.get(f"/api/products/{product['id']}", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["product"]["name"] == "Apples, Gala"


def test_required_fields(client, auth_headers):
    r = client.post("/api/products", headers=auth_headers, json={"name": "No cost"})
    assert r.status_code == 400
    r = client.post("/api/products", headers=auth_headers, json={"name": "Bad", "costPerCase": -1})
    assert r.status_code == 422


def test_filters(client, auth_headers, product, bipoc_product):
    client.post(
        "/api/products",
        headers=auth_headers,
        json={"name": "Celery", "costPerCase": 40, "category": "Vegetables", "available": False},
    )

    def names(**params):
        r = client.get("/api/products", headers=auth_headers, params=params)
        assert r.status_code == 200
        return [p["name"] for p in r.json()["products"]]

    assert names() == ["Apples, Gala", "Onions, Yellow"]
    assert names(bipoc="true") == ["Onions, Yellow"]
    assert names(category="Vegetables") == ["Onions, Yellow"]
    assert names(category="Vegetables", available="false") == ["Celery", "Onions, Yellow"]
    assert names(search="catalan") == ["Onions, Yellow"]


def test_categories(client, auth_headers, product, bipoc_product):
    r = client.get("/api/products/categories", headers=auth_headers)
    assert r.json()["categories"] == ["Fruits", "Vegetables"]


def test_update(client, auth_headers, product):
    r = client.put(
        f"/api/products/{product['id']}",
        headers=auth_headers,
        json={"costPerCase": 27.5, "available": False},
    )
    assert r.status_code == 200
    body = r.json()["product"]
    assert body["cost_per_case"] == 27.5
    assert body["available"] is False
    assert body["name"] == "Apples, Gala"


def test_import_merge(client, auth_headers, product):
    r = client.post(
        "/api/products/import",
        headers=auth_headers,
        json={
            "products": [
                {"name": "Apples, Gala", "farm": "Sambado and Sons", "costPerCase": 28.0},
                {"name": "Spring Mix", "farm": "Jayleaf", "costPerCase": 8.0, "casesPerPallet": 140},
                {"name": "Missing cost"},
            ]
        },
    )
    assert r.status_code == 200
    body = r.json()
    assert body["imported"] == 1
    assert body["updated"] == 1
    assert len(body["errors"]) == 1

    apples = client.get(f"/api/products/{product['id']}", headers=auth_headers).json()["product"]
    assert apples["cost_per_case"] == 28.0


def test_import_replace(client, auth_headers, product):
    r = client.post(
        "/api/products/import",
        headers=auth_headers,
        json={"mode": "replace", "products": [{"name": "Spring Mix", "costPerCase": 8.0}]},
    )
    assert r.status_code == 200
    names = [p["name"] for p in client.get("/api/products", headers=auth_headers).json()["products"]]
    assert names == ["Spring Mix"]


def test_import_replace_refused_while_quoted(client, auth_headers, product):
    client.post(
        "/api/quotes",
        headers=auth_headers,
        json={"items": [{"productId": product["id"], "cases": 5}]},
    )
    r = client.post(
        "/api/products/import",
        headers=auth_headers,
        json={"mode": "replace", "products": [{"name": "Spring Mix", "costPerCase": 8.0}]},
    )
    assert r.status_code == 409


def test_delete(client, auth_headers, product, bipoc_product):
    client.post(
        "/api/quotes",
        headers=auth_headers,
        json={"items": [{"productId": product["id"], "cases": 5}]},
    )
    assert client.delete(f"/api/products/{product['id']}", headers=auth_headers).status_code == 409
    assert client.delete(f"/api/products/{bipoc_product['id']}", headers=auth_headers).status_code == 200
    assert client.get(f"/api/products/{bipoc_product['id']}", headers=auth_headers).status_code == 404


def test_other_organization_cannot_touch_product(client, product, other_headers):
    assert client.get(f"/api/products/{product['id']}", headers=other_headers).status_code == 404
    r = client.put(f"/api/products/{product['id']}", headers=other_headers, json={"costPerCase": 1})
    assert r.status_code == 404

def seed_menu(client):
    mains = client.post("/categories/", json={"name": "Mains"}).json()
    desserts = client.post("/categories/", json={"name": "Desserts"}).json()
    caesar = client.post("/menu-items/", json={
        "name": "Caesar Salad", "price": "12.99", "category_id": mains["id"]
    }).json()
    chicken = client.post("/menu-items/", json={
        "name": "Grilled Chicken", "price": "18.50", "category_id": mains["id"]
    }).json()
    cake = client.post("/menu-items/", json={
        "name": "Chocolate Cake", "price": "8.99", "category_id": desserts["id"], "is_available": False
    }).json()
    return caesar, chicken, cake

def test_root(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json()["service"] == "restaurant-ordering-service"

def test_menu_listing_and_filters(client):
    caesar, chicken, cake = seed_menu(client)
    assert caesar["price"] == 12.99

    resp = client.get("/menu-items/")
    assert resp.status_code == 200
    assert [i["name"] for i in resp.json()] == ["Caesar Salad", "Grilled Chicken"]
    assert resp.json()[0]["category"]["name"] == "Mains"

    resp = client.get("/menu-items/", params={"search": "chicken"})
    assert [i["id"] for i in resp.json()] == [chicken["id"]]

    resp = client.get("/menu-items/", params={"available_only": "false"})
    assert [i["id"] for i in resp.json()] == [caesar["id"], chicken["id"], cake["id"]]

    resp = client.get("/menu-items/", params={"min_price": "13", "max_price": "20"})
    assert [i["name"] for i in resp.json()] == ["Grilled Chicken"]

def test_menu_item_validation(client):
    mains = client.post("/categories/", json={"name": "Mains"}).json()
    resp = client.post("/menu-items/", json={"name": "Free", "price": "0", "category_id": mains["id"]})
    assert resp.status_code == 422
    resp = client.post("/menu-items/", json={"name": "Orphan", "price": "1.00", "category_id": 999})
    assert resp.status_code == 409
    assert resp.json()["error"] == "constraint_violation"

def test_menu_item_patch(client):
    caesar, _, _ = seed_menu(client)
    resp = client.patch(f"/menu-items/{caesar['id']}", json={"is_available": False})
    assert resp.status_code == 200
    assert resp.json()["is_available"] is False
    assert resp.json()["price"] == 12.99

    resp = client.patch("/menu-items/999", json={"name": "Nope"})
    assert resp.status_code == 404
    assert resp.json() == {"detail": "Menu item with id 999 not found", "error": "not_found"}

def test_cart_endpoints(client):
    caesar, chicken, cake = seed_menu(client)
    first = client.post("/cart/items", json={"session_id": "s1", "menu_item_id": caesar["id"], "quantity": 2})
    assert first.status_code == 201
    merged = client.post("/cart/items", json={"session_id": "s1", "menu_item_id": caesar["id"], "quantity": 3})
    assert merged.json()["id"] == first.json()["id"]
    assert merged.json()["quantity"] == 5

    resp = client.post("/cart/items", json={"session_id": "s1", "menu_item_id": cake["id"], "quantity": 1})
    assert resp.status_code == 409
    assert resp.json()["error"] == "unavailable"

    resp = client.post("/cart/items", json={"session_id": "s1", "menu_item_id": chicken["id"], "quantity": 0})
    assert resp.status_code == 422

    item_id = first.json()["id"]
    resp = client.put(f"/cart/items/{item_id}", json={"quantity": 1})
    assert resp.json()["quantity"] == 1

    cart = client.get("/cart/s1").json()
    assert len(cart) == 1
    assert cart[0]["menu_item"]["name"] == "Caesar Salad"

    summary = client.get("/cart/s1/summary").json()
    assert summary["item_count"] == 1
    assert summary["subtotal"] == 12.99

    assert client.delete(f"/cart/items/{item_id}").json() is True
    assert client.delete(f"/cart/items/{item_id}").json() is False
    assert client.delete("/cart/s1").json() is True
    assert client.delete("/cart/s1").json() is True
    assert client.get("/cart/s1").json() == []

def test_order_and_payment_flow(client):
    caesar, chicken, _ = seed_menu(client)
    client.post("/cart/items", json={"session_id": "t7", "menu_item_id": caesar["id"], "quantity": 2})
    client.post("/cart/items", json={"session_id": "t7", "menu_item_id": chicken["id"], "quantity": 1})

    resp = client.post("/orders/", json={
        "session_id": "t7", "customer_name": "Ana", "customer_email": "ana@example.com"
    })
    assert resp.status_code == 201
    order = resp.json()
    assert order["total_amount"] == 44.48
    assert order["status"] == "pending"
    assert [i["price_at_time"] for i in order["items"]] == [12.99, 18.5]
    assert client.get("/cart/t7").json() == []

    resp = client.put(f"/orders/{order['id']}/status", json={"status": "confirmed"})
    assert resp.json()["status"] == "confirmed"

    resp = client.post("/payments/", json={
        "order_id": order["id"], "payment_gateway": "promptpay", "amount": "44.48"
    })
    assert resp.status_code == 201
    payment = resp.json()
    assert payment["status"] == "pending"

    assert client.post(f"/payments/{payment['id']}/check").json()["status"] == "pending"

    resp = client.put(f"/payments/{payment['id']}/status", json={
        "status": "paid", "gateway_reference": "TX-77", "paid_at": "2024-05-01T12:00:00Z"
    })
    assert resp.status_code == 200
    assert resp.json()["status"] == "paid"

    fetched = client.get(f"/payments/{payment['id']}").json()
    assert fetched["order"]["payment_status"] == "paid"
    assert fetched["order"]["payment_reference"] == "TX-77"

    assert client.get(f"/orders/{order['id']}").json()["payment_status"] == "paid"
    assert [p["id"] for p in client.get(f"/orders/{order['id']}/payments").json()] == [payment["id"]]

    resp = client.post("/payments/", json={
        "order_id": order["id"], "payment_gateway": "promptpay", "amount": "44.48"
    })
    assert resp.status_code == 409
    assert resp.json() == {"detail": "Order has already been paid", "error": "already_paid"}

    resp = client.put(f"/payments/{payment['id']}/status", json={"status": "failed"})
    assert resp.status_code == 409
    assert resp.json()["error"] == "invalid_state"

def test_order_errors(client):
    resp = client.post("/orders/", json={"session_id": "nobody", "customer_name": "Ana"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "empty_cart"
    assert client.get("/orders/").json() == []

    resp = client.post("/orders/", json={"session_id": "s", "customer_name": "Ana", "customer_email": "not-an-email"})
    assert resp.status_code == 422

    assert client.get("/orders/123").json() is None
    assert client.put("/orders/123/status", json={"status": "ready"}).status_code == 404
    assert client.put("/orders/123/status", json={"status": "shipped"}).status_code == 422
    assert client.get("/orders/123/payments").status_code == 404

def test_payment_errors(client):
    resp = client.post("/payments/", json={"order_id": 5, "payment_gateway": "promptpay", "amount": "10.00"})
    assert resp.status_code == 404
    assert client.get("/payments/5").json() is None
    assert client.post("/payments/5/check").json() is None
    assert client.put("/payments/5/status", json={"status": "paid"}).status_code == 404

def test_request_id_is_echoed(client):
    resp = client.get("/categories/", headers={"X-Request-ID": "req-123"})
    assert resp.status_code == 200
    assert resp.headers["X-Request-ID"] == "req-123"
    assert client.get("/categories/").headers["X-Request-ID"]

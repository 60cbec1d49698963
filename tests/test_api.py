"""Tests for the HTTP surface."""
from caterpillar_ranch.core.session_middleware import SESSION_HEADER

TEE = "cr-001"
TEE_BLACK_M = "cr-001-black-m"


def _session_headers(client) -> dict:
    response = client.post("/api/sessions")
    assert response.status_code == 200
    return {SESSION_HEADER: response.headers[SESSION_HEADER]}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_list_products(client):
    response = client.get("/api/products")
    assert response.status_code == 200
    assert response.json()["total"] == 4

    assert client.get("/api/products/cr-999").status_code == 404


def test_session_id_is_stable(client):
    headers = _session_headers(client)
    response = client.get("/api/products", headers=headers)
    assert response.headers[SESSION_HEADER] == headers[SESSION_HEADER]


def test_game_flow_earns_and_locks_discount(client):
    headers = _session_headers(client)

    started = client.post(
        "/api/games",
        json={"cart_id": "cart-1", "product_id": TEE, "game_type": "the-culling"},
        headers=headers,
    )
    assert started.status_code == 200
    game_id = started.json()["game_id"]
    assert started.json()["status"] == "playing"

    client.post(f"/api/games/{game_id}/points", json={"delta": 50})
    penalised = client.post(f"/api/games/{game_id}/points", json={"delta": -3})
    assert penalised.json()["score"] == 47

    ended = client.post(f"/api/games/{game_id}/end").json()
    assert ended["status"] == "completed"
    assert ended["discount_percent"] == 40
    assert ended["can_retry"] is False

    again = client.post(f"/api/games/{game_id}/end").json()
    assert again["score"] == 47

    pending = client.get(f"/api/discounts/cart-1/{TEE}").json()
    assert pending["discount"]["percent"] == 40

    played = client.get(f"/api/sessions/{headers[SESSION_HEADER]}/played/{TEE}").json()
    assert played["has_played"] is True

    added = client.post(
        "/api/cart/cart-1/items",
        json={"product_id": TEE, "variant_id": TEE_BLACK_M, "quantity": 1},
        headers=headers,
    )
    assert added.status_code == 200
    body = added.json()
    assert body["cart"]["items"][0]["earned_discount_percent"] == 40
    assert body["totals"]["total"] == "18.00"


def test_replay_in_same_session_conflicts(client):
    headers = _session_headers(client)
    payload = {"cart_id": "cart-1", "product_id": TEE, "game_type": "the-culling"}

    assert client.post("/api/games", json=payload, headers=headers).status_code == 200
    assert client.post("/api/games", json=payload, headers=headers).status_code == 409

    client.delete(f"/api/sessions/{headers[SESSION_HEADER]}")
    fresh = _session_headers(client)
    assert client.post("/api/games", json=payload, headers=fresh).status_code == 200


def test_unknown_game_type_rejected(client):
    response = client.post(
        "/api/games",
        json={"cart_id": "cart-1", "product_id": TEE, "game_type": "snake"},
        headers=_session_headers(client),
    )
    assert response.status_code == 422


def test_missing_discount_is_null(client):
    response = client.get(f"/api/discounts/cart-1/{TEE}")
    assert response.status_code == 200
    assert response.json()["discount"] is None


def test_invalid_quantity_does_not_mutate(client):
    response = client.post(
        "/api/cart/cart-1/items",
        json={"product_id": TEE, "variant_id": TEE_BLACK_M, "quantity": 100},
    )
    assert response.status_code == 400

    cart = client.get("/api/cart/cart-1").json()
    assert cart["cart"]["items"] == []


def test_cart_line_lifecycle(client):
    added = client.post(
        "/api/cart/cart-1/items",
        json={"product_id": TEE, "variant_id": TEE_BLACK_M, "quantity": 2},
    ).json()
    line_id = added["cart"]["items"][0]["id"]

    updated = client.put(f"/api/cart/cart-1/items/{line_id}", json={"quantity": 4})
    assert updated.json()["totals"]["item_count"] == 4

    assert client.put(f"/api/cart/cart-1/items/{line_id}", json={"quantity": 0}).status_code == 400
    assert client.put("/api/cart/cart-1/items/nope", json={"quantity": 2}).status_code == 404

    removed = client.delete(f"/api/cart/cart-1/items/{line_id}")
    assert removed.json()["cart"]["items"] == []
    assert client.delete(f"/api/cart/cart-1/items/{line_id}").status_code == 404


def test_checkout(client):
    client.post(
        "/api/cart/cart-1/items",
        json={"product_id": TEE, "variant_id": TEE_BLACK_M, "quantity": 1},
    )

    response = client.post("/api/checkout", json={"cart_id": "cart-1"})
    assert response.status_code == 200
    order = response.json()["order"]
    assert order["totals"]["subtotal"] == "30.00"

    assert client.get(f"/api/checkout/orders/{order['order_id']}").status_code == 200
    assert client.post("/api/checkout", json={"cart_id": "cart-1"}).status_code == 400


def test_game_tiers(client):
    tiers = client.get("/api/games/tiers").json()
    assert [t["percent"] for t in tiers] == [40, 30, 20, 10]


def test_sessions_are_only_issued_on_demand(client, store):
    for path in ["/health", "/api/products", f"/api/products/{TEE}", "/api/cart/cart-1"]:
        response = client.get(path)
        assert response.status_code == 200
        assert SESSION_HEADER not in response.headers
    assert store.sessions.sessions == {}

    headers = _session_headers(client)
    assert list(store.sessions.sessions) == [headers[SESSION_HEADER]]


def test_unknown_session_id_is_not_echoed(client, store):
    response = client.get("/api/products", headers={SESSION_HEADER: "stale"})
    assert SESSION_HEADER not in response.headers
    assert store.sessions.sessions == {}


def test_viewing_a_cart_does_not_persist_it(client, store, durable_store):
    for i in range(50):
        response = client.get(f"/api/cart/ghost-{i}")
        assert response.json()["cart"]["items"] == []

    assert list(durable_store.keys()) == []
    assert store.cleanup()["locks_evicted"] == 50

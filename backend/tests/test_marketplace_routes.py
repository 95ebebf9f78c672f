# Overview: Pytest coverage for account, business, product, drone and trip routes.

"""
Marketplace Route Tests

Covers the CRUD surface around the order engine:
- registration/login and the statistics counters they move
- self-or-admin user updates and admin-only deactivation
- business, product and drone lifecycles (owner only, soft delete)
- trip registration rules
- public /stats and /health
"""

import pytest
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from dronemart.models import Business, Location, Product, Trip, User
from dronemart.services import drone_service, ownership_service, stats_service, user_service
from dronemart.services.auth_service import verify_password

TEST_PASSWORD = "Password123!"


def _register(client, username="zoe", **overrides):
    payload = {
        "username": username,
        "name": "Zoe",
        "lastname": "Quinn",
        "email": f"{username}@example.com",
        "password": "s3cret-pass",
    }
    payload.update(overrides)
    return client.post("/auth/register", json=payload)


class TestRegistrationAndLogin:
    """POST /auth/register and /auth/login."""

    def test_register_returns_usable_credential(self, client, db_session):
        resp = _register(client)

        assert resp.status_code == 201
        body = resp.get_json()
        assert body["username"] == "zoe"

        me = client.get("/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
        assert me.status_code == 200
        assert me.get_json()["user_id"] == body["user_id"]

    def test_password_is_hashed(self, client, db_session):
        user_id = _register(client).get_json()["user_id"]
        user = db_session.get(User, user_id)
        assert user.password_hash != "s3cret-pass"
        assert verify_password("s3cret-pass", user.password_hash)

    def test_duplicate_username_is_409(self, client, db_session):
        assert _register(client).status_code == 201
        resp = _register(client)
        assert resp.status_code == 409
        assert resp.get_json()["kind"] == "CONFLICT"

    def test_missing_fields_is_400(self, client, db_session):
        resp = client.post("/auth/register", json={"username": "x"})
        assert resp.status_code == 400
        assert "password" in resp.get_json()["details"]["missing"]

    def test_unknown_field_is_400(self, client, db_session):
        resp = _register(client, is_admin=True)
        assert resp.status_code == 400

    def test_login(self, client, alice):
        resp = client.post("/auth/login", json={"username": "alice", "password": TEST_PASSWORD})
        assert resp.status_code == 200
        assert resp.get_json()["user_id"] == alice.id

    @pytest.mark.parametrize(
        "username,password",
        [("alice", "wrong"), ("nobody", TEST_PASSWORD), ("alice", ""), (None, None)],
    )
    def test_login_failures_are_indistinguishable(self, client, alice, username, password):
        resp = client.post("/auth/login", json={"username": username, "password": password})
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Invalid credentials"

    def test_inactive_user_cannot_login(self, client, make_user):
        make_user("dormant", active=False)
        resp = client.post("/auth/login", json={"username": "dormant", "password": TEST_PASSWORD})
        assert resp.status_code == 401


class TestUserManagement:
    """PUT/DELETE /users/<id>."""

    def test_self_update(self, client, db_session, alice, auth_headers):
        resp = client.put(f"/users/{alice.id}", json={"name": "Alicia"}, headers=auth_headers(alice))

        assert resp.status_code == 200
        assert db_session.get(User, alice.id).name == "Alicia"

    def test_self_password_change(self, client, alice, auth_headers):
        client.put(f"/users/{alice.id}", json={"password": "n3w-pass"}, headers=auth_headers(alice))

        resp = client.post("/auth/login", json={"username": "alice", "password": "n3w-pass"})
        assert resp.status_code == 200

    def test_empty_update_is_noop_success(self, client, alice, auth_headers):
        resp = client.put(f"/users/{alice.id}", json={}, headers=auth_headers(alice))

        assert resp.status_code == 200
        assert resp.get_json()["message"] == f"No fields to update for user {alice.id}"

    def test_admin_updates_other(self, client, db_session, make_user, bob, auth_headers):
        admin = make_user("root", admin=True)
        resp = client.put(f"/users/{bob.id}", json={"email": "b@new.example"}, headers=auth_headers(admin))

        assert resp.status_code == 200
        assert db_session.get(User, bob.id).email == "b@new.example"

    def test_update_missing_user_is_404(self, client, alice, auth_headers):
        resp = client.put("/users/999999", json={"name": "x"}, headers=auth_headers(alice))
        assert resp.status_code == 404

    def test_deactivate_requires_admin(self, client, alice, bob, auth_headers):
        resp = client.delete(f"/users/{bob.id}", headers=auth_headers(alice))
        assert resp.status_code == 403

    def test_admin_deactivates_then_404(self, client, db_session, make_user, bob, auth_headers):
        admin = make_user("root", admin=True)

        first = client.delete(f"/users/{bob.id}", headers=auth_headers(admin))
        second = client.delete(f"/users/{bob.id}", headers=auth_headers(admin))

        assert first.status_code == 200
        assert db_session.get(User, bob.id).is_active is False
        assert second.status_code == 404
        assert "already inactive" in second.get_json()["error"]


class TestBusinesses:
    """Business lifecycle."""

    def test_register_starts_unverified(self, client, db_session, alice, auth_headers):
        resp = client.post("/businesses", json={"name": "Drone Deli"}, headers=auth_headers(alice))

        assert resp.status_code == 201
        body = resp.get_json()
        assert body["verified"] is False
        assert body["active"] is True
        assert db_session.get(Business, body["business_id"]).owner_id == alice.id

    def test_inactive_user_cannot_register(self, client, make_user, auth_headers):
        dormant = make_user("dormant", active=False)
        resp = client.post("/businesses", json={"name": "Ghost Shop"}, headers=auth_headers(dormant))
        assert resp.status_code == 403
        assert resp.get_json()["kind"] == "USER_INACTIVE"

    def test_list_own_active_newest_first(self, client, alice, bob, make_business, auth_headers):
        make_business(alice, name="First")
        make_business(alice, name="Second")
        make_business(alice, name="Closed", active=False)
        make_business(bob, name="Not Mine")

        listed = client.get("/businesses", headers=auth_headers(alice)).get_json()["businesses"]

        assert [b["name"] for b in listed] == ["Second", "First"]

    def test_update_and_noop(self, client, db_session, alice, make_business, auth_headers):
        business = make_business(alice)

        noop = client.put(f"/businesses/{business.id}", json={}, headers=auth_headers(alice))
        assert noop.get_json()["message"] == f"No fields to update for business {business.id}"

        resp = client.put(
            f"/businesses/{business.id}", json={"description": "Now with croissants"}, headers=auth_headers(alice)
        )
        assert resp.status_code == 200
        assert db_session.get(Business, business.id).description == "Now with croissants"

    def test_deactivate_twice(self, client, alice, make_business, auth_headers):
        business = make_business(alice)

        assert client.delete(f"/businesses/{business.id}", headers=auth_headers(alice)).status_code == 200
        again = client.delete(f"/businesses/{business.id}", headers=auth_headers(alice))
        assert again.status_code == 404

    def test_set_location(self, client, db_session, alice, make_business, auth_headers):
        business = make_business(alice)

        resp = client.post(
            f"/businesses/{business.id}/location",
            json={"name": "Rooftop pad", "latitude": 40.4168, "longitude": -3.7038},
            headers=auth_headers(alice),
        )

        assert resp.status_code == 200
        location_id = resp.get_json()["location_id"]
        assert db_session.get(Business, business.id).location_id == location_id
        assert db_session.get(Location, location_id).latitude == pytest.approx(40.4168)


class TestProducts:
    """Product lifecycle and price handling."""

    def test_register_with_decimal_price(self, client, db_session, alice, make_business, auth_headers):
        business = make_business(alice)

        resp = client.post(
            "/products",
            json={"business_id": business.id, "name": "Croissant", "price": "2.50"},
            headers=auth_headers(alice),
        )

        assert resp.status_code == 201
        body = resp.get_json()
        assert body["price"] == "2.50"
        assert db_session.get(Product, body["product_id"]).price_cents == 250

    @pytest.mark.parametrize("price", ["-1.00", "1.005", "abc", True])
    def test_bad_price_is_400(self, client, alice, make_business, auth_headers, price):
        business = make_business(alice)
        resp = client.post(
            "/products",
            json={"business_id": business.id, "name": "Bad", "price": price},
            headers=auth_headers(alice),
        )
        assert resp.status_code == 400

    def test_register_on_foreign_business_is_403(self, client, alice, bob, make_business, auth_headers):
        business = make_business(bob)
        resp = client.post(
            "/products",
            json={"business_id": business.id, "name": "Sneaky", "price": 1},
            headers=auth_headers(alice),
        )
        assert resp.status_code == 403

    def test_register_on_missing_business_is_404(self, client, alice, auth_headers):
        resp = client.post(
            "/products",
            json={"business_id": 999999, "name": "Lost", "price": 1},
            headers=auth_headers(alice),
        )
        assert resp.status_code == 404

    def test_list_by_business_hides_inactive(self, client, alice, make_business, make_product, auth_headers):
        business = make_business(alice)
        make_product(business, name="Kept")
        make_product(business, name="Gone", active=False)

        resp = client.get(f"/businesses/{business.id}/products", headers=auth_headers(alice))

        assert resp.status_code == 200
        assert [p["name"] for p in resp.get_json()["products"]] == ["Kept"]

    def test_update_price(self, client, db_session, alice, make_business, make_product, auth_headers):
        product = make_product(make_business(alice), price_cents=1000)

        resp = client.put(f"/products/{product.id}", json={"price": 12.5}, headers=auth_headers(alice))

        assert resp.status_code == 200
        assert db_session.get(Product, product.id).price_cents == 1250

    def test_deactivated_product_cannot_be_ordered(self, client, alice, bob, make_business, make_product, auth_headers):
        product = make_product(make_business(bob))
        assert client.delete(f"/products/{product.id}", headers=auth_headers(bob)).status_code == 200

        resp = client.post(
            "/orders",
            json={"order_details": [{"product_id": product.id, "amount": 1}]},
            headers=auth_headers(alice),
        )
        assert resp.status_code == 400
        assert resp.get_json()["kind"] == "PRODUCT_INACTIVE"


class TestDrones:
    """Drone registration and deactivation."""

    def test_register_and_list(self, client, alice, auth_headers):
        resp = client.post("/drones", json={"name": "Hawk", "number": 7}, headers=auth_headers(alice))
        assert resp.status_code == 201

        drones = client.get("/drones", headers=auth_headers(alice)).get_json()["drones"]
        assert [(d["name"], d["number"]) for d in drones] == [("Hawk", 7)]

    def test_duplicate_number_is_409(self, client, alice, bob, auth_headers):
        client.post("/drones", json={"name": "Hawk", "number": 7}, headers=auth_headers(alice))
        resp = client.post("/drones", json={"name": "Copy", "number": 7}, headers=auth_headers(bob))
        assert resp.status_code == 409

    def test_deactivate(self, client, alice, make_drone, auth_headers):
        drone = make_drone(alice)

        assert client.delete(f"/drones/{drone.id}", headers=auth_headers(alice)).status_code == 200
        assert client.get("/drones", headers=auth_headers(alice)).get_json()["drones"] == []


class TestTrips:
    """POST /trips."""

    @pytest.fixture
    def ready_order(self, client, db_session, alice, bob, make_business, make_product, auth_headers):
        business = make_business(bob)
        location = Location(name="Shop", latitude=1.0, longitude=2.0)
        db_session.add(location)
        db_session.flush()
        business.location_id = location.id
        db_session.commit()
        product = make_product(business)
        resp = client.post(
            "/orders",
            json={"order_details": [{"product_id": product.id, "amount": 1}]},
            headers=auth_headers(alice),
        )
        return resp.get_json()["order_id"], location.id

    def _trip(self, drone_id, order_id, weight=1.5):
        return {
            "drone_id": drone_id,
            "order_id": order_id,
            "weight": weight,
            "from_latitude": 10.0,
            "from_longitude": 20.0,
        }

    def test_register_trip(self, client, db_session, app, alice, make_drone, auth_headers, ready_order):
        order_id, shop_location_id = ready_order
        drone = make_drone(alice)

        resp = client.post("/trips", json=self._trip(drone.id, order_id), headers=auth_headers(alice))

        assert resp.status_code == 201
        body = resp.get_json()
        assert body["state"] == "Requested"
        assert body["to_location_id"] == shop_location_id
        assert body["distance"] == app.config["TRIP_PLACEHOLDER_DISTANCE_KM"]
        trip = db_session.get(Trip, body["trip_id"])
        assert db_session.get(Location, trip.from_location_id).latitude == pytest.approx(10.0)

    def test_zero_weight_is_400(self, client, alice, make_drone, auth_headers, ready_order):
        order_id, _ = ready_order
        drone = make_drone(alice)
        resp = client.post("/trips", json=self._trip(drone.id, order_id, weight=0), headers=auth_headers(alice))
        assert resp.status_code == 400

    def test_foreign_drone_is_403(self, client, alice, bob, make_drone, auth_headers, ready_order):
        order_id, _ = ready_order
        drone = make_drone(bob)
        resp = client.post("/trips", json=self._trip(drone.id, order_id), headers=auth_headers(alice))
        assert resp.status_code == 403

    def test_inactive_drone_is_400(self, client, alice, make_drone, auth_headers, ready_order):
        order_id, _ = ready_order
        drone = make_drone(alice, active=False)
        resp = client.post("/trips", json=self._trip(drone.id, order_id), headers=auth_headers(alice))
        assert resp.status_code == 400

    def test_foreign_order_is_403(self, client, bob, make_drone, auth_headers, ready_order):
        order_id, _ = ready_order
        drone = make_drone(bob)
        resp = client.post("/trips", json=self._trip(drone.id, order_id), headers=auth_headers(bob))
        assert resp.status_code == 403

    def test_business_without_location_is_400(
        self, client, alice, bob, make_business, make_product, make_drone, auth_headers
    ):
        product = make_product(make_business(bob))
        order_id = client.post(
            "/orders",
            json={"order_details": [{"product_id": product.id, "amount": 1}]},
            headers=auth_headers(alice),
        ).get_json()["order_id"]
        drone = make_drone(alice)

        resp = client.post("/trips", json=self._trip(drone.id, order_id), headers=auth_headers(alice))
        assert resp.status_code == 400


class TestStatsAndHealth:
    """Public endpoints."""

    def test_stats_without_row_are_zero(self, client, db_session):
        resp = client.get("/stats")
        assert resp.status_code == 200
        assert resp.get_json()["total_accounts"] == 0

    def test_account_counters(self, client, db_session, make_user, auth_headers):
        first = _register(client, "one").get_json()
        _register(client, "two")
        admin = make_user("root", admin=True)

        client.delete(f"/users/{first['user_id']}", headers=auth_headers(admin))

        stats = client.get("/stats").get_json()
        assert stats["total_accounts"] == 2
        assert stats["active_accounts"] == 1
        assert stats["inactive_accounts"] == 1

    def test_health(self, client, db_session):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.get_json()["checks"]["database"]["status"] == "healthy"


def _pool_exhausted(*args, **kwargs):
    raise PoolTimeoutError("QueuePool limit of size 5 overflow 10 reached, connection timed out")


class TestPoolExhaustion:
    """Reads outside a transaction that cannot get a connection answer 503."""

    def _assert_unavailable(self, resp):
        assert resp.status_code == 503
        body = resp.get_json()
        assert body["kind"] == "CONNECTION_TIMEOUT"
        assert "QueuePool" not in str(body)

    def test_ownership_lookup_on_business_delete(self, client, alice, make_business, auth_headers, monkeypatch):
        business = make_business(alice)
        monkeypatch.setattr(ownership_service, "fetch_ownership", _pool_exhausted)

        self._assert_unavailable(client.delete(f"/businesses/{business.id}", headers=auth_headers(alice)))

    def test_ownership_lookup_on_product_update(
        self, client, alice, make_business, make_product, auth_headers, monkeypatch
    ):
        product = make_product(make_business(alice))
        monkeypatch.setattr(ownership_service, "fetch_ownership", _pool_exhausted)

        resp = client.put(f"/products/{product.id}", json={"name": "New"}, headers=auth_headers(alice))
        self._assert_unavailable(resp)

    def test_user_lookup_on_deactivate(self, client, make_user, bob, auth_headers, monkeypatch):
        admin = make_user("root", admin=True)
        monkeypatch.setattr(user_service, "fetch_ownership", _pool_exhausted)

        self._assert_unavailable(client.delete(f"/users/{bob.id}", headers=auth_headers(admin)))

    def test_drone_registration_buyer_check(self, client, alice, auth_headers, monkeypatch):
        monkeypatch.setattr(drone_service, "require_active_user", _pool_exhausted)

        resp = client.post("/drones", json={"name": "Hawk", "number": 7}, headers=auth_headers(alice))
        self._assert_unavailable(resp)

    def test_drone_listing(self, client, alice, auth_headers, monkeypatch):
        monkeypatch.setattr(drone_service, "list_drones", _pool_exhausted)

        self._assert_unavailable(client.get("/drones", headers=auth_headers(alice)))

    def test_stats(self, client, db_session, monkeypatch):
        monkeypatch.setattr(stats_service, "get_stats", _pool_exhausted)

        self._assert_unavailable(client.get("/stats"))


class TestColumnBounds:
    """Integers that cannot fit their columns are rejected, never stored."""

    def test_huge_business_id_in_path_is_404(self, client, alice, auth_headers):
        resp = client.delete(f"/businesses/{10 ** 30}", headers=auth_headers(alice))
        assert resp.status_code == 404
        assert resp.get_json()["kind"] == "BUSINESS_NOT_FOUND"

    def test_huge_product_id_in_path_is_404(self, client, alice, auth_headers):
        resp = client.put(f"/products/{10 ** 30}", json={"name": "X"}, headers=auth_headers(alice))
        assert resp.status_code == 404

    def test_huge_business_id_in_payload_is_400(self, client, alice, auth_headers):
        resp = client.post(
            "/products",
            json={"name": "Kite", "price": "1.00", "business_id": 10 ** 30},
            headers=auth_headers(alice),
        )
        assert resp.status_code == 400
        assert resp.get_json()["kind"] == "INVALID_FIELD"

    @pytest.mark.parametrize("number", [10 ** 20, 2_147_483_648, -1])
    def test_drone_number_out_of_range_is_400(self, client, db_session, alice, auth_headers, number):
        resp = client.post("/drones", json={"name": "Hawk", "number": number}, headers=auth_headers(alice))

        assert resp.status_code == 400
        assert resp.get_json()["kind"] == "INVALID_FIELD"
        assert client.get("/drones", headers=auth_headers(alice)).get_json()["drones"] == []

    def test_largest_drone_number_is_accepted(self, client, alice, auth_headers):
        resp = client.post(
            "/drones", json={"name": "Hawk", "number": 2_147_483_647}, headers=auth_headers(alice)
        )
        assert resp.status_code == 201

    def test_huge_phone_is_400(self, client, db_session):
        resp = _register(client, phone=10 ** 30)
        assert resp.status_code == 400
        assert db_session.query(User).filter_by(username="zoe").first() is None

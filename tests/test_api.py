"""HTTP tests for the storefront and admin routes."""

from storefront.sessions import AdminSession, SessionRegistry


def _order_ids(payload):
    return [r["order_id"] for r in payload["view"]["rows"]]


class TestAuth:
    def test_login_rejects_bad_password(self, client):
        resp = client.post("/auth/login", json={"email": "staff@example.com", "password": "nope"})

        assert resp.status_code == 401

    def test_admin_requires_token(self, client):
        assert client.get("/admin/orders").status_code == 401
        assert client.get("/admin/orders", headers={"Authorization": "Bearer junk"}).status_code == 401

    def test_token_must_be_a_staff_token_for_this_console(self, client):
        from jose import jwt

        from storefront.auth import TOKEN_AUDIENCE, issue_staff_token, staff_from_token

        assert staff_from_token(issue_staff_token("staff@example.com")) == "staff@example.com"

        guest = jwt.encode({"sub": "g@example.com", "role": "guest", "aud": TOKEN_AUDIENCE}, "test-secret")
        other_app = jwt.encode({"sub": "staff@example.com", "role": "staff", "aud": "elsewhere"}, "test-secret")
        for token in (guest, other_app):
            assert client.get("/admin/orders", headers={"Authorization": f"Bearer {token}"}).status_code == 401

    def test_malformed_password_hash_rejects_login(self):
        from storefront.auth import check_staff_credentials

        assert check_staff_credentials("staff@example.com", "s3cret-pass", "staff@example.com", "not-a-hash") is False

    def test_login_email_is_case_insensitive(self, client):
        resp = client.post("/auth/login", json={"email": "Staff@Example.com", "password": "s3cret-pass"})

        assert resp.status_code == 200


class TestHealth:
    def test_root(self, client):
        assert client.get("/").json() == {"ok": True, "service": "storefront-api"}

    def test_health_reports_gateway(self, client, seeded_gateway):
        assert client.get("/health").json()["gateway"] == "connected"

        seeded_gateway.fail.add("ping")
        assert client.get("/health").json() == {"ok": False, "gateway": "unreachable"}


class TestOrderReviewRoutes:
    def test_first_visit_loads_orders(self, client, auth_headers):
        resp = client.get("/admin/orders", headers=auth_headers)

        assert resp.status_code == 200
        body = resp.json()
        assert body["ok"] is True
        assert _order_ids(body) == ["TEST0001", "ORD-0002", "ORD-0003"]
        assert body["toasts"][0]["title"] == "Orders loaded"
        assert "admin_session" in resp.cookies

    def test_filter_and_search_persist_in_session(self, client, auth_headers):
        client.get("/admin/orders", headers=auth_headers)

        body = client.get("/admin/orders", params={"status": "Pending", "q": "USUARIO"}, headers=auth_headers).json()
        assert _order_ids(body) == ["TEST0001"]

        body = client.get("/admin/orders", headers=auth_headers).json()
        assert body["view"]["status_filter"] == "Pending"
        assert body["view"]["search_term"] == "USUARIO"
        assert body["toasts"] == []

    def test_foreign_status_row_is_listed(self, client, auth_headers, seeded_gateway):
        seeded_gateway.insert("orders", {"order_id": "SHIP0001", "status": "Shipped"})

        resp = client.get("/admin/orders", headers=auth_headers)

        assert resp.status_code == 200
        rows = {r["order_id"]: r for r in resp.json()["view"]["rows"]}
        assert rows["SHIP0001"]["badge"] == "secondary"

        body = client.post("/admin/orders/SHIP0001/status", json={"status": "Completed"}, headers=auth_headers).json()
        rows = {r["order_id"]: r for r in body["view"]["rows"]}
        assert rows["SHIP0001"]["status"] == "Completed"

    def test_unknown_filter(self, client, auth_headers):
        assert client.get("/admin/orders", params={"status": "Lost"}, headers=auth_headers).status_code == 422

    def test_status_update(self, client, auth_headers, seeded_gateway):
        client.get("/admin/orders", headers=auth_headers)

        resp = client.post("/admin/orders/TEST0001/status", json={"status": "Completed"}, headers=auth_headers)

        assert resp.status_code == 200
        rows = {r["order_id"]: r for r in resp.json()["view"]["rows"]}
        assert rows["TEST0001"]["status"] == "Completed"
        assert rows["TEST0001"]["actions"] == ["Pending", "Cancelled", "delete"]
        assert seeded_gateway.select("orders", {"order_id": "TEST0001"}).data[0]["status"] == "Completed"

    def test_status_update_failure(self, client, auth_headers, seeded_gateway):
        client.get("/admin/orders", headers=auth_headers)
        seeded_gateway.fail.add("update")

        body = client.post("/admin/orders/TEST0001/status", json={"status": "Cancelled"}, headers=auth_headers).json()

        assert body["ok"] is False
        assert body["toasts"][-1]["variant"] == "destructive"
        rows = {r["order_id"]: r for r in body["view"]["rows"]}
        assert rows["TEST0001"]["status"] == "Pending"

    def test_invalid_status_value(self, client, auth_headers):
        resp = client.post("/admin/orders/TEST0001/status", json={"status": "Shipped"}, headers=auth_headers)

        assert resp.status_code == 422

    def test_delete_needs_confirmation(self, client, auth_headers):
        client.get("/admin/orders", headers=auth_headers)

        assert client.delete("/admin/orders/TEST0001", headers=auth_headers).status_code == 409

        body = client.delete("/admin/orders/TEST0001", params={"confirm": "true"}, headers=auth_headers).json()
        assert _order_ids(body) == ["ORD-0002", "ORD-0003"]

    def test_refresh_failure_then_demo_data(self, client, auth_headers, seeded_gateway):
        client.get("/admin/orders", headers=auth_headers)
        seeded_gateway.fail.add("select")

        body = client.post("/admin/orders/refresh", headers=auth_headers).json()
        assert body["ok"] is False
        assert body["view"]["rows"] == []
        assert body["view"]["connection_error"] is True
        assert body["view"]["can_load_demo"] is True

        body = client.post("/admin/orders/demo", headers=auth_headers).json()
        assert _order_ids(body) == ["TEST0001"]


class TestProductAdminRoutes:
    FORM = {"name": "Map Pack", "description": "Maps\nfor\nall", "price": "12.5", "category": "Assets", "icon_name": "Map"}

    def test_create_edit_delete(self, client, auth_headers, seeded_gateway):
        body = client.get("/admin/products", headers=auth_headers).json()
        assert body["view"]["cards"] == []
        assert body["view"]["empty_message"] == "No products available."

        body = client.post("/admin/products", data=self.FORM, headers=auth_headers).json()
        assert body["ok"] is True
        card = body["view"]["cards"][0]
        assert card["price"] == "$12.50"
        assert card["truncated"] is True

        pid = card["id"]
        body = client.post(f"/admin/products/{pid}/edit", headers=auth_headers).json()
        assert body["view"]["form"]["mode"] == "edit"

        body = client.post("/admin/products", data={**self.FORM, "price": "20"}, headers=auth_headers).json()
        assert [c["price"] for c in body["view"]["cards"]] == ["$20.00"]
        assert body["view"]["form"]["mode"] == "create"

        assert client.delete(f"/admin/products/{pid}", headers=auth_headers).status_code == 409
        body = client.delete(f"/admin/products/{pid}", params={"confirm": "true"}, headers=auth_headers).json()
        assert body["view"]["cards"] == []

    def test_validation_errors(self, client, auth_headers):
        client.get("/admin/products", headers=auth_headers)

        resp = client.post("/admin/products", data={**self.FORM, "price": "49.999"}, headers=auth_headers)

        assert resp.status_code == 422
        assert "price" in resp.json()["detail"]["errors"]

    def test_image_upload(self, client, auth_headers, storage):
        client.get("/admin/products", headers=auth_headers)

        resp = client.post(
            "/admin/products",
            data=self.FORM,
            files={"image": ("cover.png", b"\x89PNG...", "image/png")},
            headers=auth_headers,
        )

        assert resp.status_code == 200
        assert resp.json()["view"]["cards"][0]["image_url"].startswith("http://testserver/storage/product-images/")
        assert len(storage.uploads) == 1

    def test_oversized_image(self, client, auth_headers, storage):
        client.get("/admin/products", headers=auth_headers)

        resp = client.post(
            "/admin/products",
            data=self.FORM,
            files={"image": ("huge.png", b"x" * (5 * 1024 * 1024 + 1), "image/png")},
            headers=auth_headers,
        )

        assert resp.status_code == 422
        assert "image" in resp.json()["detail"]["errors"]
        assert storage.uploads == []

    def test_edit_unknown_product(self, client, auth_headers):
        client.get("/admin/products", headers=auth_headers)

        assert client.post("/admin/products/404/edit", headers=auth_headers).status_code == 404


class TestShopRoutes:
    def test_submit_order_snapshots_product(self, client, seeded_gateway):
        pid = seeded_gateway.insert(
            "products", {"name": "Brain Kit", "description": "d", "price": 30.0, "category": "c"}
        ).data["id"]

        products = client.get("/shop/products").json()["products"]
        assert products[0]["name"] == "Brain Kit"

        resp = client.post("/shop/orders", json={"product_id": pid, "discord_username": "neo", "email": "neo@example.com"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "Pending"
        assert len(body["order_id"]) == 8

        seeded_gateway.update("products", {"price": 99.0}, {"id": pid})
        row = seeded_gateway.select("orders", {"order_id": body["order_id"]}).data[0]
        assert row["price"] == 30.0
        assert row["product_name"] == "Brain Kit"

    def test_unknown_product(self, client):
        assert client.post("/shop/orders", json={"product_id": 12345}).status_code == 404

    def test_catalog_unavailable(self, client, seeded_gateway):
        seeded_gateway.fail.add("select")

        assert client.get("/shop/products").status_code == 503


class TestSessions:
    def test_each_session_has_its_own_view_state(self, client, auth_headers, seeded_gateway, storage):
        from storefront import main

        registry = main.build_session_registry(seeded_gateway, storage, main.settings)
        first = registry.get_or_create(None)
        second = registry.get_or_create(None)

        first.orders.refresh()
        first.orders.apply_filter("Completed")

        assert registry.get_or_create(first.session_id) is first
        assert second.orders.state.orders == ()
        assert second.orders.state.status_filter == "All"
        assert len(registry) == 2

    def test_idle_sessions_are_dropped(self):
        now = [0.0]
        registry = SessionRegistry(lambda sid: AdminSession(sid, None, None, None), ttl=60, clock=lambda: now[0])

        first = registry.get_or_create(None)
        now[0] = 30.0
        assert registry.get_or_create(first.session_id) is first

        now[0] = 200.0
        second = registry.get_or_create(None)
        assert len(registry) == 1
        assert registry.get_or_create(first.session_id) is not first
        assert registry.get_or_create(second.session_id) is second

    def test_registry_is_bounded(self):
        registry = SessionRegistry(lambda sid: AdminSession(sid, None, None, None), max_sessions=3)

        first = registry.get_or_create(None)
        for _ in range(5):
            registry.get_or_create(None)

        assert len(registry) == 3
        assert registry.get_or_create(first.session_id) is not first

    def test_requests_without_cookie_do_not_pile_up(self, client, auth_headers):
        from storefront import main

        registry = main.app.dependency_overrides[main.get_sessions]()
        registry.max_sessions = 2
        for _ in range(5):
            client.cookies.clear()
            client.get("/admin/orders", headers=auth_headers)

        assert len(registry) <= 2


class TestImageUploadReading:
    def test_reads_at_most_one_byte_past_the_limit(self):
        import io

        from fastapi import UploadFile

        from storefront import main

        blob = io.BytesIO(b"x" * 1000)
        image = main._image_from_upload(UploadFile(file=blob, filename="big.png"), limit=10)

        assert image.size == 11
        assert blob.tell() == 11

    def test_no_file_selected(self):
        from storefront import main

        assert main._image_from_upload(None, limit=10) is None


class TestLogLevel:
    def test_unknown_level_falls_back(self, monkeypatch):
        from storefront import main

        monkeypatch.setenv("LOG_LEVEL", "verbose")
        assert main._log_level() == "INFO"

        monkeypatch.setenv("LOG_LEVEL", " debug ")
        assert main._log_level() == "DEBUG"

from sitehire.utils.auth import get_password_hash


def _booking_payload(service_id, **overrides):
    payload = {
        "service_id": service_id,
        "location": "Prince Sultan St, Jeddah",
        "date": "2026-11-02",
        "time": "08:30",
        "quantity": 1,
        "notes": "Call on arrival",
    }
    payload.update(overrides)
    return payload


def test_health_check(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_register_login_and_me(client):
    response = client.post("/auth/register", json={
        "full_name": "Sara Ahmed",
        "email": "sara@example.com",
        "phone": "+966500000000",
        "password": "correct-horse",
    })
    assert response.status_code == 201
    assert response.json()["role"] == "customer"
    assert "password_hash" not in response.json()

    duplicate = client.post("/auth/register", json={
        "full_name": "Sara Again",
        "email": "sara@example.com",
        "password": "correct-horse",
    })
    assert duplicate.status_code == 400

    bad = client.post("/auth/token", data={"username": "sara@example.com", "password": "wrong-pass"})
    assert bad.status_code == 401

    token = client.post("/auth/token", data={"username": "sara@example.com", "password": "correct-horse"})
    assert token.status_code == 200
    body = token.json()
    assert body["token_type"] == "bearer"
    assert body["role"] == "customer"

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "sara@example.com"


def test_requests_without_token_are_rejected(client):
    assert client.get("/bookings/").status_code == 401
    response = client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_suspended_user_is_forbidden(client, seed, headers):
    user = seed.user("customer", status="suspended")
    response = client.get("/auth/me", headers=headers(user))
    assert response.status_code == 403
    assert response.json()["detail"] == "Account is suspended"


def test_create_booking(client, seed, headers, store):
    customer = seed.user("customer")
    service = seed.service()

    response = client.post("/bookings/", json=_booking_payload(service["id"]), headers=headers(customer))

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "waiting_for_offers"
    assert body["customer_id"] == customer["id"]
    assert len(store.bookings) == 1


def test_create_booking_missing_location(client, seed, headers, store):
    customer = seed.user("customer")
    service = seed.service()
    payload = _booking_payload(service["id"])
    del payload["location"]

    response = client.post("/bookings/", json=payload, headers=headers(customer))

    assert response.status_code == 400
    assert response.json()["field"] == "location"
    assert response.json()["detail"] == "Missing required field: location"
    assert store.bookings == {}


def test_create_booking_blank_location(client, seed, headers, store):
    customer = seed.user("customer")
    service = seed.service()

    response = client.post(
        "/bookings/", json=_booking_payload(service["id"], location="   "), headers=headers(customer)
    )

    assert response.status_code == 400
    assert response.json()["field"] == "location"
    assert store.bookings == {}


def test_drivers_cannot_create_bookings(client, seed, headers):
    driver = seed.user("driver")
    service = seed.service()

    response = client.post("/bookings/", json=_booking_payload(service["id"]), headers=headers(driver))

    assert response.status_code == 403


def test_unknown_service_is_404(client, seed, headers):
    customer = seed.user("customer")
    response = client.post(
        "/bookings/",
        json=_booking_payload("5f1d7a43-5c7b-4c55-9a3c-2a4d2f9f0c11"),
        headers=headers(customer)
    )
    assert response.status_code == 404


def test_offer_flow(client, seed, headers, store):
    customer = seed.user("customer")
    first = seed.user("driver", full_name="Omar Haddad")
    second = seed.user("driver")
    booking = seed.booking(customer)

    open_bookings = client.get("/bookings/open", headers=headers(first))
    assert [b["id"] for b in open_bookings.json()] == [booking["id"]]

    offer_a = client.post(
        f"/bookings/{booking['id']}/offers",
        json={"offered_price": 95, "distance_km": 3.2},
        headers=headers(first)
    )
    offer_b = client.post(
        f"/bookings/{booking['id']}/offers",
        json={"offered_price": 120, "distance_km": 8},
        headers=headers(second)
    )
    assert offer_a.status_code == 201
    assert offer_b.status_code == 201

    listing = client.get(f"/bookings/{booking['id']}/offers", headers=headers(customer)).json()
    assert listing["best_offer"] == 95
    assert listing["offers"][0]["driver"]["name"] == "Omar Haddad"

    accepted = client.post(f"/offers/{offer_a.json()['id']}/accept", headers=headers(customer))
    assert accepted.status_code == 200
    assert accepted.json()["offer"]["status"] == "accepted"
    assert accepted.json()["booking"]["status"] == "offer_accepted"
    assert accepted.json()["booking"]["driver_id"] == first["id"]

    again = client.post(f"/offers/{offer_b.json()['id']}/accept", headers=headers(customer))
    assert again.status_code == 409
    assert again.json()["actual"] == "declined"

    late = client.post(
        f"/bookings/{booking['id']}/offers", json={"offered_price": 60}, headers=headers(second)
    )
    assert late.status_code == 409
    assert late.json()["expected"] == ["waiting_for_offers"]

    assert client.post(f"/bookings/{booking['id']}/complete", headers=headers(first)).status_code == 409
    started = client.post(f"/bookings/{booking['id']}/start", headers=headers(first))
    assert started.json()["status"] == "in_progress"
    completed = client.post(f"/bookings/{booking['id']}/complete", headers=headers(first))
    assert completed.json()["status"] == "completed"

    assigned = client.get("/bookings/assigned", headers=headers(first)).json()
    assert [b["id"] for b in assigned] == [booking["id"]]

    earnings = client.get("/earnings/me", headers=headers(first)).json()
    assert earnings["pending_amount"] == 85.5
    transactions = client.get("/earnings/me/transactions", headers=headers(first)).json()
    assert transactions[0]["gross_amount"] == 95


def test_customer_booking_list(client, seed, headers):
    customer = seed.user("customer")
    driver = seed.user("driver")
    booking = seed.booking(customer)
    seed.offer(booking, driver, price=120)
    seed.offer(booking, driver, price=95)

    response = client.get("/bookings/", headers=headers(customer))

    assert response.status_code == 200
    [listed] = response.json()
    assert listed["offers_count"] == 2
    assert listed["best_offer"] == 95
    assert listed["service"]["name"] == "Excavator - CAT 320"


def test_cancel_booking_with_reason(client, seed, headers, store):
    customer = seed.user("customer")
    booking = seed.booking(customer)

    response = client.post(
        f"/bookings/{booking['id']}/cancel", json={"reason": "Plans changed"}, headers=headers(customer)
    )
    assert response.status_code == 200
    assert response.json()["cancellation_reason"] == "Plans changed"

    again = client.post(f"/bookings/{booking['id']}/cancel", headers=headers(customer))
    assert again.status_code == 409


def test_booking_visibility(client, seed, headers):
    customer = seed.user("customer")
    stranger = seed.user("customer")
    driver = seed.user("driver")
    booking = seed.booking(customer)

    assert client.get(f"/bookings/{booking['id']}", headers=headers(customer)).status_code == 200
    assert client.get(f"/bookings/{booking['id']}", headers=headers(driver)).status_code == 200
    assert client.get(f"/bookings/{booking['id']}", headers=headers(stranger)).status_code == 403
    assert client.get("/bookings/no-such-booking", headers=headers(customer)).status_code == 404


def test_messages_endpoints(client, seed, headers):
    customer = seed.user("customer")
    driver = seed.user("driver", full_name="Omar Haddad")
    booking = seed.booking(customer)
    offer = seed.offer(booking, driver)
    client.post(f"/offers/{offer['id']}/accept", headers=headers(customer))

    sent = client.post(
        "/messages/",
        json={"booking_id": booking["id"], "recipient_id": customer["id"], "content": "On my way"},
        headers=headers(driver)
    )
    assert sent.status_code == 201

    empty = client.post(
        "/messages/",
        json={"booking_id": booking["id"], "recipient_id": customer["id"], "content": ""},
        headers=headers(driver)
    )
    assert empty.status_code == 400
    assert empty.json()["field"] == "content"

    assert client.get("/messages/unread/count", headers=headers(customer)).json() == {"count": 1}

    [conversation] = client.get("/messages/conversations", headers=headers(customer)).json()
    assert conversation["last_message"] == "On my way"
    assert conversation["unread_count"] == 1
    assert conversation["other_user"]["full_name"] == "Omar Haddad"

    thread = client.get(f"/messages/{booking['id']}", headers=headers(customer)).json()
    assert [m["content"] for m in thread] == ["On my way"]

    marked = client.put(
        f"/messages/{booking['id']}/read", json={"sender_id": driver["id"]}, headers=headers(customer)
    )
    assert marked.json() == {"updated": 1}
    repeat = client.put(
        f"/messages/{booking['id']}/read", json={"sender_id": driver["id"]}, headers=headers(customer)
    )
    assert repeat.json() == {"updated": 0}
    assert client.get("/messages/unread/count", headers=headers(customer)).json() == {"count": 0}


def test_admin_endpoints(client, seed, headers, store):
    admin = seed.user("admin")
    customer = seed.user("customer")
    seed.booking(customer)

    assert client.get("/admin/bookings", headers=headers(customer)).status_code == 403

    bookings = client.get("/admin/bookings", params={"status": "waiting_for_offers"}, headers=headers(admin))
    assert len(bookings.json()) == 1
    assert client.get("/admin/bookings", params={"status": "completed"}, headers=headers(admin)).json() == []

    driver = client.post("/admin/drivers", json={
        "full_name": "Khalid Nasser",
        "email": "khalid@example.com",
        "password": "truck-driver-1",
        "vehicle_plate": "ABC 1234",
    }, headers=headers(admin))
    assert driver.status_code == 201
    assert driver.json()["role"] == "driver"

    suspended = client.put(
        f"/admin/users/{customer['id']}/status", json={"status": "suspended"}, headers=headers(admin)
    )
    assert suspended.json()["status"] == "suspended"
    assert client.get("/auth/me", headers=headers(customer)).status_code == 403

    own = client.put(f"/admin/users/{admin['id']}/status", json={"status": "suspended"}, headers=headers(admin))
    assert own.status_code == 400

    service = client.post("/admin/services", json={
        "name": "Sand - 20 ton",
        "category": "sand_materials",
        "base_price": 400,
        "price_type": "per_unit",
    }, headers=headers(admin))
    assert service.status_code == 201

    hidden = client.put(
        f"/admin/services/{service.json()['id']}/active", json={"is_active": False}, headers=headers(admin)
    )
    assert hidden.json()["is_active"] is False

    summary = client.get("/admin/financial-summary", headers=headers(admin)).json()
    assert summary["total_balance"] == 0


def test_admin_settles_transaction(client, seed, headers, store):
    admin = seed.user("admin")
    customer = seed.user("customer")
    driver = seed.user("driver")
    booking = seed.booking(customer)
    offer = seed.offer(booking, driver, price=200)
    client.post(f"/offers/{offer['id']}/accept", headers=headers(customer))
    client.post(f"/bookings/{booking['id']}/start", headers=headers(driver))
    client.post(f"/bookings/{booking['id']}/complete", headers=headers(driver))

    [transaction] = client.get("/admin/transactions", headers=headers(admin)).json()
    settled = client.put(
        f"/admin/transactions/{transaction['id']}/status", json={"status": "completed"}, headers=headers(admin)
    )
    assert settled.json()["status"] == "completed"

    back = client.put(
        f"/admin/transactions/{transaction['id']}/status", json={"status": "pending"}, headers=headers(admin)
    )
    assert back.status_code == 400


def test_service_catalog_filters(client, seed, store):
    seed.service(name="Excavator - CAT 320", category="heavy_equipment", base_price=150)
    seed.service(name="Water Tank - 5000L", category="water_tanks", base_price=80, is_available_today=True)
    hidden = seed.service(name="Retired Crane", base_price=500)
    store.services[hidden["id"]]["is_active"] = False

    everything = client.get("/services/").json()
    assert {s["name"] for s in everything} == {"Excavator - CAT 320", "Water Tank - 5000L"}

    tanks = client.get("/services/", params={"category": "water_tanks"}).json()
    assert [s["name"] for s in tanks] == ["Water Tank - 5000L"]

    cheap = client.get("/services/", params={"max_price": 100}).json()
    assert [s["name"] for s in cheap] == ["Water Tank - 5000L"]

    today = client.get("/services/", params={"available_today": "true"}).json()
    assert [s["name"] for s in today] == ["Water Tank - 5000L"]

    found = client.get("/services/", params={"search": "excav"}).json()
    assert [s["name"] for s in found] == ["Excavator - CAT 320"]

    assert client.get(f"/services/{hidden['id']}").status_code == 200
    assert client.get("/services/5f1d7a43-5c7b-4c55-9a3c-2a4d2f9f0c11").status_code == 404


def test_login_with_seeded_password(client, seed):
    seed.user("driver", email="driver@example.com", password_hash=get_password_hash("secret-pass"))

    response = client.post("/auth/token", data={"username": "driver@example.com", "password": "secret-pass"})

    assert response.status_code == 200
    assert response.json()["role"] == "driver"


def test_rebook_booking(client, seed, headers, store):
    customer = seed.user("customer")
    other = seed.user("customer")
    driver = seed.user("driver")
    booking = seed.booking(customer, location="Industrial Area 2, Dammam")

    response = client.post(
        f"/bookings/{booking['id']}/rebook",
        json={"date": "2026-12-01", "time": "07:00", "quantity": 3},
        headers=headers(customer)
    )

    assert response.status_code == 201
    rebooked = response.json()
    assert rebooked["id"] != booking["id"]
    assert rebooked["service_id"] == booking["service_id"]
    assert rebooked["location"] == "Industrial Area 2, Dammam"
    assert rebooked["quantity"] == 3
    assert rebooked["status"] == "waiting_for_offers"

    payload = {"date": "2026-12-01", "time": "07:00"}
    assert client.post(
        f"/bookings/{booking['id']}/rebook", json=payload, headers=headers(other)
    ).status_code == 403
    assert client.post(
        f"/bookings/{booking['id']}/rebook", json=payload, headers=headers(driver)
    ).status_code == 403
    assert client.post("/bookings/not-a-booking/rebook", json=payload, headers=headers(customer)).status_code == 404
    assert len(store.bookings) == 2


def test_admin_edits_service(client, seed, headers):
    admin = seed.user("admin")
    customer = seed.user("customer")
    service = seed.service(name="Water Tank - 5000L", base_price=80)

    edited = client.put(f"/admin/services/{service['id']}", json={
        "name": "Water Tank - 8000L",
        "base_price": 110,
        "price_type": "per_unit",
        "platform_fee": 5,
        "is_active": False,
    }, headers=headers(admin))

    assert edited.status_code == 200
    body = edited.json()
    assert body["name"] == "Water Tank - 8000L"
    assert body["base_price"] == 110
    assert body["price_type"] == "per_unit"
    assert body["platform_fee"] == 5
    assert body["is_active"] is False
    assert body["category"] == "heavy_equipment"

    unchanged = client.put(f"/admin/services/{service['id']}", json={}, headers=headers(admin))
    assert unchanged.json()["name"] == "Water Tank - 8000L"

    negative = client.put(f"/admin/services/{service['id']}", json={"platform_fee": -1}, headers=headers(admin))
    assert negative.status_code == 400
    assert negative.json()["field"] == "platform_fee"

    assert client.put(f"/admin/services/{service['id']}", json={"name": "x"}, headers=headers(customer)).status_code == 403
    assert client.put("/admin/services/missing", json={"name": "x"}, headers=headers(admin)).status_code == 404


def test_admin_lists_users_and_drivers(client, seed, headers):
    admin = seed.user("admin")
    seed.user("customer", full_name="Sara Al-Harbi")
    active = seed.user("driver", full_name="Khalid Nasser")
    seed.user("driver", full_name="Faisal Omar", status="suspended")

    everyone = client.get("/admin/users", headers=headers(admin))
    assert everyone.status_code == 200
    assert len(everyone.json()) == 4
    assert all("password_hash" not in u for u in everyone.json())

    customers = client.get("/admin/users", params={"role": "customer"}, headers=headers(admin)).json()
    assert [u["full_name"] for u in customers] == ["Sara Al-Harbi"]

    found = client.get("/admin/users", params={"search": "khalid"}, headers=headers(admin)).json()
    assert [u["id"] for u in found] == [active["id"]]

    drivers = client.get("/admin/drivers", headers=headers(admin)).json()
    assert {d["full_name"] for d in drivers} == {"Khalid Nasser", "Faisal Omar"}

    suspended = client.get("/admin/drivers", params={"status": "suspended"}, headers=headers(admin)).json()
    assert [d["full_name"] for d in suspended] == ["Faisal Omar"]

    assert client.get("/admin/users", headers=headers(active)).status_code == 403


def test_admin_dashboard_stats(client, seed, headers):
    admin = seed.user("admin")
    customer = seed.user("customer")
    driver = seed.user("driver")
    booking = seed.booking(customer)
    offer = seed.offer(booking, driver, price=200)
    client.post(f"/offers/{offer['id']}/accept", headers=headers(customer))
    client.post(f"/bookings/{booking['id']}/start", headers=headers(driver))
    client.post(f"/bookings/{booking['id']}/complete", headers=headers(driver))

    response = client.get("/admin/stats", headers=headers(admin))

    assert response.status_code == 200
    assert response.json() == {
        "total_users": 3,
        "active_drivers": 1,
        "completed_orders": 1,
        "total_revenue": 20.0,
    }
    assert client.get("/admin/stats", headers=headers(driver)).status_code == 403

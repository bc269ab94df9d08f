"""HTTP-level tests: routes, status codes and the error envelope.

Runs the FastAPI app through httpx's ASGITransport with get_db bound to
the in-memory test session.
"""

from decimal import Decimal

import pytest
from sqlalchemy import func, select

from rigfinder.domain.models import AuditLog, ContactEvent, Report, Vendor, VendorBilling
from rigfinder.services.identity_hasher import hash_identifier


async def _count(db_session, model) -> int:
    return await db_session.scalar(select(func.count()).select_from(model))


def _log_body(vendor_id, equipment_id=None, event_type="CALL", session_id="s1", **extra):
    body = {"vendorId": vendor_id, "eventType": event_type, "sessionId": session_id}
    if equipment_id:
        body["equipmentId"] = equipment_id
    body.update(extra)
    return body


async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "service": "rigfinder"}


# ===========================================================================
# Contact events
# ===========================================================================


class TestLogContactEvent:
    async def test_billable_then_duplicate(self, client, db_session, make_vendor, make_equipment):
        vendor = await make_vendor()
        equipment = await make_equipment(vendor)

        first = await client.post("/api/contact-events/log", json=_log_body(vendor.id, equipment.id))
        second = await client.post("/api/contact-events/log", json=_log_body(vendor.id, equipment.id))

        assert first.status_code == 201
        data = first.json()
        assert data["ok"] is True
        assert data["billable"] is True
        assert data["eventId"]
        assert data["sessionId"] == "s1"

        assert second.status_code == 200
        dup = second.json()
        assert dup["billable"] is False
        assert dup["reason"] == "duplicate_within_window"
        assert dup["eventId"] is None

        assert await _count(db_session, ContactEvent) == 1

    async def test_hashes_first_forwarded_ip(self, client, db_session, make_vendor):
        vendor = await make_vendor()

        resp = await client.post(
            "/api/contact-events/log",
            json=_log_body(vendor.id, searchLocationText="Austin, TX", searchRadius=25),
            headers={"X-Forwarded-For": "203.0.113.9, 10.0.0.1", "User-Agent": "pytest-agent"},
        )
        assert resp.status_code == 201

        event = await db_session.get(ContactEvent, resp.json()["eventId"])
        assert event.ip_hash == hash_identifier("203.0.113.9")
        assert event.user_agent_hash == hash_identifier("pytest-agent")
        assert event.search_location_text == "Austin, TX"
        assert "203.0.113.9" not in (event.ip_hash or "")

    async def test_session_synthesized_when_missing(self, client, make_vendor):
        vendor = await make_vendor()

        resp = await client.post(
            "/api/contact-events/log", json={"vendorId": vendor.id, "eventType": "TEXT"}
        )

        assert resp.status_code == 201
        assert len(resp.json()["sessionId"]) == 32

    async def test_unknown_vendor_envelope(self, client, db_session):
        resp = await client.post("/api/contact-events/log", json=_log_body("missing-vendor"))

        assert resp.status_code == 404
        assert resp.json() == {"error": {"message": "Vendor not found", "code": "VENDOR_NOT_FOUND"}}
        assert await _count(db_session, ContactEvent) == 0

    async def test_unknown_equipment(self, client, make_vendor):
        vendor = await make_vendor()
        resp = await client.post(
            "/api/contact-events/log", json=_log_body(vendor.id, "missing-equipment")
        )
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "EQUIPMENT_NOT_FOUND"

    async def test_invalid_event_type(self, client, make_vendor):
        vendor = await make_vendor()
        resp = await client.post(
            "/api/contact-events/log", json=_log_body(vendor.id, event_type="FAX")
        )
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_control_characters_in_ids_rejected(self, client, make_vendor):
        vendor = await make_vendor()
        resp = await client.post(
            "/api/contact-events/log", json=_log_body(vendor.id, session_id="s1\x1fx")
        )
        assert resp.status_code == 422

    async def test_rate_limit_per_client(self, client, make_vendor):
        vendor = await make_vendor()
        headers = {"X-Forwarded-For": "198.51.100.1"}

        for i in range(30):
            resp = await client.post(
                "/api/contact-events/log",
                json=_log_body(vendor.id, session_id=f"s{i}"),
                headers=headers,
            )
            assert resp.status_code == 201

        limited = await client.post(
            "/api/contact-events/log", json=_log_body(vendor.id, session_id="s99"), headers=headers
        )
        assert limited.status_code == 429
        assert limited.json()["error"]["code"] == "RATE_LIMITED"

        other_client = await client.post(
            "/api/contact-events/log",
            json=_log_body(vendor.id, session_id="s99"),
            headers={"X-Forwarded-For": "198.51.100.2"},
        )
        assert other_client.status_code == 201


class TestLegacyContactEvent:
    async def test_always_creates_billable_event(self, client, db_session, make_vendor, make_equipment):
        vendor = await make_vendor()
        equipment = await make_equipment(vendor)
        body = {"vendorId": vendor.id, "equipmentId": equipment.id, "eventType": "WEBSITE"}

        first = await client.post("/api/contact-events", json=body)
        second = await client.post("/api/contact-events", json=body)

        assert first.status_code == 201
        assert second.status_code == 201
        assert first.json()["id"] != second.json()["id"]
        assert first.json()["isBillable"] is True
        assert await _count(db_session, ContactEvent) == 2


# ===========================================================================
# Search
# ===========================================================================


class TestSearch:
    async def test_search_returns_camel_case_listings(self, client, make_vendor, make_equipment):
        vendor = await make_vendor(name="Austin Rentals", is_sponsored=True)
        await make_equipment(vendor, type="EXCAVATOR", make="CAT", model="308")

        resp = await client.get(
            "/api/search",
            params={"equipmentType": "EXCAVATOR", "lat": 30.2672, "lng": -97.7431, "radius": 10},
        )

        assert resp.status_code == 200
        results = resp.json()
        assert len(results) == 1
        listing = results[0]
        assert listing["vendorName"] == "Austin Rentals"
        assert listing["isSponsored"] is True
        assert listing["availabilityStatus"] == "AVAILABLE"
        assert listing["distance"] == pytest.approx(0, abs=0.01)
        assert listing["freshness"] == "fresh"

    async def test_max_day_rate_and_available_only(self, client, make_vendor, make_equipment):
        vendor = await make_vendor()
        keep = await make_equipment(vendor, rate_day_min=200.0, availability_status="LIMITED")
        await make_equipment(vendor, rate_day_min=200.0, availability_status="UNAVAILABLE")
        await make_equipment(vendor, rate_day_min=800.0, availability_status="AVAILABLE")

        resp = await client.get(
            "/api/search", params={"maxDayRate": 300, "availableOnly": "true", "needDate": "today"}
        )

        assert resp.status_code == 200
        assert [r["id"] for r in resp.json()] == [keep.id]

    async def test_invalid_equipment_type(self, client):
        resp = await client.get("/api/search", params={"equipmentType": "SPACESHIP"})
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"


class TestEquipmentDetail:
    async def test_listing_with_vendor_and_availability(self, client, make_vendor, make_equipment):
        vendor = await make_vendor(name="Austin Rentals", phone="512-555-0199", is_sponsored=True)
        equipment = await make_equipment(
            vendor, type="EXCAVATOR", make="CAT", model="308", availability_status="LIMITED"
        )

        resp = await client.get(f"/api/equipment/{equipment.id}")

        assert resp.status_code == 200
        data = resp.json()
        assert data["id"] == equipment.id
        assert data["type"] == "EXCAVATOR"
        assert data["availability"]["status"] == "LIMITED"
        assert data["freshness"] == "fresh"
        assert data["vendor"]["name"] == "Austin Rentals"
        assert data["vendor"]["phone"] == "512-555-0199"
        assert data["vendor"]["isSponsored"] is True
        assert "adminNotes" not in data["vendor"]

    async def test_listing_without_availability_row(self, client, make_vendor, make_equipment):
        vendor = await make_vendor()
        equipment = await make_equipment(vendor, availability_status=None)

        resp = await client.get(f"/api/equipment/{equipment.id}")

        assert resp.status_code == 200
        assert resp.json()["availability"] is None
        assert resp.json()["freshness"] == "fresh"

    async def test_unknown_listing(self, client):
        resp = await client.get("/api/equipment/missing")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "EQUIPMENT_NOT_FOUND"

    async def test_inactive_vendor_listing_hidden(self, client, make_vendor, make_equipment):
        vendor = await make_vendor(is_active=False)
        equipment = await make_equipment(vendor)

        resp = await client.get(f"/api/equipment/{equipment.id}")

        assert resp.status_code == 404


# ===========================================================================
# Leads and reports
# ===========================================================================


class TestLeadsAndReports:
    async def test_create_lead(self, client, make_vendor, make_equipment):
        vendor = await make_vendor()
        equipment = await make_equipment(vendor)

        resp = await client.post(
            "/api/leads",
            json={
                "vendorId": vendor.id,
                "equipmentId": equipment.id,
                "requesterName": "Pat Contractor",
                "requesterEmail": "pat@example.com",
                "needDate": "tomorrow",
            },
        )

        assert resp.status_code == 201
        data = resp.json()
        assert data["vendorId"] == vendor.id
        assert data["needDate"] == "tomorrow"

    async def test_lead_unknown_vendor(self, client):
        resp = await client.post("/api/leads", json={"vendorId": "missing"})
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "VENDOR_NOT_FOUND"

    async def test_report_requires_a_target(self, client):
        resp = await client.post("/api/reports", json={"reason": "wrong phone"})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "INVALID_REQUEST"

    async def test_create_report_defaults(self, client, make_vendor, make_equipment):
        vendor = await make_vendor()
        equipment = await make_equipment(vendor)

        resp = await client.post("/api/reports", json={"equipmentId": equipment.id})

        assert resp.status_code == 201
        data = resp.json()
        assert data["reason"] == "outdated"
        assert data["status"] == "pending"
        assert data["reviewedAt"] is None


# ===========================================================================
# Admin
# ===========================================================================


@pytest.fixture
async def admin_headers(make_user, auth_headers):
    admin = await make_user(role="admin", name="Admin")
    return auth_headers(admin)


class TestAdminAuth:
    async def test_requires_token(self, client):
        resp = await client.get("/api/admin/billing")
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "UNAUTHORIZED"

    async def test_rejects_bad_token(self, client):
        resp = await client.get("/api/admin/billing", headers={"Authorization": "Bearer nope"})
        assert resp.status_code == 401

    async def test_rejects_vendor_role(self, client, make_user, auth_headers):
        vendor_user = await make_user(role="vendor")
        resp = await client.get("/api/admin/billing", headers=auth_headers(vendor_user))
        assert resp.status_code == 403
        assert resp.json()["error"]["code"] == "FORBIDDEN"


class TestAdminBilling:
    async def test_end_to_end_billing_report(
        self, client, db_session, admin_headers, make_vendor, make_equipment
    ):
        vendor = await make_vendor(name="Billed Co", cpc_rate=Decimal("20.00"))
        equipment = await make_equipment(vendor)

        for _ in range(3):
            await client.post("/api/contact-events/log", json=_log_body(vendor.id, equipment.id))
        await client.post(
            "/api/contact-events/log", json=_log_body(vendor.id, equipment.id, event_type="TEXT")
        )

        resp = await client.get("/api/admin/billing", headers=admin_headers)

        assert resp.status_code == 200
        report = resp.json()
        row = next(v for v in report["vendors"] if v["vendorId"] == vendor.id)
        assert row["thisMonth"]["total"] == 2
        assert row["thisMonth"]["call"] == 1
        assert row["thisMonth"]["text"] == 1
        assert row["cpcRate"] == 20.0
        assert row["amountDueThisMonth"] == 40.0
        assert report["totals"]["totalBillableThisMonth"] == 2
        assert report["totals"]["totalRevenue"] == 40.0
        assert set(report["period"]) == {"weekStart", "monthStart"}
        assert await _count(db_session, AuditLog) == 1

    async def test_update_cpc_rate(self, client, admin_headers, make_vendor):
        vendor = await make_vendor()

        resp = await client.put(
            f"/api/admin/billing/{vendor.id}", json={"cpcRate": 22.5}, headers=admin_headers
        )

        assert resp.status_code == 200
        assert resp.json() == {"vendorId": vendor.id, "cpcRate": 22.5}

    async def test_negative_cpc_rate_rejected(self, client, admin_headers, make_vendor):
        vendor = await make_vendor()
        resp = await client.put(
            f"/api/admin/billing/{vendor.id}", json={"cpcRate": -1}, headers=admin_headers
        )
        assert resp.status_code == 422

    @pytest.mark.parametrize("raw", ["Infinity", "NaN", "22.555", "123456789012.5"])
    async def test_unstorable_cpc_rate_rejected(
        self, client, db_session, admin_headers, make_vendor, raw
    ):
        vendor = await make_vendor()

        resp = await client.put(
            f"/api/admin/billing/{vendor.id}",
            content='{"cpcRate": %s}' % raw,
            headers={**admin_headers, "Content-Type": "application/json"},
        )

        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"
        assert await _count(db_session, VendorBilling) == 0

    async def test_cpc_rate_unknown_vendor(self, client, admin_headers):
        resp = await client.put(
            "/api/admin/billing/missing", json={"cpcRate": 10}, headers=admin_headers
        )
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "VENDOR_NOT_FOUND"

    async def test_paused_vendor_owes_nothing(self, client, admin_headers, make_vendor):
        vendor = await make_vendor(cpc_rate=Decimal("20.00"))
        await client.post("/api/contact-events/log", json=_log_body(vendor.id))

        status_resp = await client.put(
            f"/api/admin/vendors/{vendor.id}/billing-status",
            json={"status": "PAUSED"},
            headers=admin_headers,
        )
        assert status_resp.status_code == 200
        assert status_resp.json()["billingStatus"] == "PAUSED"

        report = (await client.get("/api/admin/billing", headers=admin_headers)).json()
        row = next(v for v in report["vendors"] if v["vendorId"] == vendor.id)
        assert row["thisMonth"]["total"] == 1
        assert row["amountDueThisMonth"] == 0.0
        assert report["totals"]["totalRevenue"] == 0.0


class TestAdminVendorsAndReports:
    async def test_list_vendors_with_counts(
        self, client, admin_headers, make_vendor, make_equipment
    ):
        vendor = await make_vendor(name="Counted Co")
        await make_equipment(vendor)
        await make_equipment(vendor)
        await client.post("/api/contact-events/log", json=_log_body(vendor.id))

        resp = await client.get("/api/admin/vendors", headers=admin_headers)

        assert resp.status_code == 200
        item = next(v for v in resp.json() if v["id"] == vendor.id)
        assert item["equipmentCount"] == 2
        assert item["contactEventCount"] == 1
        assert item["leadRequestCount"] == 0

    async def test_update_vendor(self, client, db_session, admin_headers, make_vendor):
        vendor = await make_vendor()

        resp = await client.put(
            f"/api/admin/vendors/{vendor.id}",
            json={"isSponsored": True, "planStatus": "pro", "adminNotes": "Called Monday"},
            headers=admin_headers,
        )

        assert resp.status_code == 200
        data = resp.json()
        assert data["isSponsored"] is True
        assert data["planStatus"] == "pro"
        assert data["adminNotes"] == "Called Monday"

        audit = (await db_session.execute(select(AuditLog))).scalars().one()
        assert audit.action == "admin_action"
        assert audit.vendor_id == vendor.id

    @pytest.mark.parametrize("field", ["isActive", "isSponsored", "planStatus", "billingStatus"])
    async def test_null_for_required_field_rejected(
        self, client, db_session, admin_headers, make_vendor, field
    ):
        vendor = await make_vendor()

        resp = await client.put(
            f"/api/admin/vendors/{vendor.id}", json={field: None}, headers=admin_headers
        )

        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"
        stored = await db_session.get(Vendor, vendor.id)
        assert stored.is_active is True
        assert stored.is_sponsored is False
        assert stored.billing_status == "ACTIVE"
        assert await _count(db_session, AuditLog) == 0

    async def test_nullable_fields_may_be_cleared(self, client, admin_headers, make_vendor):
        vendor = await make_vendor()
        await client.put(
            f"/api/admin/vendors/{vendor.id}", json={"adminNotes": "VIP"}, headers=admin_headers
        )

        resp = await client.put(
            f"/api/admin/vendors/{vendor.id}",
            json={"adminNotes": None, "lastContactedAt": None},
            headers=admin_headers,
        )

        assert resp.status_code == 200
        assert resp.json()["adminNotes"] is None
        assert resp.json()["isActive"] is True

    async def test_update_unknown_vendor(self, client, admin_headers):
        resp = await client.put(
            "/api/admin/vendors/missing", json={"isActive": False}, headers=admin_headers
        )
        assert resp.status_code == 404

    async def test_analytics(self, client, admin_headers, make_vendor, make_equipment):
        vendor = await make_vendor()
        await make_vendor(is_active=False)
        equipment = await make_equipment(vendor)
        await client.post("/api/reports", json={"equipmentId": equipment.id})

        resp = await client.get("/api/admin/analytics", headers=admin_headers)

        assert resp.status_code == 200
        assert resp.json() == {
            "totalVendors": 2,
            "activeVendors": 1,
            "totalEquipment": 1,
            "totalLeads": 0,
            "totalContactEvents": 0,
            "pendingReports": 1,
        }

    async def test_review_report(self, client, db_session, admin_headers, make_vendor, make_equipment):
        vendor = await make_vendor(name="Reported Co")
        equipment = await make_equipment(vendor, make="CAT", model="259D")
        created = await client.post("/api/reports", json={"equipmentId": equipment.id})
        report_id = created.json()["id"]

        listing = await client.get(
            "/api/admin/reports", params={"status": "pending"}, headers=admin_headers
        )
        assert listing.status_code == 200
        [item] = listing.json()
        assert item["equipmentTitle"] == "CTL CAT 259D"
        assert item["vendorName"] == "Reported Co"

        reviewed = await client.put(
            f"/api/admin/reports/{report_id}", json={"status": "reviewed"}, headers=admin_headers
        )
        assert reviewed.status_code == 200
        assert reviewed.json()["reviewedAt"] is not None

        reopened = await client.put(
            f"/api/admin/reports/{report_id}", json={"status": "pending"}, headers=admin_headers
        )
        assert reopened.json()["reviewedAt"] is None

        report = await db_session.get(Report, report_id)
        assert report.status == "pending"

    async def test_unknown_report(self, client, admin_headers):
        resp = await client.put(
            "/api/admin/reports/missing", json={"status": "dismissed"}, headers=admin_headers
        )
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "NOT_FOUND"


# ===========================================================================
# Vendor self-service
# ===========================================================================


class TestVendorSelfService:
    async def test_profile_and_analytics(
        self, client, make_user, auth_headers, make_vendor, make_equipment
    ):
        user = await make_user(role="vendor")
        vendor = await make_vendor(user_id=user.id, cpc_rate=Decimal("10.00"))
        equipment = await make_equipment(vendor)
        headers = auth_headers(user)

        await client.post("/api/contact-events/log", json=_log_body(vendor.id, equipment.id))
        await client.post(
            "/api/contact-events/log", json=_log_body(vendor.id, equipment.id, event_type="EMAIL")
        )
        await client.post("/api/leads", json={"vendorId": vendor.id})

        profile = await client.get("/api/vendors/me", headers=headers)
        assert profile.status_code == 200
        assert profile.json()["id"] == vendor.id
        assert [e["id"] for e in profile.json()["equipment"]] == [equipment.id]
        assert profile.json()["equipment"][0]["availability"]["status"] == "AVAILABLE"

        analytics = await client.get("/api/vendors/me/analytics", headers=headers)
        assert analytics.status_code == 200
        data = analytics.json()
        assert data["totalContactClicks"] == 2
        assert data["callClicks"] == 1
        assert data["emailClicks"] == 1
        assert data["leadRequests"] == 1
        assert data["last30Days"] == {"contactClicks": 2, "leadRequests": 1}
        assert data["billing"]["thisMonthBillable"] == 2
        assert data["billing"]["estimatedChargeThisMonth"] == 20.0

    async def test_no_vendor_profile(self, client, make_user, auth_headers):
        user = await make_user(role="vendor")
        resp = await client.get("/api/vendors/me", headers=auth_headers(user))
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "VENDOR_NOT_FOUND"

    async def test_update_availability(
        self, client, db_session, make_user, auth_headers, make_vendor, make_equipment
    ):
        user = await make_user(role="vendor")
        vendor = await make_vendor(user_id=user.id)
        equipment = await make_equipment(vendor, availability_status="UNKNOWN")

        resp = await client.put(
            f"/api/vendors/me/equipment/{equipment.id}/availability",
            json={"status": "LIMITED", "earliestDate": "2025-07-01T00:00:00Z"},
            headers=auth_headers(user),
        )

        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "LIMITED"
        assert data["earliestDate"].startswith("2025-07-01T00:00:00")

        audit = (await db_session.execute(select(AuditLog))).scalars().one()
        assert audit.action == "availability_update"

    async def test_cannot_update_other_vendors_equipment(
        self, client, make_user, auth_headers, make_vendor, make_equipment
    ):
        user = await make_user(role="vendor")
        await make_vendor(user_id=user.id)
        other = await make_vendor(name="Someone Else")
        equipment = await make_equipment(other)

        resp = await client.put(
            f"/api/vendors/me/equipment/{equipment.id}/availability",
            json={"status": "AVAILABLE"},
            headers=auth_headers(user),
        )

        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "EQUIPMENT_NOT_FOUND"

    async def test_availability_saved_when_audit_write_fails(
        self, client, db_session, make_user, auth_headers, make_vendor, make_equipment, fail_inserts
    ):
        user = await make_user(role="vendor")
        vendor = await make_vendor(user_id=user.id)
        equipment = await make_equipment(vendor, availability_status="UNKNOWN")
        fail_inserts(AuditLog)

        resp = await client.put(
            f"/api/vendors/me/equipment/{equipment.id}/availability",
            json={"status": "AVAILABLE"},
            headers=auth_headers(user),
        )

        assert resp.status_code == 200
        assert resp.json()["status"] == "AVAILABLE"
        assert await _count(db_session, AuditLog) == 0

    async def test_update_profile(
        self, client, db_session, make_user, auth_headers, make_vendor
    ):
        user = await make_user(role="vendor")
        vendor = await make_vendor(user_id=user.id, name="Old Name")

        resp = await client.put(
            "/api/vendors/me",
            json={"name": "Hill Country Rentals", "yardLat": 30.4, "yardLng": -97.8},
            headers=auth_headers(user),
        )

        assert resp.status_code == 200
        data = resp.json()
        assert data["name"] == "Hill Country Rentals"
        assert data["yardLat"] == 30.4
        assert data["phone"] == "512-555-0100"

        stored = await db_session.get(Vendor, vendor.id)
        assert stored.name == "Hill Country Rentals"
        audit = (await db_session.execute(select(AuditLog))).scalars().one()
        assert audit.action == "listing_edit"
        assert audit.vendor_id == vendor.id
        assert audit.user_id == user.id
        assert "Hill Country Rentals" in audit.details

    async def test_update_profile_clears_website(self, client, make_user, auth_headers, make_vendor):
        user = await make_user(role="vendor")
        await make_vendor(user_id=user.id)
        headers = auth_headers(user)
        await client.put("/api/vendors/me", json={"website": "https://old.example"}, headers=headers)

        resp = await client.put("/api/vendors/me", json={"website": None}, headers=headers)

        assert resp.status_code == 200
        assert resp.json()["website"] is None

    @pytest.mark.parametrize("body", [{"name": None}, {"name": ""}, {"yardLat": None}, {"yardLat": 91}])
    async def test_update_profile_rejects_bad_values(
        self, client, db_session, make_user, auth_headers, make_vendor, body
    ):
        user = await make_user(role="vendor")
        vendor = await make_vendor(user_id=user.id, name="Kept Name")

        resp = await client.put("/api/vendors/me", json=body, headers=auth_headers(user))

        assert resp.status_code == 422
        stored = await db_session.get(Vendor, vendor.id)
        assert stored.name == "Kept Name"
        assert stored.yard_lat == 30.2672

    async def test_update_profile_requires_vendor(self, client, make_user, auth_headers):
        user = await make_user(role="vendor")

        resp = await client.put("/api/vendors/me", json={"name": "X"}, headers=auth_headers(user))

        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "VENDOR_NOT_FOUND"

    async def test_update_profile_requires_token(self, client):
        resp = await client.put("/api/vendors/me", json={"name": "X"})
        assert resp.status_code == 401

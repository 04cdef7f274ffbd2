"""Integration tests for permission- and quota-gated creates."""

from __future__ import annotations

import pytest

from tripsaas.types import Plan, Role


@pytest.mark.integration
class TestTourQuota:
    async def test_free_plan_stops_at_three(self, client, make_tenant, make_user, login) -> None:
        tenant = await make_tenant("acme", plan=Plan.FREE)
        await make_user(tenant, "owner@acme.com", role=Role.ADMIN)
        headers = await login("owner@acme.com")

        for i in range(3):
            resp = await client.post("/api/tours", json={"name": f"Tour {i}"}, headers=headers)
            assert resp.status_code == 201, resp.text

        resp = await client.post("/api/tours", json={"name": "One too many"}, headers=headers)

        assert resp.status_code == 403
        body = resp.json()
        assert body["code"] == "PLAN_LIMIT_EXCEEDED"
        assert body["resource"] == "tours"
        assert body["limit"] == 3
        assert body["current"] == 3
        assert "Upgrade" in body["detail"]

    async def test_pro_plan_is_unlimited(self, client, make_tenant, make_user, login) -> None:
        tenant = await make_tenant("acme", plan=Plan.PRO)
        await make_user(tenant, "owner@acme.com", role=Role.ADMIN)
        headers = await login("owner@acme.com")

        for i in range(5):
            resp = await client.post("/api/tours", json={"name": f"Tour {i}"}, headers=headers)
            assert resp.status_code == 201

    async def test_sales_cannot_manage_tours(self, client, make_tenant, make_user, login) -> None:
        tenant = await make_tenant("acme", plan=Plan.PRO)
        await make_user(tenant, "sales@acme.com", role=Role.SALES)
        headers = await login("sales@acme.com")

        resp = await client.post("/api/tours", json={"name": "Gobi"}, headers=headers)

        assert resp.status_code == 403
        assert resp.json() == {"detail": "Forbidden"}

    async def test_unauthenticated(self, client) -> None:
        resp = await client.post("/api/tours", json={"name": "Gobi"})
        assert resp.status_code == 401


@pytest.mark.integration
class TestBookings:
    async def test_sales_can_book(self, client, make_tenant, make_user, login) -> None:
        tenant = await make_tenant("acme", plan=Plan.BASIC)
        await make_user(tenant, "sales@acme.com", role=Role.SALES)
        headers = await login("sales@acme.com")

        resp = await client.post(
            "/api/bookings", json={"customer_name": "Bat"}, headers=headers
        )

        assert resp.status_code == 201
        assert resp.json()["status"] == "pending"

    async def test_tour_from_other_tenant(self, client, make_tenant, make_user, login) -> None:
        acme = await make_tenant("acme", plan=Plan.PRO)
        globex = await make_tenant("globex", plan=Plan.PRO)
        await make_user(acme, "owner@acme.com")
        await make_user(globex, "owner@globex.com")
        acme_headers = await login("owner@acme.com")
        globex_headers = await login("owner@globex.com")
        tour = await client.post("/api/tours", json={"name": "Gobi"}, headers=acme_headers)

        resp = await client.post(
            "/api/bookings",
            json={"customer_name": "Bat", "tour_id": tour.json()["id"]},
            headers=globex_headers,
        )

        assert resp.status_code == 404

    async def test_support_cannot_book(self, client, make_tenant, make_user, login) -> None:
        tenant = await make_tenant("acme")
        await make_user(tenant, "support@acme.com", role=Role.SUPPORT)
        headers = await login("support@acme.com")
        resp = await client.post("/api/bookings", json={"customer_name": "Bat"}, headers=headers)
        assert resp.status_code == 403


@pytest.mark.integration
class TestStaff:
    async def test_free_plan_has_one_seat(self, client, make_tenant, make_user, login) -> None:
        tenant = await make_tenant("acme", plan=Plan.FREE)
        await make_user(tenant, "owner@acme.com")
        headers = await login("owner@acme.com")

        resp = await client.post("/api/staff", json={"email": "new@acme.com"}, headers=headers)

        assert resp.status_code == 403
        assert resp.json()["resource"] == "staff"
        assert resp.json()["limit"] == 1

    async def test_create_staff(self, client, make_tenant, make_user, login) -> None:
        tenant = await make_tenant("acme", plan=Plan.BASIC)
        await make_user(tenant, "owner@acme.com")
        headers = await login("owner@acme.com")

        resp = await client.post(
            "/api/staff",
            json={"email": "Guide@Acme.com", "role": "SUPPORT", "password": "long-enough"},
            headers=headers,
        )

        assert resp.status_code == 201
        assert resp.json()["email"] == "guide@acme.com"
        assert resp.json()["role"] == "SUPPORT"
        assert (await login("guide@acme.com", "long-enough"))["Authorization"]

    async def test_duplicate_email(self, client, make_tenant, make_user, login) -> None:
        tenant = await make_tenant("acme", plan=Plan.BASIC)
        await make_user(tenant, "owner@acme.com")
        headers = await login("owner@acme.com")

        resp = await client.post("/api/staff", json={"email": "owner@acme.com"}, headers=headers)

        assert resp.status_code == 409

    async def test_admin_cannot_create_superadmin(
        self, client, make_tenant, make_user, login
    ) -> None:
        tenant = await make_tenant("acme", plan=Plan.BASIC)
        await make_user(tenant, "owner@acme.com")
        headers = await login("owner@acme.com")

        resp = await client.post(
            "/api/staff", json={"email": "root@acme.com", "role": "SUPERADMIN"}, headers=headers
        )

        assert resp.status_code == 403

    async def test_role_change_applies_after_refresh(
        self, client, make_tenant, make_user, login
    ) -> None:
        tenant = await make_tenant("acme", plan=Plan.BASIC)
        await make_user(tenant, "owner@acme.com")
        sales = await make_user(tenant, "sales@acme.com", role=Role.SALES)
        admin_headers = await login("owner@acme.com")
        sales_headers = await login("sales@acme.com")

        resp = await client.patch(
            f"/api/staff/{sales.id}/role", json={"role": "ADMIN"}, headers=admin_headers
        )
        assert resp.status_code == 200
        assert resp.json()["role"] == "ADMIN"

        stale = await client.post("/api/tours", json={"name": "Gobi"}, headers=sales_headers)
        assert stale.status_code == 403

        refreshed = await client.post("/api/auth/refresh", headers=sales_headers)
        token = refreshed.json()["access_token"]
        fresh = await client.post(
            "/api/tours", json={"name": "Gobi"}, headers={"Authorization": f"Bearer {token}"}
        )
        assert fresh.status_code == 201

    async def test_role_change_other_tenant(self, client, make_tenant, make_user, login) -> None:
        acme = await make_tenant("acme", plan=Plan.BASIC)
        globex = await make_tenant("globex", plan=Plan.BASIC)
        await make_user(acme, "owner@acme.com")
        target = await make_user(globex, "sales@globex.com", role=Role.SALES)
        headers = await login("owner@acme.com")

        resp = await client.patch(
            f"/api/staff/{target.id}/role", json={"role": "ADMIN"}, headers=headers
        )

        assert resp.status_code == 404


@pytest.mark.integration
class TestDeactivatedTenant:
    async def test_existing_session_cannot_create(
        self, client, tenant_repo, make_tenant, make_user, login
    ) -> None:
        tenant = await make_tenant("acme", plan=Plan.PRO)
        await make_user(tenant, "owner@acme.com", role=Role.ADMIN)
        headers = await login("owner@acme.com")

        await tenant_repo.update(tenant.id, is_active=False)

        tours = await client.post("/api/tours", json={"name": "Gobi"}, headers=headers)
        bookings = await client.post(
            "/api/bookings", json={"customer_name": "Bat"}, headers=headers
        )
        staff = await client.post(
            "/api/staff",
            json={"email": "guide@acme.com", "name": "Guide", "role": "SALES"},
            headers=headers,
        )

        for resp in (tours, bookings, staff):
            assert resp.status_code == 403
            assert resp.json() == {"detail": "Tenant inactive"}

    async def test_reactivated_tenant_can_create_again(
        self, client, tenant_repo, make_tenant, make_user, login
    ) -> None:
        tenant = await make_tenant("acme", plan=Plan.PRO)
        await make_user(tenant, "owner@acme.com", role=Role.ADMIN)
        headers = await login("owner@acme.com")

        await tenant_repo.update(tenant.id, is_active=False)
        await tenant_repo.update(tenant.id, is_active=True)

        resp = await client.post("/api/tours", json={"name": "Gobi"}, headers=headers)
        assert resp.status_code == 201

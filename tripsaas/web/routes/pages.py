"""Server-rendered HTML page routes."""

from __future__ import annotations

from html import escape

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from tripsaas.web.auth.rbac import require_active_tenant
from tripsaas.web.tenant_context import TenantContext

router = APIRouter(tags=["pages"])

_DASHBOARD = """<!doctype html>
<html lang="en">
<head><meta charset="utf-8"><title>{tenant_name} | Dashboard</title></head>
<body>
<h1>{tenant_name}</h1>
<p>Signed in as {email} ({role}) on the {plan} plan.</p>
</body>
</html>
"""


@router.get("/dashboard", response_class=HTMLResponse)
async def dashboard_page(
    tenant: TenantContext = Depends(require_active_tenant),
) -> HTMLResponse:
    return HTMLResponse(
        _DASHBOARD.format(
            tenant_name=escape(tenant.tenant_name),
            email=escape(tenant.email),
            role=tenant.role.value,
            plan=tenant.plan.value,
        )
    )

"""Small stand-in for Keystone + Nova, enough to run the handler locally.

    uvicorn examples.fake_openstack.app:app --port 5000

clouds.yaml for it:

    clouds:
      monitoring:
        auth:
          auth_url: http://localhost:5000/identity
          username: monitoring
          password: secret
          project_name: admin
          user_domain_name: Default
          project_domain_name: Default
        region_name: RegionOne
"""
from __future__ import annotations

import secrets
import uuid
from typing import Any

from fastapi import FastAPI, Header, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

app = FastAPI(title="Fake OpenStack control plane")

USERS = {"monitoring": "secret"}
APP_CREDENTIALS = {"ac-1": "ac-secret"}
REGION = "RegionOne"

APP_STATE: dict[str, Any] = {
    "tokens": set(),
    "services": [],
    "page_size": 0,  # 0 = no pagination
    "auth_calls": 0,
    "list_calls": [],
    "updates": [],
}


def _service(host: str, binary: str = "nova-compute", service_id: str | None = None, status: str = "enabled") -> dict[str, Any]:
    return {
        "id": service_id or str(uuid.uuid4()),
        "binary": binary,
        "host": host,
        "zone": "nova",
        "status": status,
        "state": "up",
        "disabled_reason": None,
        "forced_down": False,
        "updated_at": "2026-10-19T10:00:00.000000",
    }


def reset() -> None:
    APP_STATE["tokens"] = set()
    APP_STATE["services"] = []
    APP_STATE["page_size"] = 0
    APP_STATE["auth_calls"] = 0
    APP_STATE["list_calls"] = []
    APP_STATE["updates"] = []


def _fault(code: int, kind: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=code, content={kind: {"code": code, "message": message}})


def _check_token(token: str | None) -> None:
    if not token or token not in APP_STATE["tokens"]:
        raise HTTPException(status_code=401, detail="The request you have made requires authentication.")


def _microversion(header: str | None) -> tuple[int, int]:
    # "compute 2.79"
    if not header or not header.startswith("compute "):
        return (2, 1)
    major, minor = header.split(" ", 1)[1].split(".")
    return int(major), int(minor)


# --- Keystone ---

@app.post("/identity/v3/auth/tokens")
async def issue_token(request: Request) -> Response:
    APP_STATE["auth_calls"] += 1
    body = await request.json()
    identity = body.get("auth", {}).get("identity", {})
    methods = identity.get("methods") or []

    ok = False
    if "password" in methods:
        user = identity.get("password", {}).get("user", {})
        ok = USERS.get(user.get("name") or user.get("id")) == user.get("password")
    elif "application_credential" in methods:
        cred = identity.get("application_credential", {})
        ok = APP_CREDENTIALS.get(cred.get("id")) == cred.get("secret")
    if not ok:
        return JSONResponse(
            status_code=401,
            content={"error": {"code": 401, "title": "Unauthorized", "message": "The request you have made requires authentication."}},
        )

    token = secrets.token_hex(16)
    APP_STATE["tokens"].add(token)
    base = str(request.base_url).rstrip("/")
    catalog = [
        {
            "type": "identity",
            "name": "keystone",
            "endpoints": [{"interface": "public", "region_id": REGION, "url": f"{base}/identity"}],
        },
        {
            "type": "compute",
            "name": "nova",
            "endpoints": [
                {"interface": "public", "region_id": REGION, "url": f"{base}/compute/v2.1"},
                {"interface": "internal", "region_id": REGION, "url": f"{base}/compute-internal/v2.1"},
            ],
        },
    ]
    return JSONResponse(status_code=201, content={"token": {"methods": methods, "catalog": catalog}}, headers={"X-Subject-Token": token})


# --- Nova ---

@app.get("/compute/v2.1/os-services")
def list_services(
    request: Request,
    binary: str | None = None,
    host: str | None = None,
    marker: str | None = None,
    x_auth_token: str | None = Header(None),
) -> dict[str, Any]:
    _check_token(x_auth_token)
    APP_STATE["list_calls"].append({"binary": binary, "host": host, "marker": marker})

    found = [
        s for s in APP_STATE["services"]
        if (binary is None or s["binary"] == binary) and (host is None or s["host"] == host)
    ]
    if marker:
        ids = [s["id"] for s in found]
        found = found[ids.index(marker) + 1:] if marker in ids else []

    out: dict[str, Any] = {"services": found}
    size = APP_STATE["page_size"]
    if size and len(found) > size:
        out["services"] = found[:size]
        nxt = request.url.include_query_params(marker=found[size - 1]["id"])
        out["services_links"] = [{"rel": "next", "href": str(nxt)}]
    return out


class ServiceUpdate(BaseModel):
    status: str | None = Field(None, description="enabled|disabled")
    disabled_reason: str | None = Field(None, max_length=255)
    forced_down: bool | None = None


@app.put("/compute/v2.1/os-services/{service_id}")
def update_service(
    service_id: str,
    body: ServiceUpdate,
    x_auth_token: str | None = Header(None),
    openstack_api_version: str | None = Header(None),
) -> Response:
    _check_token(x_auth_token)
    if _microversion(openstack_api_version) < (2, 53):
        return _fault(404, "itemNotFound", "PUT /os-services/{id} requires microversion 2.53")
    if body.status not in (None, "enabled", "disabled"):
        return _fault(400, "badRequest", f"Invalid status: '{body.status}'")
    if body.disabled_reason is not None and body.status != "disabled":
        return _fault(400, "badRequest", "Specifying 'disabled_reason' with status other than 'disabled' is invalid.")

    for s in APP_STATE["services"]:
        if s["id"] == service_id:
            break
    else:
        return _fault(404, "itemNotFound", f"Service {service_id} not found.")

    APP_STATE["updates"].append({"id": service_id, **body.model_dump(exclude_none=True)})
    if body.status == "enabled":
        s["status"] = "enabled"
        s["disabled_reason"] = None
    elif body.status == "disabled":
        s["status"] = "disabled"
        s["disabled_reason"] = body.disabled_reason
    return JSONResponse(content={"service": s})


# --- test helpers ---

class SeedRequest(BaseModel):
    host: str
    binary: str = "nova-compute"
    id: str | None = None
    status: str = "enabled"


@app.post("/simulate/services")
def seed_service(req: SeedRequest) -> dict[str, Any]:
    s = _service(req.host, req.binary, req.id, req.status)
    APP_STATE["services"].append(s)
    return s


@app.post("/simulate/page-size/{size}")
def set_page_size(size: int) -> dict[str, int]:
    APP_STATE["page_size"] = size
    return {"page_size": size}


@app.post("/simulate/reset")
def simulate_reset() -> dict[str, str]:
    reset()
    return {"msg": "reset"}

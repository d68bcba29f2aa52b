from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx

from .clouds import CloudProfile
from .errors import ConfigurationError, TransportError
from .transport import Deadline, error_detail, json_body, send

PASSWORD_AUTH_TYPES = {"password", "v3password"}
APP_CREDENTIAL_AUTH_TYPES = {"v3applicationcredential", "applicationcredential"}


@dataclass(frozen=True)
class Token:
    value: str
    catalog: list[dict[str, Any]] = field(default_factory=list)

    def endpoint_for(self, service_type: str, interface: str = "public", region: str = "") -> str:
        """Find an endpoint URL in the service catalog."""
        for svc in self.catalog:
            if not isinstance(svc, dict) or svc.get("type") != service_type:
                continue
            for ep in svc.get("endpoints") or []:
                if not isinstance(ep, dict) or ep.get("interface") != interface:
                    continue
                if region and region not in (ep.get("region_id"), ep.get("region")):
                    continue
                return str(ep["url"]).rstrip("/")
        where = f" in region '{region}'" if region else ""
        raise ConfigurationError(f"no {interface} '{service_type}' endpoint{where} in the service catalog")


def tokens_url(auth_url: str) -> str:
    base = auth_url.rstrip("/")
    if not base.endswith("/v3"):
        base += "/v3"
    return f"{base}/auth/tokens"


def _named(auth: dict[str, Any], prefix: str) -> dict[str, Any]:
    """``{"id": ...}`` or ``{"name": ..., "domain": ...}`` for a user or project."""
    if auth.get(f"{prefix}_id"):
        return {"id": auth[f"{prefix}_id"]}
    out: dict[str, Any] = {"name": auth.get(f"{prefix}name") or auth.get(f"{prefix}_name")}
    domain = _domain(auth, prefix)
    if domain:
        out["domain"] = domain
    return out


def _domain(auth: dict[str, Any], prefix: str) -> dict[str, str] | None:
    if auth.get(f"{prefix}_domain_id"):
        return {"id": auth[f"{prefix}_domain_id"]}
    if auth.get(f"{prefix}_domain_name"):
        return {"name": auth[f"{prefix}_domain_name"]}
    # clouds.yaml shorthand for both user and project domain
    if auth.get("domain_id"):
        return {"id": auth["domain_id"]}
    if auth.get("domain_name"):
        return {"name": auth["domain_name"]}
    return None


def _scope(auth: dict[str, Any]) -> dict[str, Any] | None:
    if auth.get("project_id"):
        return {"project": {"id": auth["project_id"]}}
    if auth.get("project_name"):
        return {"project": _named(auth, "project")}
    if auth.get("domain_id") or auth.get("domain_name"):
        return {"domain": _domain(auth, "")}
    return None


def auth_request(profile: CloudProfile) -> dict[str, Any]:
    """Keystone v3 ``POST /auth/tokens`` body for the profile's auth type."""
    auth = profile.auth
    if profile.auth_type in PASSWORD_AUTH_TYPES:
        user = _named(auth, "user")
        user["password"] = auth.get("password")
        if not (user.get("id") or user.get("name")) or not user["password"]:
            raise ConfigurationError(f"cloud '{profile.name}': username and password are required")
        body: dict[str, Any] = {"identity": {"methods": ["password"], "password": {"user": user}}}
        scope = _scope(auth)
        if scope:
            body["scope"] = scope
        return {"auth": body}

    if profile.auth_type in APP_CREDENTIAL_AUTH_TYPES:
        secret = auth.get("application_credential_secret")
        if auth.get("application_credential_id"):
            cred: dict[str, Any] = {"id": auth["application_credential_id"]}
        elif auth.get("application_credential_name"):
            cred = {"name": auth["application_credential_name"], "user": _named(auth, "user")}
        else:
            raise ConfigurationError(f"cloud '{profile.name}': application_credential_id or _name is required")
        if not secret:
            raise ConfigurationError(f"cloud '{profile.name}': application_credential_secret is required")
        cred["secret"] = secret
        return {"auth": {"identity": {"methods": ["application_credential"], "application_credential": cred}}}

    raise ConfigurationError(f"cloud '{profile.name}': unsupported auth_type '{profile.auth_type}'")


def authenticate(http: httpx.Client, profile: CloudProfile, deadline: Deadline) -> Token:
    """Get a scoped token once; it is never refreshed within an invocation."""
    body = auth_request(profile)
    resp = send(http, "POST", tokens_url(profile.auth_url), deadline, "Keystone authentication", json=body)
    if resp.status_code not in (200, 201):
        raise TransportError(f"Keystone authentication error: {error_detail(resp)}")
    value = resp.headers.get("X-Subject-Token")
    if not value:
        raise TransportError("Keystone authentication error: no X-Subject-Token in response")
    token = json_body(resp, "Keystone authentication error").get("token")
    catalog = token.get("catalog") if isinstance(token, dict) else None
    if not isinstance(catalog, list):
        raise TransportError("Keystone authentication error: no service catalog in the token")
    return Token(value=value, catalog=catalog)

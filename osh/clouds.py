from __future__ import annotations

import os
import ssl
from dataclasses import dataclass, field
from typing import Any

import yaml

from .errors import ConfigurationError
from .log import log_event

SEARCH_DIRS = (
    os.getcwd,
    lambda: os.path.expanduser("~/.config/openstack"),
    lambda: "/etc/openstack",
)


@dataclass(frozen=True)
class CloudProfile:
    name: str
    auth: dict[str, Any]
    auth_type: str = "password"
    region_name: str = ""
    interface: str = "public"
    verify: bool = True
    cacert: str | None = None
    cert: str | None = None
    key: str | None = None
    source: str = field(default="", compare=False)

    @property
    def auth_url(self) -> str:
        return str(self.auth["auth_url"])

    def ssl_verify(self) -> ssl.SSLContext | bool:
        """Value for httpx ``verify``."""
        if not self.verify:
            return False
        if not (self.cacert or self.cert):
            return True
        try:
            ctx = ssl.create_default_context(cafile=self.cacert)
            if self.cert:
                ctx.load_cert_chain(self.cert, self.key)
        except (OSError, ssl.SSLError) as e:
            files = ", ".join(f for f in (self.cacert, self.cert, self.key) if f)
            raise ConfigurationError(f"cloud '{self.name}': TLS file ({files}) cannot be loaded: {e}") from e
        return ctx


def _load_yaml_file(path: str, name: str) -> dict[str, Any]:
    try:
        with open(path, "r") as stream:
            data = yaml.safe_load(stream) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"{name} parsing failed ({path}): {e}") from e
    except OSError as e:
        raise ConfigurationError(f"{name} file access failed ({path}): {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Invalid {name} format in {path}")
    return data


def _deep_merge(base: dict[str, Any], extra: dict[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for k, v in extra.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def find_clouds_file(clouds_file: str = "") -> str:
    """Return the clouds.yaml to use: the explicit one, or the first found."""
    if clouds_file:
        if not os.path.isfile(clouds_file):
            raise ConfigurationError(f"clouds file not found: {clouds_file}")
        return clouds_file
    for d in SEARCH_DIRS:
        candidate = os.path.join(d(), "clouds.yaml")
        if os.path.isfile(candidate):
            return candidate
    raise ConfigurationError("no clouds.yaml found (set OS_CLIENT_CONFIG_FILE or --os-config-file)")


def load_cloud_profile(cloud: str, clouds_file: str = "") -> CloudProfile:
    """Resolve one named cloud from clouds.yaml, merged with secure.yaml.

    secure.yaml is looked up next to the clouds.yaml actually used and only
    contributes the entry for the same cloud (typically the password).
    """
    path = find_clouds_file(clouds_file)
    clouds = _load_yaml_file(path, "clouds configuration").get("clouds")
    if not isinstance(clouds, dict):
        raise ConfigurationError(f"Missing 'clouds' key in clouds configuration at {path}")
    if cloud not in clouds:
        raise ConfigurationError(f"cloud '{cloud}' not found in {path}")
    entry = clouds[cloud] or {}

    secure_path = os.path.join(os.path.dirname(os.path.abspath(path)), "secure.yaml")
    if os.path.isfile(secure_path):
        secure = _load_yaml_file(secure_path, "secure configuration").get("clouds") or {}
        if isinstance(secure.get(cloud), dict):
            entry = _deep_merge(entry, secure[cloud])

    auth = entry.get("auth") or {}
    if not auth.get("auth_url"):
        raise ConfigurationError(f"cloud '{cloud}' has no auth.auth_url in {path}")

    interface = str(entry.get("interface") or "public")
    # keystone catalog uses "public", clouds.yaml also accepts "publicURL"
    if interface.endswith("URL"):
        interface = interface[: -len("URL")]

    log_event("DEBUG", f"Using cloud '{cloud}' from {path}")
    return CloudProfile(
        name=cloud,
        auth=dict(auth),
        auth_type=str(entry.get("auth_type") or "password"),
        region_name=str(entry.get("region_name") or ""),
        interface=interface,
        verify=bool(entry.get("verify", True)),
        cacert=entry.get("cacert"),
        cert=entry.get("cert"),
        key=entry.get("key"),
        source=path,
    )

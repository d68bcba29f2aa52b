from __future__ import annotations

import argparse
import os
from dataclasses import dataclass, replace
from typing import Mapping

from .errors import ConfigurationError

PLUGIN_NAME = "sensu-go-openstack-service-handler"
ANNOTATION_KEYSPACE = f"sensu.io/plugins/{PLUGIN_NAME}/config"

# annotation path -> Settings field
ANNOTATION_PATHS = {
    "cloud": "cloud",
    "os_config_file": "clouds_file",
    "service": "service",
    "binary": "binary",
    "host": "host",
    "id": "service_id",
}


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    # Cloud profile
    cloud: str = "monitoring"
    clouds_file: str = ""

    # Target service
    service: str = "compute"
    binary: str = "nova-compute"
    host: str = ""
    service_id: str = ""

    # Transport
    debug: bool = False
    timeout_s: int = 60


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog=PLUGIN_NAME,
        description="Plugin to change enabled state of the OpenStack service.",
    )
    # Defaults stay None so that only explicit flags override env values.
    p.add_argument("-c", "--cloud", help="Cloud used to access openstack API (env OS_CLOUD, default 'monitoring')")
    p.add_argument("--os-config-file", dest="clouds_file", help="Clouds.yaml file path (env OS_CLIENT_CONFIG_FILE)")
    p.add_argument("-s", "--service", help="Service to check (default 'compute')")
    p.add_argument("-b", "--binary", help="Service binary to search (default 'nova-compute')")
    p.add_argument("-H", "--host", help="Host of the service; defaults to the event entity name")
    p.add_argument("--id", dest="service_id", help="Service ID; skips the search by host and binary")
    p.add_argument("-d", "--debug", action="store_true", default=None, help="Debug API calls")
    p.add_argument("--timeout", dest="timeout_s", type=int, help="Overall deadline in seconds (default 60)")
    return p


def annotation_overrides(annotations: Mapping[str, str]) -> dict[str, str]:
    """Map keyspace annotations to Settings fields."""
    out: dict[str, str] = {}
    prefix = ANNOTATION_KEYSPACE + "/"
    for key, value in annotations.items():
        if not key.startswith(prefix):
            continue
        field = ANNOTATION_PATHS.get(key[len(prefix):])
        if field:
            out[field] = value
    return out


def load_settings(argv: list[str] | None = None, env: Mapping[str, str] | None = None) -> Settings:
    """Build Settings with precedence default < env < flags."""
    env = os.environ if env is None else env
    s = Settings(
        cloud=env.get("OS_CLOUD") or Settings.cloud,
        clouds_file=env.get("OS_CLIENT_CONFIG_FILE", ""),
        timeout_s=_env_int(env, "OSH_TIMEOUT_S", Settings.timeout_s),
    )

    args = build_parser().parse_args(argv or [])
    flags = {k: v for k, v in vars(args).items() if v is not None}
    s = replace(s, **flags)

    if s.timeout_s <= 0:
        raise ConfigurationError(f"timeout must be positive, got {s.timeout_s}")
    return s


def apply_annotations(s: Settings, annotations: Mapping[str, str]) -> Settings:
    """Event annotations under the plugin keyspace win over everything else."""
    overrides = annotation_overrides(annotations)
    return replace(s, **overrides) if overrides else s

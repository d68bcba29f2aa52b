from __future__ import annotations

from enum import Enum
from typing import Callable

import httpx

from .api_models import HealthEvent, ServiceQuery, ServiceRecord
from .clouds import CloudProfile, load_cloud_profile
from .compute import ComputeClient
from .errors import ConfigurationError
from .keystone import authenticate
from .reconciler import reconcile
from .log import log_event
from .resolver import check_query, resolve
from .settings import Settings
from .transport import Deadline, build_client


class ServiceKind(str, Enum):
    COMPUTE = "compute"

    @classmethod
    def parse(cls, value: str) -> "ServiceKind":
        try:
            return cls(value)
        except ValueError:
            raise ConfigurationError(f"unsupported service: {value}") from None


def handle_compute(
    http: httpx.Client,
    profile: CloudProfile,
    deadline: Deadline,
    event: HealthEvent,
    settings: Settings,
) -> ServiceRecord:
    host = settings.host or event.entity_name
    query = ServiceQuery(host=host, binary=settings.binary)
    if not settings.service_id:
        check_query(query)

    token = authenticate(http, profile, deadline)
    endpoint = token.endpoint_for("compute", profile.interface, profile.region_name)
    client = ComputeClient(http, endpoint, token.value, deadline)
    service_id = resolve(settings.service_id, query, client)
    return reconcile(client, service_id, event.check_status, event.check_summary)


Handler = Callable[[httpx.Client, CloudProfile, Deadline, HealthEvent, Settings], ServiceRecord]

HANDLERS: dict[ServiceKind, Handler] = {
    ServiceKind.COMPUTE: handle_compute,
}


def run(event: HealthEvent, settings: Settings, http: httpx.Client | None = None) -> ServiceRecord:
    """Handle one event end to end.

    Configuration problems are reported before the first request; everything
    after that shares one deadline of ``settings.timeout_s`` seconds.
    """
    kind = ServiceKind.parse(settings.service)
    handler = HANDLERS[kind]
    log_event("INFO", f"Handling {event.entity_name}/{event.check_name}: {event.check_status.value}")
    profile = load_cloud_profile(settings.cloud, settings.clouds_file)
    deadline = Deadline(settings.timeout_s)

    if http is not None:
        return handler(http, profile, deadline, event, settings)
    with build_client(profile, settings.debug) as client:
        return handler(client, profile, deadline, event, settings)

from __future__ import annotations

from .api_models import ServiceQuery
from .compute import ComputeClient
from .errors import ConfigurationError, ResolutionError
from .log import log_event


def check_query(query: ServiceQuery) -> None:
    if not query.host or not query.binary:
        raise ConfigurationError(f"host and binary are required to search the service (got {query.params()})")


def resolve(configured_id: str | None, query: ServiceQuery, client: ComputeClient) -> str:
    """Return the id of the compute service to act on.

    A configured id is used as is, without asking the API. Otherwise the
    services matching ``query`` are listed (all pages) and the first one wins.
    Several matches are reported but do not fail the lookup.
    """
    if configured_id:
        return configured_id

    check_query(query)
    log_event("INFO", f"Searching ID for host: {query.host}, binary: {query.binary}")
    services = client.list_services(query)
    if not services:
        raise ResolutionError(f"Service not found (host: {query.host}, binary: {query.binary})")

    service_id = services[0].id
    if len(services) > 1:
        log_event(
            "WARN",
            f"{len(services)} services match, using the first one: {[s.id for s in services]}",
            host=query.host,
            service_id=service_id,
        )
    log_event("INFO", f"Found service ID: {service_id}")
    return service_id

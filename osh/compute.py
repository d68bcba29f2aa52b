from __future__ import annotations

from typing import Iterator

import httpx
from pydantic import ValidationError

from .api_models import DesiredState, ServiceQuery, ServiceRecord
from .errors import TransportError, UpdateError
from .transport import Deadline, error_detail, json_body, send

# Train and newer; 2.53 brought UUID ids and PUT /os-services/{id}
COMPUTE_MICROVERSION = "2.79"


def _parse(data: object) -> ServiceRecord:
    if not isinstance(data, dict):
        raise TransportError(f"unexpected compute service payload: {data!r:.200}")
    try:
        return ServiceRecord.from_api(data)
    except ValidationError as e:
        raise TransportError(f"unexpected compute service payload: {e}") from e


class ComputeClient:
    """Minimal Nova client: list and update ``os-services`` entries."""

    def __init__(
        self,
        http: httpx.Client,
        endpoint: str,
        token: str,
        deadline: Deadline,
        microversion: str = COMPUTE_MICROVERSION,
    ):
        self.http = http
        self.endpoint = endpoint.rstrip("/")
        self.deadline = deadline
        self.headers = {
            "X-Auth-Token": token,
            "OpenStack-API-Version": f"compute {microversion}",
            "X-OpenStack-Nova-API-Version": microversion,
        }

    def iter_service_pages(self, query: ServiceQuery) -> Iterator[list[ServiceRecord]]:
        """Yield pages of the filtered listing, following ``next`` links."""
        url: str | None = f"{self.endpoint}/os-services"
        params: dict[str, str] | None = query.params()
        seen: set[str] = set()
        while url:
            resp = send(self.http, "GET", url, self.deadline, "Compute services list error",
                        params=params, headers=self.headers)
            if resp.status_code != 200:
                raise TransportError(f"Compute services list error: {error_detail(resp)}")
            data = json_body(resp, "Compute services list error")
            yield [_parse(s) for s in data.get("services") or []]

            # next links already carry the query string
            params = None
            url = None
            for link in data.get("services_links") or []:
                if isinstance(link, dict) and link.get("rel") == "next" and link.get("href") not in seen:
                    url = link["href"]
                    seen.add(url)

    def list_services(self, query: ServiceQuery) -> list[ServiceRecord]:
        services: list[ServiceRecord] = []
        for page in self.iter_service_pages(query):
            services.extend(page)
        return services

    def update_service(self, service_id: str, desired: DesiredState) -> ServiceRecord:
        what = f"Compute service id: {service_id} update error"
        resp = send(self.http, "PUT", f"{self.endpoint}/os-services/{service_id}", self.deadline, what,
                    json=desired.body(), headers=self.headers)
        if resp.status_code in (401, 403):
            raise TransportError(f"{what}: {error_detail(resp)}")
        if resp.status_code != 200:
            raise UpdateError(service_id, f"{what}: {error_detail(resp)}")
        return _parse(json_body(resp, what).get("service") or {})

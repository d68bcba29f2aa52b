import os
import sys

import pytest
import yaml
from fastapi.testclient import TestClient

# Ensure project root is importable (so `import examples...` works reliably across environments)
_project_root = os.path.dirname(os.path.dirname(__file__))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from examples.fake_openstack import app as fake  # noqa: E402
from osh.api_models import HealthEvent, ServiceRecord  # noqa: E402
from osh.settings import Settings  # noqa: E402


CLOUD = {
    "auth": {
        "auth_url": "http://testserver/identity",
        "username": "monitoring",
        "password": "secret",
        "project_name": "admin",
        "user_domain_name": "Default",
        "project_domain_name": "Default",
    },
    "region_name": "RegionOne",
}


@pytest.fixture()
def cloud():
    """TestClient for the fake control plane, starting from an empty state."""
    fake.reset()
    with TestClient(fake.app) as client:
        yield client
    fake.reset()


@pytest.fixture()
def state():
    return fake.APP_STATE


@pytest.fixture()
def clouds_file(tmp_path):
    path = tmp_path / "clouds.yaml"
    path.write_text(yaml.safe_dump({"clouds": {"monitoring": CLOUD}}))
    return str(path)


@pytest.fixture()
def settings(clouds_file):
    return Settings(cloud="monitoring", clouds_file=clouds_file)


def make_event(name="node-07", status=0, output=""):
    return HealthEvent.from_sensu(
        {
            "entity": {"metadata": {"name": name}},
            "check": {"metadata": {"name": "check-compute"}, "status": status, "output": output},
        }
    )


class RecordingCompute:
    """Stands in for ComputeClient and remembers every call."""

    def __init__(self, services=()):
        self.services = list(services)
        self.list_calls = []
        self.updates = []

    def list_services(self, query):
        self.list_calls.append(query)
        return list(self.services)

    def update_service(self, service_id, desired):
        self.updates.append((service_id, desired))
        return ServiceRecord(id=service_id, status=desired.status, disabled_reason=desired.disabled_reason)


@pytest.fixture()
def recording():
    return RecordingCompute


@pytest.fixture()
def ok_event():
    return make_event(status=0)


@pytest.fixture()
def failing_event():
    return make_event(status=2, output="disk usage 98% on /var\n")


def record(service_id, host="node-07", binary="nova-compute"):
    return ServiceRecord(id=service_id, host=host, binary=binary, status="enabled")


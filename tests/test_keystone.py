import pytest

from osh.clouds import CloudProfile
from osh.errors import ConfigurationError
from osh.keystone import Token, auth_request, tokens_url


def test_tokens_url():
    assert tokens_url("http://k:5000") == "http://k:5000/v3/auth/tokens"
    assert tokens_url("http://k:5000/v3/") == "http://k:5000/v3/auth/tokens"


def test_password_body_with_names():
    p = CloudProfile(
        name="c",
        auth={
            "auth_url": "http://k",
            "username": "u",
            "password": "p",
            "project_name": "admin",
            "user_domain_name": "Default",
            "project_domain_id": "default",
        },
    )
    assert auth_request(p) == {
        "auth": {
            "identity": {
                "methods": ["password"],
                "password": {"user": {"name": "u", "domain": {"name": "Default"}, "password": "p"}},
            },
            "scope": {"project": {"name": "admin", "domain": {"id": "default"}}},
        }
    }


def test_password_body_with_ids():
    p = CloudProfile(name="c", auth={"auth_url": "http://k", "user_id": "uid", "password": "p", "project_id": "pid"})
    body = auth_request(p)["auth"]
    assert body["identity"]["password"]["user"] == {"id": "uid", "password": "p"}
    assert body["scope"] == {"project": {"id": "pid"}}


def test_application_credential_body():
    p = CloudProfile(
        name="c",
        auth_type="v3applicationcredential",
        auth={"auth_url": "http://k", "application_credential_id": "ac-1", "application_credential_secret": "s"},
    )
    assert auth_request(p) == {
        "auth": {
            "identity": {
                "methods": ["application_credential"],
                "application_credential": {"id": "ac-1", "secret": "s"},
            }
        }
    }


@pytest.mark.parametrize(
    "auth_type,auth",
    [
        ("password", {"username": "u"}),
        ("v3applicationcredential", {"application_credential_id": "ac-1"}),
        ("v3applicationcredential", {"application_credential_secret": "s"}),
        ("v3oidcpassword", {"username": "u", "password": "p"}),
    ],
)
def test_incomplete_auth_rejected(auth_type, auth):
    with pytest.raises(ConfigurationError):
        auth_request(CloudProfile(name="c", auth_type=auth_type, auth={"auth_url": "http://k", **auth}))


def test_endpoint_lookup():
    token = Token(
        value="t",
        catalog=[
            {"type": "compute", "endpoints": [
                {"interface": "public", "region_id": "RegionTwo", "url": "http://two/v2.1/"},
                {"interface": "public", "region_id": "RegionOne", "url": "http://one/v2.1"},
                {"interface": "internal", "region_id": "RegionOne", "url": "http://int/v2.1"},
            ]},
        ],
    )
    assert token.endpoint_for("compute", "public", "RegionOne") == "http://one/v2.1"
    assert token.endpoint_for("compute", "public") == "http://two/v2.1"
    assert token.endpoint_for("compute", "internal", "RegionOne") == "http://int/v2.1"
    with pytest.raises(ConfigurationError, match="no admin 'compute' endpoint"):
        token.endpoint_for("compute", "admin")

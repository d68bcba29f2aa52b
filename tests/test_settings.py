import pytest

from osh.errors import ConfigurationError
from osh.settings import ANNOTATION_KEYSPACE, Settings, apply_annotations, load_settings


def test_defaults():
    s = load_settings([], env={})
    assert s == Settings()
    assert s.cloud == "monitoring"
    assert s.service == "compute"
    assert s.binary == "nova-compute"
    assert s.host == "" and s.service_id == ""
    assert s.timeout_s == 60


def test_env_then_flags():
    env = {"OS_CLOUD": "prod", "OS_CLIENT_CONFIG_FILE": "/etc/x.yaml", "OSH_TIMEOUT_S": "30"}
    s = load_settings([], env=env)
    assert (s.cloud, s.clouds_file, s.timeout_s) == ("prod", "/etc/x.yaml", 30)

    s = load_settings(["-c", "staging", "--timeout", "5", "-H", "node-1", "--id", "svc-1", "-b", "nova-ironic", "-d"], env=env)
    assert s.cloud == "staging"
    assert s.clouds_file == "/etc/x.yaml"
    assert s.timeout_s == 5
    assert s.host == "node-1"
    assert s.service_id == "svc-1"
    assert s.binary == "nova-ironic"
    assert s.debug is True


def test_bad_env_timeout_falls_back_to_default():
    assert load_settings([], env={"OSH_TIMEOUT_S": "soon"}).timeout_s == 60


def test_non_positive_timeout_rejected():
    with pytest.raises(ConfigurationError):
        load_settings(["--timeout", "0"], env={})


def test_annotations_win():
    s = load_settings(["-H", "from-flag"], env={})
    s = apply_annotations(
        s,
        {
            f"{ANNOTATION_KEYSPACE}/host": "from-annotation",
            f"{ANNOTATION_KEYSPACE}/id": "svc-ann",
            f"{ANNOTATION_KEYSPACE}/os_config_file": "/tmp/clouds.yaml",
            f"{ANNOTATION_KEYSPACE}/unknown": "ignored",
            "fatigue_check/occurrences": "3",
        },
    )
    assert s.host == "from-annotation"
    assert s.service_id == "svc-ann"
    assert s.clouds_file == "/tmp/clouds.yaml"


def test_no_annotations_keeps_settings():
    s = Settings(host="h")
    assert apply_annotations(s, {}) is s

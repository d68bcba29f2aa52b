from osh.api_models import CheckStatus, ServiceStatus
from osh.reconciler import DISABLED_REASON_PREFIX, desired_state, reconcile


def test_ok_enables_without_reason():
    d = desired_state(CheckStatus.OK, "all good")
    assert d.status == ServiceStatus.ENABLED
    assert d.disabled_reason is None
    assert d.body() == {"status": "enabled"}


def test_failure_disables_with_reason():
    d = desired_state(CheckStatus.NON_OK, "disk usage 98% on /var")
    assert d.status == ServiceStatus.DISABLED
    assert d.disabled_reason == "Disabled by Health action, because disk usage 98% on /var"
    assert d.body() == {"status": "disabled", "disabled_reason": d.disabled_reason}


def test_long_summary_is_trimmed_to_100():
    summary = "x" * 60 + "y" * 60
    d = desired_state(CheckStatus.NON_OK, summary)
    assert d.disabled_reason == DISABLED_REASON_PREFIX + summary[:100]
    assert len(d.disabled_reason) == len(DISABLED_REASON_PREFIX) + 100


def test_summary_of_exactly_100_is_kept():
    summary = "z" * 100
    assert desired_state(CheckStatus.NON_OK, summary).disabled_reason == DISABLED_REASON_PREFIX + summary


def test_reconcile_issues_one_update(recording):
    client = recording()
    rec = reconcile(client, "svc-42", CheckStatus.OK, "")
    assert rec.status == ServiceStatus.ENABLED
    assert len(client.updates) == 1
    assert client.updates[0][0] == "svc-42"
    assert client.list_calls == []


def test_reconcile_is_repeatable(recording):
    client = recording()
    reconcile(client, "svc-42", CheckStatus.NON_OK, "load too high")
    reconcile(client, "svc-42", CheckStatus.NON_OK, "load too high")
    (id1, first), (id2, second) = client.updates
    assert id1 == id2 == "svc-42"
    assert first == second
    assert first.disabled_reason == DISABLED_REASON_PREFIX + "load too high"

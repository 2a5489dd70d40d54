import json

import pytest

from notifyhub import DispatchError, HubError, NotificationHub


@pytest.fixture
def mixed_report():
    hub = NotificationHub()

    def record(payload):
        pass

    def explode(payload):
        raise ValueError("bad payload")

    hub.subscribe("orders.created", record)
    hub.subscribe("orders.created", explode)
    return hub.publish("orders.created", {"id": 1})


def test_views(mixed_report):
    assert len(mixed_report.succeeded) == 1
    assert len(mixed_report.failures) == 1
    assert [type(e) for e in mixed_report.errors] == [ValueError]
    assert [h.__name__ for h in mixed_report.handlers] == ["record", "explode"]
    assert mixed_report.started_at_unix > 0


def test_raise_for_failures(mixed_report):
    with pytest.raises(DispatchError) as excinfo:
        mixed_report.raise_for_failures()

    err = excinfo.value
    assert isinstance(err, HubError)
    assert err.report is mixed_report
    assert len(err.failures) == 1
    assert isinstance(err.__cause__, ValueError)
    assert "1 of 2 handler(s) failed" in str(err)


def test_raise_for_failures_noop_when_ok():
    hub = NotificationHub()
    hub.subscribe("x", lambda p: None)

    hub.publish("x").raise_for_failures()
    hub.publish("empty").raise_for_failures()


def test_summary(mixed_report):
    summary = mixed_report.summary()

    assert summary.kind == "orders.created"
    assert summary.invoked == 2
    assert summary.succeeded == 1
    assert summary.failed == 1
    first, second = summary.outcomes
    assert first.status == "success"
    assert first.handler.endswith("record")
    assert first.error is None
    assert second.status == "failure"
    assert second.error_type == "ValueError"
    assert second.error == "bad payload"

    data = json.loads(summary.model_dump_json())
    assert data["outcomes"][1]["subscription_id"] == mixed_report[1].subscription.id


def test_summary_of_empty_report():
    summary = NotificationHub().publish("nobody").summary()

    assert summary.invoked == 0
    assert summary.failed == 0
    assert summary.outcomes == []


def test_empty_report_is_truthy():
    report = NotificationHub().publish("nobody")

    assert len(report) == 0
    assert report
    assert report.ok

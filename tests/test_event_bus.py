import pytest

from studydesk.services.event_bus import ALERTS_TOPIC, Alert, AlertCenter, EventBus, EventBusClosedError


def test_publish_reaches_all_subscribers(bus):
    received = []
    bus.subscribe("todos", lambda payload: received.append(("a", payload)))
    bus.subscribe("todos", lambda payload: received.append(("b", payload)))
    assert bus.publish("todos", 1) == 2
    assert received == [("a", 1), ("b", 1)]


def test_unsubscribe_stops_delivery(bus):
    received = []
    unsubscribe = bus.subscribe("todos", received.append)
    unsubscribe()
    unsubscribe()
    assert bus.publish("todos", 1) == 0
    assert received == []


def test_closed_bus_drops_events():
    bus = EventBus()
    received = []
    bus.subscribe("todos", received.append)
    bus.close()
    assert bus.closed
    assert bus.publish("todos", 1) == 0
    assert received == []
    with pytest.raises(EventBusClosedError):
        bus.subscribe("todos", received.append)


def test_alert_center_buffers_until_drained(alerts):
    alerts.success("Saved")
    alerts.error("Failed", retry_available=True)
    drained = alerts.drain()
    assert [(a.level, a.message, a.retry_available) for a in drained] == [
        ("success", "Saved", False),
        ("error", "Failed", True),
    ]
    assert alerts.drain() == []


def test_alerts_get_unique_ids(alerts):
    first = alerts.info("one")
    second = alerts.warning("two")
    assert first.id != second.id


def test_two_contexts_do_not_share_alerts():
    first, second = AlertCenter(EventBus()), AlertCenter(EventBus())
    first.info("only here")
    assert second.drain() == []
    assert len(first.drain()) == 1


def test_unknown_level_rejected(alerts):
    with pytest.raises(ValueError):
        alerts.show("hmm", level="fatal")


def test_alerts_from_other_publishers_are_collected(bus, alerts):
    bus.publish(ALERTS_TOPIC, Alert("external", level="warning"))
    assert alerts.drain()[0].message == "external"


def test_closed_center_ignores_alerts(bus, alerts):
    alerts.close()
    assert alerts.info("late") is None
    assert alerts.drain() == []


def test_pending_alerts_are_bounded(bus):
    center = AlertCenter(bus, max_pending=3)
    for n in range(5):
        center.info(str(n))
    assert [a.message for a in center.drain()] == ["2", "3", "4"]

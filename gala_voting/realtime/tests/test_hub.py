import logging

from gala_voting.realtime.events import CategoryCreated
from gala_voting.realtime.events import CategoryDeleted
from gala_voting.realtime.events import ChangeEvent
from gala_voting.realtime.events import SettingUpdated
from gala_voting.realtime.events import VoteCast
from gala_voting.realtime.tests.fakes import ADMIN_TOKEN


def _created():
    return CategoryCreated(
        category_id="best-speaker",
        title="Best Speaker",
        description="",
        icon="mic",
        is_award=False,
        display_order=1,
    )


def test_publish_reaches_every_connection_once(hub, registry, transport):
    for sid in ("a", "b", "c"):
        registry.connect(sid)

    report = hub.publish(CategoryDeleted(category_id="best-speaker"))

    assert sorted(report.delivered) == ["a", "b", "c"]
    assert report.failed == ()
    assert sorted(sid for sid, _, _ in transport.sent) == ["a", "b", "c"]
    assert {(event, payload["id"]) for _, event, payload in transport.sent} == {
        ("category-deleted", "best-speaker"),
    }


def test_publish_with_no_connections(hub, transport):
    report = hub.publish(CategoryDeleted(category_id="x"))
    assert report.delivered == ()
    assert transport.sent == []


def test_publish_admin_only_reaches_admins(hub, registry, transport):
    registry.connect("public")
    registry.connect("admin")
    registry.admit_admin("admin", ADMIN_TOKEN)

    hub.publish_admin(SettingUpdated(key="voting_enabled", value="false"))

    assert transport.events_for("admin") == [
        ("setting-updated", {"key": "voting_enabled", "value": "false"}),
    ]
    assert transport.events_for("public") == []


def test_rejected_admin_never_sees_admin_events(hub, registry, transport):
    registry.connect("c1")
    registry.admit_admin("c1", "forged-or-expired")

    hub.publish_admin(SettingUpdated(key="site_title", value="Gala"))
    hub.publish(CategoryDeleted(category_id="x"))

    assert [event for event, _ in transport.events_for("c1")] == ["category-deleted"]


def test_dead_connection_does_not_block_others(hub, registry, transport, caplog):
    registry.connect("alive")
    registry.connect("dead")
    transport.dead.add("dead")

    with caplog.at_level(logging.ERROR, logger="gala_voting.realtime.hub"):
        report = hub.publish(_created())

    assert report.delivered == ("alive",)
    assert report.failed == ("dead",)
    assert transport.events_for("alive")[0][0] == "category-created"
    assert "dead" in caplog.text


def test_stalled_connection_is_bounded(hub, registry, transport):
    registry.connect("slow")
    registry.connect("fast")
    transport.stalled.add("slow")

    report = hub.publish(VoteCast(category_id="c", nominee_id=1, session_id="s"))

    assert report.delivered == ("fast",)
    assert report.failed == ("slow",)
    assert transport.events_for("fast") == [
        ("vote-cast", {"categoryId": "c", "nomineeId": 1, "sessionId": "s"}),
    ]


def test_typed_subscriptions(hub):
    created, everything = [], []
    hub.subscribe(CategoryCreated, created.append)
    hub.subscribe(ChangeEvent, everything.append)

    event = _created()
    hub.publish(event)
    hub.publish(CategoryDeleted(category_id="best-speaker"))

    assert created == [event]
    assert [e.name for e in everything] == ["category-created", "category-deleted"]


def test_unsubscribe(hub):
    seen = []
    unsubscribe = hub.subscribe(CategoryDeleted, seen.append)
    unsubscribe()
    hub.publish(CategoryDeleted(category_id="x"))
    assert seen == []


def test_failing_subscriber_does_not_stop_delivery(hub, registry, transport):
    registry.connect("a")

    def explode(event):
        msg = "subscriber bug"
        raise RuntimeError(msg)

    hub.subscribe(ChangeEvent, explode)
    report = hub.publish(CategoryDeleted(category_id="x"))
    assert report.delivered == ("a",)

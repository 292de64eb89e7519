import itertools
from datetime import datetime, timedelta, timezone

import pytest

from microdp_tracker import TrackerConfig, TrackOptions
from microdp_tracker.core.event_builder import EventBuilder

FIXED_NOW = datetime(2024, 5, 1, 12, 30, 45, 123456, tzinfo=timezone.utc)


@pytest.fixture
def builder() -> EventBuilder:
    counter = itertools.count(1)
    return EventBuilder(id_factory=lambda: f"id-{next(counter)}", clock=lambda: FIXED_NOW)


def test_build_uses_config_defaults(builder) -> None:
    config = TrackerConfig(endpoint="https://x", tenant_id="t", user_id="u", anonymous_id="anon", session_id="s")
    event = builder.build(config, "clicked", {"a": 1})

    assert event.event_id == "id-1"
    assert (event.tenant_id, event.user_id, event.anonymous_id, event.session_id) == ("t", "u", "anon", "s")
    assert event.event_time == "2024-05-01T12:30:45.123Z"
    assert event.sent_at == event.event_time


def test_overrides_win_over_config(builder) -> None:
    config = TrackerConfig(endpoint="https://x", tenant_id="t", user_id="u", session_id="s")
    options = TrackOptions(tenant_id="t2", user_id="u2", anonymous_id="a2", session_id="s2")
    event = builder.build(config, "clicked", None, options)

    assert (event.tenant_id, event.user_id, event.anonymous_id, event.session_id) == ("t2", "u2", "a2", "s2")
    assert event.properties == {}


def test_missing_identity_stays_absent_but_session_is_generated(builder) -> None:
    event = builder.build(TrackerConfig(endpoint="https://x"), "clicked")

    assert event.tenant_id is None
    assert event.user_id is None
    assert event.anonymous_id is None
    assert event.event_id == "id-1"
    assert event.session_id == "id-2"
    assert "user_id" not in event.to_dict()


def test_event_time_override_is_independent_of_sent_at(builder) -> None:
    config = TrackerConfig(endpoint="https://x")
    earlier = FIXED_NOW - timedelta(hours=1)

    from_string = builder.build(config, "a", options=TrackOptions(event_time="2020-01-01T00:00:00Z"))
    from_datetime = builder.build(config, "a", options=TrackOptions(event_time=earlier))
    from_naive = builder.build(config, "a", options=TrackOptions(event_time=datetime(2021, 6, 1, 8, 0)))

    assert from_string.event_time == "2020-01-01T00:00:00Z"
    assert from_datetime.event_time == "2024-05-01T11:30:45.123Z"
    assert from_naive.event_time == "2021-06-01T08:00:00.000Z"
    assert from_string.sent_at == "2024-05-01T12:30:45.123Z"


def test_properties_are_copied(builder) -> None:
    props = {"k": "v"}
    event = builder.build(TrackerConfig(endpoint="https://x"), "a", props)
    props["k"] = "changed"
    assert event.properties == {"k": "v"}


@pytest.mark.parametrize("name", ["", "   "])
def test_empty_name_is_rejected(builder, name) -> None:
    with pytest.raises(ValueError):
        builder.build(TrackerConfig(endpoint="https://x"), name)


def test_non_mapping_properties_are_rejected(builder) -> None:
    with pytest.raises(TypeError):
        builder.build(TrackerConfig(endpoint="https://x"), "a", [("k", "v")])  # type: ignore[arg-type]

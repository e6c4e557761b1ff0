"""Unit tests for queue-entry snapshots."""

import json

from courier.requests.descriptor import ActionDescriptor
from courier.requests.snapshot import serialize_follow_ups, snapshot_action

OPTIONS = {
    "method": "POST",
    "url": "https://api.test/forms",
    "headers": {"content-type": "application/json"},
    "content": '{"name":"Ada"}',
}


async def submit(transport, store):
    return await transport.post("/forms", json={"name": "Ada"})


async def refresh_list(transport, store):
    return await transport.get("/forms")


def mark_loading(state, dispatch):
    return None


def unwrap(result, dispatch, get_state):
    return result


def _descriptor(**fields) -> ActionDescriptor:
    return ActionDescriptor.from_intent({"types": ["S", "OK", "F"], "request": submit, **fields})


class TestSnapshotAction:
    """Tests for snapshot_action."""

    def test_strips_function_references(self) -> None:
        snapshot = snapshot_action(
            _descriptor(before=mark_loading, after=unwrap, after_failed=unwrap),
            OPTIONS,
        )

        for key in ("request", "before", "after", "after_failed"):
            assert key not in snapshot

    def test_attaches_prefer_request(self) -> None:
        snapshot = snapshot_action(_descriptor(), OPTIONS)

        assert snapshot["prefer_request"] == OPTIONS
        assert snapshot["prefer_request"] is not OPTIONS

    def test_keeps_domain_fields(self) -> None:
        snapshot = snapshot_action(_descriptor(priority=4, form={"name": "Ada"}), OPTIONS)

        assert snapshot["priority"] == 4
        assert snapshot["form"] == {"name": "Ada"}
        assert snapshot["types"] == ["S", "OK", "F"]

    def test_reducer_keeps_before_after_names(self) -> None:
        snapshot = snapshot_action(
            _descriptor(reducer="forms", before=mark_loading, after=unwrap),
            OPTIONS,
        )

        assert snapshot["before"] == "mark_loading"
        assert snapshot["after"] == "unwrap"

    def test_reducer_keeps_string_references(self) -> None:
        snapshot = snapshot_action(_descriptor(reducer="forms", after="unwrap"), OPTIONS)
        assert snapshot["after"] == "unwrap"

    def test_other_callables_named_under_reducer(self) -> None:
        snapshot = snapshot_action(
            _descriptor(reducer="forms", on_success_request=unwrap),
            OPTIONS,
        )
        assert snapshot["on_success_request"] == "unwrap"

    def test_other_callables_dropped_without_reducer(self) -> None:
        snapshot = snapshot_action(_descriptor(on_success_request=unwrap), OPTIONS)
        assert "on_success_request" not in snapshot

    def test_silent_request_keeps_only_replay_payload(self) -> None:
        snapshot = snapshot_action(
            _descriptor(is_silent_request=True, reducer="forms", priority=3, before=mark_loading),
            OPTIONS,
        )

        assert snapshot == {"prefer_request": OPTIONS}

    def test_follow_up_requests_become_names(self) -> None:
        follow_ups = [
            {
                "type": "LIST_OK",
                "request": refresh_list,
                "actions_after_success": [{"type": "DONE", "request": submit}],
            },
        ]
        descriptor = _descriptor(actions_after_success=follow_ups)

        snapshot = snapshot_action(descriptor, OPTIONS)

        chain = snapshot["actions_after_success"]
        assert chain[0]["request"] == "refresh_list"
        assert chain[0]["actions_after_success"][0]["request"] == "submit"
        # caller's chain is untouched
        assert follow_ups[0]["request"] is refresh_list

    def test_snapshot_is_json_serializable(self) -> None:
        snapshot = snapshot_action(
            _descriptor(
                reducer="forms",
                before=mark_loading,
                on_failed_request=unwrap,
                actions_after_success=[{"type": "X", "request": refresh_list}],
            ),
            OPTIONS,
        )

        json.dumps(snapshot)


class TestSerializeFollowUps:
    """Tests for serialize_follow_ups."""

    def test_empty(self) -> None:
        assert serialize_follow_ups([]) == []

    def test_plain_events_unchanged(self) -> None:
        assert serialize_follow_ups([{"type": "A", "data": {"x": 1}}]) == [{"type": "A", "data": {"x": 1}}]

"""Tests for the decision timeline projection and serialization."""

from backend.app.lifecycle.aggregate import DecisionView
from backend.app.models.decision import Decision, FileEntry, InputEntry, build_timeline


def test_timeline_sorts_newest_first_without_mutating(make_decision, make_input, make_file) -> None:
    a = make_input("a", timestamp=100)
    b = make_input("b", timestamp=300)
    f = make_file(timestamp=200)
    decision = make_decision(inputs=[a, b], files=[f])

    timeline = build_timeline(decision)

    assert [e.item.id for e in timeline] == [b.id, f.id, a.id]
    assert isinstance(timeline[0], InputEntry)
    assert isinstance(timeline[1], FileEntry)
    assert decision.inputs == (a, b)


def test_timeline_ties_keep_stored_order(make_decision, make_input, make_file) -> None:
    """Test equal timestamps keep inputs ahead of files, each in stored order."""
    a = make_input("a", timestamp=100)
    b = make_input("b", timestamp=100)
    f = make_file(timestamp=100)

    timeline = build_timeline(make_decision(inputs=[a, b], files=[f]))

    assert [e.item.id for e in timeline] == [a.id, b.id, f.id]


def test_empty_decision_has_empty_timeline(make_decision) -> None:
    assert build_timeline(make_decision()) == []


def test_decision_round_trips_through_camel_json(make_decision, make_input) -> None:
    decision = make_decision(inputs=[make_input()], last_analysis_update=42)

    payload = decision.model_dump(mode="json", by_alias=True)

    assert payload["createdAt"] == decision.created_at
    assert payload["lastAnalysisUpdate"] == 42
    assert payload["inputs"][0]["source_reference"] is None
    assert Decision.model_validate(payload) == decision


def test_view_timeline_is_tagged_by_kind(make_harness, make_decision, make_input, make_file) -> None:
    """Test serialized timeline entries validate back into the variant their kind names."""
    decision = make_decision(inputs=[make_input(timestamp=100)], files=[make_file(timestamp=200)])
    view = make_harness(decision).session.view()

    payload = view.model_dump(mode="json")
    restored = DecisionView.model_validate(payload)

    assert [e["kind"] for e in payload["timeline"]] == ["file", "input"]
    assert isinstance(restored.timeline[0], FileEntry)
    assert isinstance(restored.timeline[1], InputEntry)

    items_schema = DecisionView.model_json_schema()["properties"]["timeline"]["items"]
    assert items_schema["discriminator"]["propertyName"] == "kind"

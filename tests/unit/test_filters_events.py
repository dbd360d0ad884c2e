"""Tests for filter events and sinks."""

import io
import json

import pytest

from src.filters.events import EventKind, FilterEvent, build_events
from src.filters.models import FailureKind, FamilyEntry, FilterSet, ParsedStat
from src.filters.sink import (
    DeliveryError,
    FilterSink,
    JsonLinesSink,
    RecordingSink,
    apply_filters,
    load_schema,
)


def _filter_set(item_class="Ring"):
    return FilterSet(
        stats=[ParsedStat("+# to maximum Life", 40), ParsedStat("Storm Loop", None)],
        attributes={"+# to ATTRIBUTES": FamilyEntry("+# to ATTRIBUTES", 9, 2)},
        resistances={
            "+# to ELEMENTAL_RESIST Resistance": FamilyEntry("+# to ELEMENTAL_RESIST Resistance", 12, 3),
        },
        item_class=item_class,
    )


class TestBuildEvents:
    def test_order(self):
        events = build_events(_filter_set(), clear_first=True)
        assert [e.kind for e in events] == [
            EventKind.CLEAR_ALL,
            EventKind.SET_SIMPLE_FILTER,
            EventKind.SET_SIMPLE_FILTER,
            EventKind.SET_GROUPED_FILTER,
            EventKind.SET_GROUPED_FILTER,
            EventKind.SET_ITEM_CLASS,
        ]
        assert events[3].template == "+# to ATTRIBUTES"
        assert events[4].template == "+# to ELEMENTAL_RESIST Resistance"

    def test_no_clear_by_default(self):
        events = build_events(_filter_set())
        assert events[0].kind == EventKind.SET_SIMPLE_FILTER

    def test_no_item_class_event_without_class(self):
        events = build_events(_filter_set(item_class=None))
        assert all(e.kind != EventKind.SET_ITEM_CLASS for e in events)

    def test_max_never_set(self):
        assert all(e.max is None for e in build_events(_filter_set()))

    def test_grouped_carries_count(self):
        events = build_events(_filter_set())
        grouped = [e for e in events if e.kind == EventKind.SET_GROUPED_FILTER]
        assert [(e.count, e.min) for e in grouped] == [(2, 9), (3, 12)]


class TestToMessage:
    def test_clear(self):
        assert FilterEvent(EventKind.CLEAR_ALL).to_message() == {"type": "CLEAR_SEARCH_FORM"}

    def test_simple(self):
        event = FilterEvent(EventKind.SET_SIMPLE_FILTER, template="+# to Dexterity", min=12)
        assert event.to_message() == {
            "type": "SET_STAT_FILTER_FROM_TEXT",
            "humanText": "+# to Dexterity",
            "min": 12,
            "max": None,
        }

    def test_grouped(self):
        event = FilterEvent(EventKind.SET_GROUPED_FILTER, template="+# to ATTRIBUTES", min=9, count=2)
        assert event.to_message() == {
            "type": "SET_EXPANDED_STAT_FILTER",
            "humanText": "+# to ATTRIBUTES",
            "count": 2,
            "min": 9,
            "max": None,
        }

    def test_item_class(self):
        event = FilterEvent(EventKind.SET_ITEM_CLASS, item_class="Dagger")
        assert event.to_message() == {"type": "SET_ITEM_CLASS_FILTER", "itemClass": "Dagger"}


class TestSinks:
    def test_schema_loads(self):
        schema = load_schema("filter_event")
        assert schema["title"] == "Filter event message"

    def test_missing_schema(self):
        with pytest.raises(FileNotFoundError):
            load_schema("nope")

    def test_recording_sink(self, recording_sink):
        recording_sink.send([{"type": "CLEAR_SEARCH_FORM"}])
        assert recording_sink.delivered == [{"type": "CLEAR_SEARCH_FORM"}]

    def test_invalid_message_rejected(self, recording_sink):
        with pytest.raises(DeliveryError, match="Invalid filter message"):
            recording_sink.send([{"type": "SET_ITEM_CLASS_FILTER", "itemClass": ""}])
        assert recording_sink.delivered == []

    def test_unknown_type_rejected(self, recording_sink):
        with pytest.raises(DeliveryError):
            recording_sink.send([{"type": "DROP_TABLES"}])

    def test_json_lines_sink(self):
        stream = io.StringIO()
        JsonLinesSink(stream).send([
            {"type": "CLEAR_SEARCH_FORM"},
            {"type": "SET_ITEM_CLASS_FILTER", "itemClass": "Dagger"},
        ])
        lines = stream.getvalue().splitlines()
        assert [json.loads(line)["type"] for line in lines] == [
            "CLEAR_SEARCH_FORM", "SET_ITEM_CLASS_FILTER",
        ]

    def test_json_lines_sink_closed_stream(self):
        stream = io.StringIO()
        stream.close()
        with pytest.raises(DeliveryError):
            JsonLinesSink(stream).send([{"type": "CLEAR_SEARCH_FORM"}])

    def test_custom_sink_subclass(self):
        class ListSink(FilterSink):
            def __init__(self):
                super().__init__()
                self.batches = []

            def deliver(self, messages):
                self.batches.append(messages)

        sink = ListSink()
        sink.send([{"type": "CLEAR_SEARCH_FORM"}])
        assert sink.batches == [[{"type": "CLEAR_SEARCH_FORM"}]]


class TestApplyFilters:
    def test_success(self, recording_sink):
        result = apply_filters(_filter_set(), recording_sink, clear_first=True)
        assert result.success
        assert result.applied_count == 4
        assert result.message == "Filters applied for 4 stats."
        assert result.error is None
        assert len(recording_sink.delivered) == 6
        assert recording_sink.delivered[0] == {"type": "CLEAR_SEARCH_FORM"}
        assert recording_sink.delivered[-1] == {"type": "SET_ITEM_CLASS_FILTER", "itemClass": "Ring"}

    def test_null_magnitude_delivered(self, recording_sink):
        apply_filters(_filter_set(), recording_sink)
        assert recording_sink.delivered[1] == {
            "type": "SET_STAT_FILTER_FROM_TEXT",
            "humanText": "Storm Loop",
            "min": None,
            "max": None,
        }

    def test_delivery_failure(self, failing_sink):
        result = apply_filters(_filter_set(), failing_sink)
        assert not result.success
        assert result.applied_count == 0
        assert result.message == "Failed to set filters."
        assert result.error.kind == FailureKind.DELIVERY_FAILURE
        assert result.error.message == "Tab closed"
        assert result.error.retryable is False

"""
Tests for envelope unwrapping.

These tests verify that:
1. Each known envelope shape yields the inner record
2. Matchers apply in priority order (first match wins)
3. An unparseable body string falls back to the top-level object
4. Non-object bodies become an empty record
"""

import json

from intake import EnvelopeShape, unwrap_envelope


RECORD = {"name": "Jane", "phone": "7145551212"}


class TestKnownShapes:

    def test_payload(self):
        assert unwrap_envelope({"payload": RECORD}) == (EnvelopeShape.PAYLOAD, RECORD)

    def test_json(self):
        assert unwrap_envelope({"json": RECORD}) == (EnvelopeShape.JSON, RECORD)

    def test_data(self):
        assert unwrap_envelope({"data": RECORD}) == (EnvelopeShape.DATA, RECORD)

    def test_body_string(self):
        assert unwrap_envelope({"body": json.dumps(RECORD)}) == (EnvelopeShape.BODY_STRING, RECORD)

    def test_body_object(self):
        assert unwrap_envelope({"body": RECORD}) == (EnvelopeShape.BODY_OBJECT, RECORD)

    def test_bare(self):
        assert unwrap_envelope(RECORD) == (EnvelopeShape.BARE, RECORD)


class TestPriority:

    def test_payload_beats_data(self):
        shape, inner = unwrap_envelope({"data": {"name": "B"}, "payload": {"name": "A"}})
        assert shape == EnvelopeShape.PAYLOAD
        assert inner == {"name": "A"}

    def test_data_beats_body(self):
        shape, inner = unwrap_envelope({"body": {"name": "B"}, "data": {"name": "A"}})
        assert shape == EnvelopeShape.DATA
        assert inner == {"name": "A"}

    def test_only_one_layer_removed(self):
        shape, inner = unwrap_envelope({"data": {"data": RECORD}})
        assert shape == EnvelopeShape.DATA
        assert inner == {"data": RECORD}

    def test_non_object_data_is_ignored(self):
        body = {"data": "string", "name": "Jane"}
        assert unwrap_envelope(body) == (EnvelopeShape.BARE, body)


class TestDegradation:

    def test_unparseable_body_string_uses_top_level(self):
        body = {"body": "{not json", "name": "Jane"}
        assert unwrap_envelope(body) == (EnvelopeShape.BARE, body)

    def test_body_string_with_non_object_json_uses_top_level(self):
        body = {"body": "[1, 2, 3]", "name": "Jane"}
        assert unwrap_envelope(body) == (EnvelopeShape.BARE, body)

    def test_non_object_bodies(self):
        assert unwrap_envelope(None) == (EnvelopeShape.BARE, {})
        assert unwrap_envelope([RECORD]) == (EnvelopeShape.BARE, {})
        assert unwrap_envelope("Jane") == (EnvelopeShape.BARE, {})

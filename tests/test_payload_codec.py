"""
Tests for the QR payload codec.
"""

import json
from datetime import datetime, timezone

import pytest

from core.codec import payload_codec
from core.errors import EmptySelection, MalformedPayload, UnrecognizedShape
from core.models.payload import PayloadKind, SelectionSet
from core.models.records import Appointment, Medicine, RecordKind


EXPORT_DATE = datetime(2024, 6, 1, 10, 0, 0, 123000, tzinfo=timezone.utc)


class TestEncode:
    """Tests for encoding a bulk export."""

    def test_export_contains_only_selected_records(self, paracetamol, perez):
        """Unselected records are left out of the payload."""
        other = Medicine(id=3, name="Ibuprofeno", dose="400mg",
                         startDate="2024-02-01", times=["09:00"])
        selection = SelectionSet(medicines={1}, appointments=set())

        text = payload_codec.encode(selection, [paracetamol, other], [perez], EXPORT_DATE)
        obj = json.loads(text)

        assert obj["type"] == "export"
        assert [m["name"] for m in obj["medicines"]] == ["Paracetamol"]
        assert obj["appointments"] == []
        assert obj["exportDate"] == "2024-06-01T10:00:00.123Z"

    def test_collection_order_is_kept(self, paracetamol):
        """Records follow collection order, not selection order."""
        second = Medicine(id=3, name="B", dose="1", startDate="2024-01-01", times=["08:00"])
        text = payload_codec.encode(
            SelectionSet(medicines={3, 1}), [paracetamol, second], [], EXPORT_DATE
        )
        assert [m["id"] for m in json.loads(text)["medicines"]] == [1, 3]

    def test_owner_is_not_exported(self, paracetamol, perez):
        paracetamol.patientId = 7
        perez.patientId = 7
        text = payload_codec.encode(SelectionSet({1}, {2}), [paracetamol], [perez])
        obj = json.loads(text)
        assert "patientId" not in obj["medicines"][0]
        assert "patientId" not in obj["appointments"][0]

    def test_empty_selection_raises(self, paracetamol):
        with pytest.raises(EmptySelection):
            payload_codec.encode(SelectionSet(), [paracetamol], [])

    def test_stale_selection_raises(self, paracetamol):
        """Ids that no longer exist in the collections count as empty."""
        with pytest.raises(EmptySelection):
            payload_codec.encode(SelectionSet(medicines={99}), [paracetamol], [])

    def test_output_is_ascii(self, perez):
        """Non-ASCII text is escaped and survives the round trip."""
        text = payload_codec.encode(SelectionSet(appointments={2}), [], [perez])
        assert text.isascii()
        assert payload_codec.parse(text).appointments[0]["doctor"] == "Dr. Pérez"

    def test_round_trip(self, paracetamol, perez):
        """Parsing an encoded export yields the same records."""
        text = payload_codec.encode(SelectionSet({1}, {2}), [paracetamol], [perez], EXPORT_DATE)
        payload = payload_codec.parse(text)

        assert payload.kind == PayloadKind.BULK_EXPORT
        assert Medicine.fromDict(payload.medicines[0]) == paracetamol
        assert Appointment.fromDict(payload.appointments[0]) == perez


class TestEncodeSingle:
    """Tests for single-record payloads."""

    def test_single_drops_id_and_owner(self, paracetamol):
        paracetamol.patientId = 4
        obj = json.loads(payload_codec.encodeSingle(RecordKind.MEDICINE, paracetamol))
        assert obj["type"] == "medicine"
        assert "id" not in obj["data"]
        assert "patientId" not in obj["data"]
        assert obj["data"]["name"] == "Paracetamol"

    def test_single_accepts_raw_dict(self):
        text = payload_codec.encodeSingle(
            RecordKind.APPOINTMENT,
            {"id": 9, "doctor": "Dr. Ruiz", "date": "2025-01-01", "time": "09:00"}
        )
        payload = payload_codec.parse(text)
        assert payload.kind == PayloadKind.SINGLE_APPOINTMENT
        assert payload.data == {"doctor": "Dr. Ruiz", "date": "2025-01-01", "time": "09:00"}


class TestParse:
    """Tests for parsing decoded QR text."""

    @pytest.mark.parametrize("text", ["", "   ", "not json", "{\"type\": ", None])
    def test_malformed_text(self, text):
        with pytest.raises(MalformedPayload):
            payload_codec.parse(text)

    def test_invalid_utf8_bytes(self):
        with pytest.raises(MalformedPayload):
            payload_codec.parse(b"\xff\xfe\x00")

    def test_bytes_are_decoded(self):
        payload = payload_codec.parse(b'{"type":"export","medicines":[],"appointments":[]}')
        assert payload.kind == PayloadKind.BULK_EXPORT

    @pytest.mark.parametrize("text", [
        "[1, 2, 3]",
        "42",
        '{"type": "prescription", "data": {}}',
        '{"medicines": []}',
        '{"type": "medicine"}',
        '{"type": "medicine", "data": "Paracetamol"}',
        '{"type": "export"}',
        '{"type": "export", "medicines": "none"}',
    ])
    def test_unrecognized_shapes(self, text):
        with pytest.raises(UnrecognizedShape):
            payload_codec.parse(text)

    def test_deeply_nested_json(self):
        """Nesting deep enough to exhaust the recursion limit still fits one QR code."""
        with pytest.raises(MalformedPayload):
            payload_codec.parse("[" * 2900)

    @pytest.mark.parametrize("field, value", [
        ("appointments", {"x": 1}),
        ("appointments", None),
        ("medicines", "Paracetamol"),
    ])
    def test_present_sequence_must_be_a_list(self, field, value):
        """A malformed side is rejected instead of clearing that collection."""
        obj = {"type": "export", "medicines": [{"name": "A"}], "appointments": []}
        obj[field] = value
        with pytest.raises(UnrecognizedShape) as excinfo:
            payload_codec.parse(json.dumps(obj))
        assert field in excinfo.value.detail

    def test_missing_sequence_defaults_to_empty(self):
        payload = payload_codec.parse('{"type": "export", "medicines": [{"name": "A"}]}')
        assert payload.appointments == []
        assert payload.exportDate is None

    def test_errors_share_base_class(self):
        """Every parse error carries a user-facing message."""
        with pytest.raises(MalformedPayload) as excinfo:
            payload_codec.parse("{")
        assert excinfo.value.userMessage


class TestIsoTimestamp:
    def test_millisecond_precision(self):
        assert payload_codec.isoTimestamp(EXPORT_DATE) == "2024-06-01T10:00:00.123Z"

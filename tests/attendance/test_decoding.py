from __future__ import annotations

from datetime import datetime

import pytest

from smart_attend.attendance.decoding import (
    decode_all,
    decode_metadata,
    decode_record,
    decode_student_stats,
    decode_subject_stats,
)
from smart_attend.core.exceptions import DecodeError
from smart_attend.database.document_store import StoredDocument


def test_missing_fields_default_to_zero_values():
    record = decode_record({"subject": "CS101"})

    assert record.subject == "CS101"
    assert record.roll_number == ""
    assert record.present is False
    assert record.is_extra is False
    assert record.timestamp == ""


def test_record_maps_store_field_names():
    record = decode_record(
        {
            "date": "2025-03-07",
            "deviceRoom": "B-204",
            "group": "G1",
            "rollNumber": "102",
            "type": "lab",
            "present": True,
            "isExtra": True,
            "timestamp": datetime(2025, 3, 7, 9, 30, 5),
        }
    )

    assert record.room == "B-204"
    assert record.roll_number == "102"
    assert record.is_extra is True
    assert record.timestamp == "2025-03-07 09:30:05"


@pytest.mark.parametrize("payload", [{"present": "yes"}, {"subject": 101}, {"isExtra": 1}])
def test_wrong_field_type_is_rejected(payload):
    with pytest.raises(DecodeError):
        decode_record(payload)


def test_boolean_is_not_a_number():
    with pytest.raises(DecodeError):
        decode_metadata({"totalStudents": True})


def test_metadata_keeps_only_string_list_items():
    metadata = decode_metadata({"subjects": ["CS101", 7, "MA201"], "totalClasses": 12.0})

    assert metadata.subjects == ["CS101", "MA201"]
    assert metadata.groups == []
    assert metadata.total_classes == 12


def test_subject_stats_require_subject_and_group():
    with pytest.raises(DecodeError):
        decode_subject_stats({"subject": "CS101"})


def test_student_stats_subject_map():
    stats = decode_student_stats(
        {
            "group": "G1",
            "subjects": {"CS101": {"totalClasses": 4, "attended": 3, "percentage": 75.0, "labStats": {"total": 1}}},
            "overallStats": {"totalClasses": 4, "attendedClasses": 3, "percentage": 75.0},
        },
        roll_number="102",
        year=2025,
        month=3,
    )

    assert stats.roll_number == "102"
    assert stats.subjects["CS101"].attended_classes == 3
    assert stats.subjects["CS101"].lab_stats.total == 1
    assert stats.overall_stats.attended_classes == 3


def test_decode_all_drops_only_bad_documents():
    docs = [
        StoredDocument("a", {"subject": "CS101", "present": True}),
        StoredDocument("b", {"subject": "CS101", "present": "maybe"}),
        StoredDocument("c", {"subject": "MA201"}),
    ]

    records = decode_all(docs, decode_record)

    assert [r.subject for r in records] == ["CS101", "MA201"]

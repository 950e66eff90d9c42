from __future__ import annotations

from datetime import date

import pytest

from smart_attend.attendance.raw_service import RawQueryService
from smart_attend.core.exceptions import DataUnavailableError


def make_service(store, **kwargs) -> RawQueryService:
    return RawQueryService(store, today_fn=lambda: date(2025, 3, 15), **kwargs)


def test_records_read_from_month_collection_with_filters(store):
    store.add_raw(2025, 3, subject="CS101", group="G1", rollNumber="101", type="lect", present=True)
    store.add_raw(2025, 3, subject="CS101", group="G2", rollNumber="201", type="lect", present=False)
    store.add_raw(2025, 3, subject="MA201", group="G1", rollNumber="101", type="tut", present=True)
    store.add_raw(2025, 4, subject="CS101", group="G1", rollNumber="101", type="lect", present=True)

    service = make_service(store)

    assert len(service.fetch_records(2025, 3)) == 3
    records = service.fetch_records(2025, 3, group="G1", subject="CS101")
    assert [(r.roll_number, r.present) for r in records] == [("101", True)]
    assert store.count("query", "attendance_2025_03") == 2


def test_student_records(store):
    store.add_raw(2025, 3, subject="CS101", rollNumber="101")
    store.add_raw(2025, 3, subject="CS101", rollNumber="102")

    records = make_service(store).fetch_student_records("102", 2025, 3)

    assert [r.roll_number for r in records] == ["102"]


def test_malformed_record_is_dropped(store):
    store.add_raw(2025, 3, subject="CS101", present=True)
    store.add_raw(2025, 3, subject="CS101", present="absent")

    assert len(make_service(store).fetch_records(2025, 3)) == 1


def test_store_failure_gives_empty_result(store):
    store.failing.add("attendance_2025_03")

    service = make_service(store)

    assert service.fetch_records(2025, 3) == []
    assert service.fetch_subjects(2025, 3) == []


def test_strict_scan_raises_data_unavailable(store):
    store.failing.add("attendance_2025_03")

    with pytest.raises(DataUnavailableError):
        make_service(store).fetch_records(2025, 3, strict=True)


def test_subjects_and_groups_are_distinct_and_sorted(store):
    for subject, group in [("MA201", "G2"), ("CS101", "G1"), ("CS101", "G2"), ("", "G3")]:
        store.add_raw(2025, 3, subject=subject, group=group)

    service = make_service(store)

    assert service.fetch_subjects(2025, 3) == ["CS101", "MA201"]
    assert service.fetch_groups(2025, 3) == ["G1", "G2", "G3"]


def test_distinct_values_scan_is_capped(store):
    store.add_raw(2025, 3, subject="CS101")
    store.add_raw(2025, 3, subject="CS101")
    store.add_raw(2025, 3, subject="PH301")

    assert make_service(store, scan_limit=2).fetch_subjects(2025, 3) == ["CS101"]


def test_available_months_from_collection_names(store):
    store.add_raw(2025, 1, subject="CS101")
    store.add_raw(2025, 11, subject="CS101")
    store.add_raw(2024, 3, subject="CS101")
    store.put("attendance_metadata", "2025_02", {})

    assert make_service(store).fetch_available_months(2025) == [1, 11]


def test_available_months_falls_back_to_current_month(store):
    service = make_service(store)

    assert service.fetch_available_months(2023) == [3]

    store.fail_listing = True
    assert service.fetch_available_months(2025) == [3]


def test_subject_totals_keyed_by_document_id(store):
    store.put("subjects", "CS101", {"lectTotal": 10, "labTotal": 4, "tutTotal": 2})
    store.put("subjects", "MA201", {"lectTotal": 8})
    store.put("subjects", "BAD", {"lectTotal": "many"})

    service = make_service(store)

    totals = service.fetch_subject_totals()
    assert set(totals) == {"CS101", "MA201"}
    assert totals["CS101"].total_classes == 16
    assert set(service.fetch_subject_totals(["MA201"])) == {"MA201"}

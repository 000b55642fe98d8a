from datetime import date

from complianceapi.json_columns import (
    dump_payload,
    dump_str_list,
    load_optional_str_list,
    load_payload,
    load_str_list,
)


def test_empty_list_is_stored_as_null():
    assert dump_str_list([]) is None
    assert dump_str_list(None) is None


def test_list_order_is_preserved():
    assert load_str_list(dump_str_list(["b", "a", "c"])) == ["b", "a", "c"]


def test_unreadable_list_reads_as_empty():
    assert load_str_list("not json") == []
    assert load_str_list('{"a": 1}') == []
    assert load_str_list(None) == []


def test_optional_list_keeps_null():
    assert load_optional_str_list(None) is None
    assert load_optional_str_list('["x"]') == ["x"]


def test_payload_serialises_dates():
    raw = dump_payload({"checked": True, "count": 3, "on": date(2024, 5, 1), "note": "ok"})
    assert load_payload(raw) == {"checked": True, "count": 3, "on": "2024-05-01", "note": "ok"}


def test_unreadable_payload_reads_as_empty():
    assert load_payload("[1, 2]") == {}
    assert load_payload("") == {}

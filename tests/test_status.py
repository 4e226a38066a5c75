import pytest

from ingress_store.status import Status


def test_lookup_by_value():
    assert Status("ADDED") is Status.ADDED
    assert Status("") is Status.EMPTY
    assert Status("MODIFIED") is Status.MODIFIED


def test_statuses_compare_with_strings():
    assert Status("DELETED") == "DELETED"
    assert Status("ERROR") == "ERROR"
    assert Status("") == ""


def test_unknown_value_rejected():
    with pytest.raises(ValueError):
        Status("UNKNOWN")


def test_all_members_present():
    names = [Status(value).name for value in ("ADDED", "DELETED", "ERROR", "", "MODIFIED")]
    assert names == ["ADDED", "DELETED", "ERROR", "EMPTY", "MODIFIED"]
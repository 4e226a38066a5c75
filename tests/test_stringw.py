import pytest

from ingress_store.status import Status
from ingress_store.stringw import MapStringW, StringW


def _map(**values):
    return MapStringW((name, StringW(value)) for name, value in values.items())


def test_stringw_equal_ignores_status_and_old_value():
    a = StringW("x", "old", Status.MODIFIED)
    b = StringW("x")
    assert a.equal(b)
    assert not a.equal(StringW("y"))


def test_get_value_missing_raises():
    m = _map(a="1")
    assert m.get_value("a").value == "1"
    with pytest.raises(KeyError, match="stringW 'b' does not exist"):
        m.get_value("b")


def test_str_lists_keys():
    assert str(_map(a="1", b="2")) == "[a, b]"


def test_set_status_marks_changes():
    current = _map(same="1", changed="new", added="x")
    old = _map(same="1", changed="old", removed="gone")
    assert current.set_status(old) is True
    assert current["same"].status is Status.EMPTY
    assert current["changed"].status is Status.MODIFIED
    assert current["changed"].old_value == "old"
    assert current["added"].status is Status.ADDED
    assert current["removed"].status is Status.DELETED
    assert current["removed"].old_value == "gone"


def test_set_status_no_difference():
    current = _map(a="1", b="2")
    assert current.set_status(_map(a="1", b="2")) is False
    assert all(item.status is Status.EMPTY for item in current.values())


def test_clean_drops_deleted_and_resets():
    current = _map(a="1")
    current.set_status(_map(a="2", b="3"))
    current.clean()
    assert set(current) == {"a"}
    assert current["a"].status is Status.EMPTY
    assert current["a"].old_value == ""


def test_set_status_state():
    m = MapStringW(a=StringW("1", "0", Status.MODIFIED))
    m.set_status_state(Status.ADDED)
    assert m["a"] == StringW("1", "", Status.ADDED)


def test_clone_is_deep():
    original = MapStringW(a=StringW("1", "0", Status.MODIFIED))
    copy = original.clone()
    assert copy == original
    copy["a"].value = "2"
    assert original["a"].value == "1"


def test_equal():
    assert _map(a="1", b="2").equal(_map(b="2", a="1"))
    assert not _map(a="1").equal(_map(a="2"))
    assert not _map(a="1").equal(_map(b="1"))
    assert not _map(a="1").equal(_map(a="1", b="2"))
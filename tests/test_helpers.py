import pytest

from ingress_store.helpers import (
    copy_map,
    copy_map_of_map,
    equal_slice_by_id_func,
    equal_slice_strings_without_order,
    get_bool_value,
    get_pod_prefix,
    hash_bytes,
    home_dir,
    parse_int,
    parse_size,
    parse_time,
)


def test_home_dir_prefers_home(monkeypatch):
    monkeypatch.setenv("HOME", "/home/someone")
    monkeypatch.setenv("USERPROFILE", "C:\\Users\\someone")
    assert home_dir() == "/home/someone"


def test_home_dir_falls_back(monkeypatch):
    monkeypatch.delenv("HOME", raising=False)
    monkeypatch.setenv("USERPROFILE", "C:\\Users\\someone")
    assert home_dir() == "C:\\Users\\someone"
    monkeypatch.delenv("USERPROFILE")
    assert home_dir() == ""


def test_hash_of_empty_input_is_offset_basis():
    assert hash_bytes(b"") == "6c62272e07bb014262b821756295c58d"


def test_hash_shape_and_determinism():
    first = hash_bytes(b"backend")
    assert len(first) == 32
    assert all(c in "0123456789abcdef" for c in first)
    assert hash_bytes(b"backend") == first
    assert hash_bytes(b"backenD") != first


def test_parse_int():
    assert parse_int("42") == 42
    assert parse_int("-7") == -7
    for bad in (" 42", "1_000", "4.2", "", "x"):
        with pytest.raises(ValueError):
            parse_int(bad)


def test_parse_int_out_of_range():
    with pytest.raises(ValueError):
        parse_int("9223372036854775808")
    assert parse_int("9223372036854775807") == 9223372036854775807


def test_parse_time_units_are_consistent():
    assert parse_time("1500") == 1500
    assert parse_time("1500ms") == 1500
    assert parse_time("5s") == parse_time("5000ms")
    assert parse_time("1m") == parse_time("60s")
    assert parse_time("1h") == parse_time("60m")
    assert parse_time("1d") == parse_time("24h")


def test_parse_time_rejects_garbage():
    for bad in ("abc", "5x", "s", "1.5s"):
        with pytest.raises(ValueError):
            parse_time(bad)


def test_parse_size():
    assert parse_size("7") == 7
    assert parse_size("1k") == 1024
    assert parse_size("1m") == parse_size("1024k")
    assert parse_size("1g") == parse_size("1024m")
    with pytest.raises(ValueError):
        parse_size("12kb")


def test_get_bool_value():
    assert get_bool_value("true", "flag") is True
    assert get_bool_value("T", "flag") is True
    assert get_bool_value("0", "flag") is False
    assert get_bool_value("on", "flag") is True
    assert get_bool_value("Enabled", "flag") is True
    assert get_bool_value("OFF", "flag") is False
    with pytest.raises(ValueError):
        get_bool_value("maybe", "flag")
    with pytest.raises(ValueError):
        get_bool_value("yes", "flag")


def test_get_pod_prefix():
    assert get_pod_prefix("haproxy-ingress-7f9d-abcde") == "haproxy-ingress"
    for bad in ("pod", "pod-x"):
        with pytest.raises(ValueError, match="incorrect podName format"):
            get_pod_prefix(bad)


def test_equal_slice_strings_without_order():
    assert equal_slice_strings_without_order(["a", "b"], ["b", "a"])
    assert equal_slice_strings_without_order(None, [])
    assert not equal_slice_strings_without_order(["a"], ["a", "b"])
    assert not equal_slice_strings_without_order(["a", "b"], ["a", "c"])


def test_copy_map_is_independent():
    original = {"a": "1"}
    copy = copy_map(original)
    copy["b"] = "2"
    assert original == {"a": "1"}
    assert copy_map(None) == {}


def test_copy_map_of_map_copies_inner():
    original = {"x": {"a": 1}}
    copy = copy_map_of_map(original)
    copy["x"]["b"] = 2
    assert original == {"x": {"a": 1}}
    assert copy["x"] == {"a": 1, "b": 2}


def test_equal_slice_by_id_func():
    first = [{"id": "a"}, {"id": "b"}]
    second = [{"id": "b"}, {"id": "a"}]
    by_id = lambda item: item["id"]  # noqa: E731
    assert equal_slice_by_id_func(first, second, by_id)
    assert not equal_slice_by_id_func(first, [{"id": "a"}], by_id)
    assert not equal_slice_by_id_func(first, [{"id": "a"}, {"id": "c"}], by_id)
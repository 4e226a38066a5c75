import pytest

from ingress_store.errors import ErrorList


def test_empty_list_has_no_result():
    errors = ErrorList()
    assert errors.result() is None


def test_add_skips_none():
    errors = ErrorList()
    errors.add(None, ValueError("first"), None)
    assert len(errors) == 1
    assert str(errors[0]) == "first"


def test_result_joins_messages_with_newlines():
    errors = ErrorList()
    first = ValueError("first")
    errors.add(first)
    errors.add(RuntimeError("second"))
    combined = errors.result()
    assert str(combined) == "first\nsecond\n"
    assert combined.errors[0] is first
    assert len(combined.errors) == 2


def test_result_is_an_exception_that_can_be_raised():
    errors = ErrorList()
    problem = ValueError("broken")
    errors.add(problem)
    combined = errors.result()
    assert combined.errors == [problem]
    with pytest.raises(type(combined)) as info:
        raise combined
    assert str(info.value) == "broken\n"


def test_only_empty_messages_give_no_result():
    errors = ErrorList()
    errors.add(ValueError(""))
    assert errors.result() is None
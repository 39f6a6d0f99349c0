import pytest

from centralext.errors import EdgeXError, ErrorKind


def test_message_without_cause():
    err = EdgeXError(ErrorKind.CONTRACT_INVALID, "bad header")
    assert str(err) == "bad header"
    assert err.kind is ErrorKind.CONTRACT_INVALID
    assert err.cause is None


def test_message_with_cause_chains():
    cause = ValueError("inner")
    err = EdgeXError(ErrorKind.SERVER_ERROR, "outer", cause)
    assert str(err) == "outer -> inner"
    assert err.__cause__ is cause


def test_kind_from_string_value():
    err = EdgeXError("ServerError", "x")
    assert err.kind is ErrorKind.SERVER_ERROR


def test_invalid_kind_rejected():
    with pytest.raises(ValueError):
        EdgeXError("NoSuchKind", "x")


def test_is_raisable():
    err = EdgeXError(ErrorKind.SERVER_ERROR, "boom")
    assert err.message == "boom"
    with pytest.raises(EdgeXError) as info:
        raise err
    assert info.value is err
    assert info.value.kind is ErrorKind.SERVER_ERROR
from base64 import b64encode
from typing import Any

import pytest
from algosdk.account import generate_account
from algosdk.encoding import decode_address

from beaker_client.errors import StateDecodeError
from beaker_client.state_decode import decode_state, str_or_hex
from tests.helpers import bytes_record, uint_record


def test_decode_uint() -> None:
    state = decode_state([uint_record(b"counter", 42)])
    assert state == {"counter": 42}


def test_decode_bytes() -> None:
    state = decode_state([bytes_record(b"greeting", b"hello")])
    assert state == {"greeting": b"hello"}


def test_decode_address_length_bytes() -> None:
    _, addr = generate_account()
    record = bytes_record(b"owner", decode_address(addr))

    assert decode_state([record]) == {"owner": addr}

    raw_state = decode_state([record], raw=True)
    assert raw_state == {b"owner": decode_address(addr)}, "raw keeps both key and value as bytes"


def test_decode_non_utf8_key() -> None:
    key = bytes([0xFF, 0x00, 0x01])
    state = decode_state([uint_record(key, 1)])
    assert state == {"ff0001": 1}

    assert decode_state([uint_record(key, 1)], raw=True) == {key: 1}


def test_decode_delta_delete() -> None:
    delta = {"key": b64encode(b"gone").decode(), "value": {"action": 3}}
    assert decode_state([delta]) == {"gone": None}


def test_decode_many_records() -> None:
    state = decode_state(
        [uint_record(b"a", 1), bytes_record(b"b", b"two"), uint_record(b"c", 3)]
    )
    assert state == {"a": 1, "b": b"two", "c": 3}


@pytest.mark.parametrize(
    "record",
    [
        {"value": {"type": 2, "uint": 1}},
        {"key": b64encode(b"k").decode()},
        {"key": b64encode(b"k").decode(), "value": {"uint": 1}},
        {"key": b64encode(b"k").decode(), "value": {"type": 2}},
        {"key": b64encode(b"k").decode(), "value": {"type": 1}},
        {"key": b64encode(b"k").decode(), "value": None},
        {"key": b64encode(b"k").decode(), "value": [2, 1]},
        "not a record",
    ],
)
def test_decode_malformed_record(record: Any) -> None:
    with pytest.raises(StateDecodeError):
        decode_state([record])


def test_decode_unknown_type() -> None:
    with pytest.raises(StateDecodeError):
        decode_state([{"key": b64encode(b"k").decode(), "value": {"type": 7}}])


def test_str_or_hex() -> None:
    assert str_or_hex(b"abc") == "abc"
    assert str_or_hex(b"\xff\xfe") == "fffe"


@pytest.mark.parametrize(
    "record",
    [
        {"key": "!!!", "value": {"type": 2, "uint": 1}},
        {"key": "a2V5", "value": {"type": 1, "bytes": "not base64"}},
        {"key": 5, "value": {"type": 2, "uint": 1}},
    ],
)
def test_decode_invalid_base64(record: dict) -> None:
    with pytest.raises(StateDecodeError):
        decode_state([record])

import binascii
from base64 import b64decode
from collections.abc import Mapping
from typing import Any, TypeAlias

from algosdk.encoding import encode_address

from beaker_client.consts import ADDRESS_LENGTH
from beaker_client.errors import StateDecodeError

__all__ = [
    "DecodedState",
    "decode_state",
    "str_or_hex",
]

DecodedState: TypeAlias = dict[str | bytes, bytes | str | int | None]


def str_or_hex(v: bytes) -> str:
    decoded: str = ""
    try:
        decoded = v.decode("utf-8")
    except UnicodeDecodeError:
        decoded = v.hex()

    return decoded


def _field(record: Any, name: str) -> Any:  # noqa: ANN401
    if not isinstance(record, Mapping):
        raise StateDecodeError(f"Expected a state record, got {record!r}")
    try:
        return record[name]
    except KeyError as e:
        raise StateDecodeError(f"State record missing field '{name}': {record}") from e


def _b64_field(record: Any, name: str) -> bytes:  # noqa: ANN401
    encoded = _field(record, name)
    try:
        return b64decode(encoded, validate=True)
    except (binascii.Error, TypeError, ValueError) as e:
        raise StateDecodeError(f"State record field '{name}' is not base64") from e


def decode_state(state: list[dict[str, Any]], raw: bool = False) -> DecodedState:
    """
    Decode the key/value records returned by algod for global or local state.

    Keys are decoded to utf-8 (or hex) strings unless ``raw`` is set. Byte values
    that are exactly the length of a public key are rendered as an address unless
    ``raw`` is set, since the same slot may hold either an address or opaque bytes.
    """
    decoded_state: DecodedState = {}

    for sv in state:
        raw_key = _b64_field(sv, "key")

        key: str | bytes = raw_key if raw else str_or_hex(raw_key)
        val: str | bytes | int | None

        value = _field(sv, "value")
        # state deltas carry an action rather than a type
        action = (
            value["action"]
            if isinstance(value, Mapping) and "action" in value
            else _field(value, "type")
        )

        match action:
            case 1:
                raw_val = _b64_field(value, "bytes")
                if not raw and len(raw_val) == ADDRESS_LENGTH:
                    val = encode_address(raw_val)
                else:
                    val = raw_val
            case 2:
                val = _field(value, "uint")
            case 3:
                val = None
            case _:
                raise StateDecodeError(f"Unknown state value type: {action}")

        decoded_state[key] = val
    return decoded_state

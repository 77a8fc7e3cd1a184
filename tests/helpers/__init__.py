from base64 import b64encode
from typing import Any

from algosdk.account import generate_account
from algosdk.atomic_transaction_composer import AccountTransactionSigner

from tests.helpers.fake_algod import (
    FIRST_APP_ID,
    GENESIS_HASH,
    GENESIS_ID,
    FakeAlgod,
    source_map_for,
)

__all__ = [
    "FIRST_APP_ID",
    "GENESIS_HASH",
    "GENESIS_ID",
    "FakeAlgod",
    "bytes_record",
    "new_account",
    "source_map_for",
    "uint_record",
]


def new_account() -> tuple[str, str, AccountTransactionSigner]:
    pk, addr = generate_account()
    return addr, pk, AccountTransactionSigner(pk)


def uint_record(key: bytes, value: int) -> dict[str, Any]:
    return {
        "key": b64encode(key).decode(),
        "value": {"type": 2, "uint": value, "bytes": ""},
    }


def bytes_record(key: bytes, value: bytes) -> dict[str, Any]:
    return {
        "key": b64encode(key).decode(),
        "value": {"type": 1, "uint": 0, "bytes": b64encode(value).decode()},
    }

import dataclasses
from typing import Any, Generic, TypeVar

from algosdk import abi
from algosdk.atomic_transaction_composer import ABIResult as SdkABIResult

__all__ = [
    "ABIResult",
    "InnerTransaction",
]

T = TypeVar("T")


@dataclasses.dataclass
class InnerTransaction:
    #: the encoded transaction as reported by algod, with the outer genesis fields
    txn: dict[str, Any]
    created_asset: int | None = None
    created_app: int | None = None

    @staticmethod
    def undictify(
        data: dict[str, Any], outer_txn: dict[str, Any]
    ) -> "InnerTransaction":
        txn = dict(data["txn"]["txn"])
        for genesis_field in ("gen", "gh"):
            if genesis_field in outer_txn:
                txn[genesis_field] = outer_txn[genesis_field]
        return InnerTransaction(
            txn=txn,
            created_asset=data.get("asset-index"),
            created_app=data.get("application-index"),
        )


def _inner_transactions(tx_info: dict[str, Any] | None) -> list[InnerTransaction]:
    if not tx_info or "inner-txns" not in tx_info:
        return []

    # only one level deep, inner txns of inner txns are not unpacked
    outer = tx_info["txn"]["txn"]
    return [InnerTransaction.undictify(itxn, outer) for itxn in tx_info["inner-txns"]]


class ABIResult(Generic[T]):
    """
    The outcome of one confirmed method call.

    ``return_value`` is the decoded ABI value, ``value`` is whatever the caller
    chose to decode it into. A call may be confirmed while decoding its return
    value failed, in which case ``decode_error`` is set.
    """

    def __init__(self, result: SdkABIResult, value: T | None = None):
        self.tx_id: str = result.tx_id
        self.raw_value: bytes = result.raw_value
        self.method: abi.Method = result.method
        self.return_value: Any = result.return_value
        self.decode_error: Exception | None = result.decode_error
        self.tx_info: dict[str, Any] | None = result.tx_info

        self.value = value
        self.inners: list[InnerTransaction] = _inner_transactions(result.tx_info)

    def __repr__(self) -> str:
        return (
            f"ABIResult(tx_id={self.tx_id!r}, method={self.method.name!r}, "
            f"return_value={self.return_value!r}, decode_error={self.decode_error!r})"
        )

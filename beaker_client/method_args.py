import dataclasses
from collections.abc import Mapping
from typing import Any, TypeAlias

from algosdk import abi, transaction
from algosdk.atomic_transaction_composer import TransactionSigner, TransactionWithSigner

from beaker_client.errors import (
    ArgumentCountError,
    MethodNotFoundError,
    MissingArgumentError,
)

__all__ = [
    "MethodArg",
    "MethodArgs",
    "build_args",
    "decode_named_tuple",
    "get_method",
]

#: A value for a single method argument: an ABI primitive, a transaction,
#: a struct-like object or a sequence of any of these
MethodArg: TypeAlias = Any
MethodArgs: TypeAlias = Mapping[str, MethodArg]


def _struct_values(arg: object) -> list[Any] | None:
    """ordered member values for struct-like objects, None for anything else"""
    match arg:
        case dict():
            return list(arg.values())
        case _ if dataclasses.is_dataclass(arg) and not isinstance(arg, type):
            return [getattr(arg, f.name) for f in dataclasses.fields(arg)]
        case _ if hasattr(arg, "__dict__") and not isinstance(arg, type):
            return list(vars(arg).values())
    return None


def _normalize(arg: MethodArg, signer: TransactionSigner) -> Any:  # noqa: ANN401
    match arg:
        case transaction.Transaction():
            # each txn in a group may be signed by someone else, so it travels with its signer
            return TransactionWithSigner(txn=arg, signer=signer)
        case TransactionWithSigner() | bytes() | bytearray() | str() | int() | None:
            return arg
        case list() | tuple():
            return [_normalize(a, signer) for a in arg]

    # struct members are assumed to be declared in the same order as the abi tuple
    members = _struct_values(arg)
    if members is not None:
        return [_normalize(m, signer) for m in members]

    return arg


def build_args(
    method: abi.Method,
    provided: MethodArgs | None,
    signer: TransactionSigner,
) -> list[Any]:
    """
    Order the named arguments passed by the caller the way the method declares them,
    pairing transactions with the signer and flattening struct values to tuples.
    """
    processed: list[Any] = []
    for expected_arg in method.args:
        if provided is None or expected_arg.name not in provided:
            raise MissingArgumentError(expected_arg.name)

        processed.append(_normalize(provided[expected_arg.name], signer))

    return processed


def decode_named_tuple(v: Any, keys: list[str]) -> dict[str, Any]:  # noqa: ANN401
    """Map the elements of a decoded ABI tuple onto the struct element names"""
    if v is None:
        return {}
    if not isinstance(v, list | tuple):
        raise TypeError(f"Expected array, got {type(v).__name__}")
    if len(v) != len(keys):
        raise ArgumentCountError(len(keys), len(v))

    return dict(zip(keys, v))


def get_method(contract: abi.Contract | None, method: abi.Method | str) -> abi.Method:
    """Resolve a Method, full signature or bare method name against the contract"""
    match method:
        case abi.Method():
            return method
        case str() if "(" in method:
            if contract is not None:
                for m in contract.methods:
                    if m.get_signature() == method:
                        return m
            return abi.Method.from_signature(method)
        case str():
            if contract is None:
                raise MethodNotFoundError(
                    f"No contract available to look up method {method}"
                )
            matches = [m for m in contract.methods if m.name == method]
            if len(matches) != 1:
                raise MethodNotFoundError(
                    f"Expected exactly one method named {method}, found {len(matches)}"
                )
            return matches[0]
        case _:
            raise MethodNotFoundError(f"Unexpected method reference: {method!r}")

import base64
import dataclasses
import json
from pathlib import Path
from typing import Any, Literal, TypeAlias, TypedDict

from algosdk.abi import Contract
from algosdk.transaction import StateSchema
from pyteal import TealType

__all__ = [
    "ApplicationSpecification",
    "DeclaredSchemaValueSpec",
    "DefaultArgumentDict",
    "DefaultArgumentType",
    "MethodHints",
    "ReservedSchemaValueSpec",
    "Schema",
    "get_state_schema",
]


class StructArgDict(TypedDict):
    name: str
    elements: list[list[str]]


DefaultArgumentType: TypeAlias = Literal[
    "abi-method", "local-state", "global-state", "constant"
]


class DefaultArgumentDict(TypedDict):
    """
    DefaultArgument is a container for any arguments that may
    be resolved prior to calling some target method
    """

    source: DefaultArgumentType
    data: int | str | bytes | dict[str, Any]


# app specs written by older tooling use the enum index rather than the name
_TEAL_TYPE_INDEX = {0: TealType.uint64, 1: TealType.bytes}


def _decode_teal_type(value: str | int) -> TealType:
    match value:
        case "uint64" | "uint":
            return TealType.uint64
        case "bytes" | "byte":
            return TealType.bytes
        case int() if value in _TEAL_TYPE_INDEX:
            return _TEAL_TYPE_INDEX[value]
        case _:
            raise ValueError(f"Only uint64 and bytes supported, got {value!r}")


def _encode_teal_type(st: TealType) -> str:
    if st == TealType.uint64:
        return "uint64"
    if st == TealType.bytes:
        return "bytes"
    raise ValueError("Only uint64 and bytes supported")


@dataclasses.dataclass(kw_only=True)
class DeclaredSchemaValueSpec:
    type: TealType
    key: str
    descr: str = ""
    static: bool = False


@dataclasses.dataclass(kw_only=True)
class ReservedSchemaValueSpec:
    type: TealType
    max_keys: int
    descr: str = ""

    def __post_init__(self) -> None:
        if self.max_keys < 0:
            raise ValueError(f"max_keys must be >= 0, got {self.max_keys}")


@dataclasses.dataclass(kw_only=True)
class Schema:
    """holds all the declared and reserved state values for one storage type"""

    declared: dict[str, DeclaredSchemaValueSpec] = dataclasses.field(
        default_factory=dict
    )
    reserved: dict[str, ReservedSchemaValueSpec] = dataclasses.field(
        default_factory=dict
    )

    def dictify(self) -> dict[str, dict[str, dict[str, Any]]]:
        return {
            "declared": {
                k: {
                    "type": _encode_teal_type(v.type),
                    "key": v.key,
                    "descr": v.descr,
                    "static": v.static,
                }
                for k, v in self.declared.items()
            },
            "reserved": {
                k: {
                    "type": _encode_teal_type(v.type),
                    "max_keys": v.max_keys,
                    "descr": v.descr,
                }
                for k, v in self.reserved.items()
            },
        }

    @staticmethod
    def undictify(data: dict[str, Any]) -> "Schema":
        return Schema(
            declared={
                k: DeclaredSchemaValueSpec(
                    type=_decode_teal_type(v["type"]),
                    key=v["key"],
                    descr=v.get("descr", v.get("desc", "")),
                    static=v.get("static", False),
                )
                for k, v in data.get("declared", {}).items()
            },
            reserved={
                k: ReservedSchemaValueSpec(
                    type=_decode_teal_type(v["type"]),
                    max_keys=v["max_keys"],
                    descr=v.get("descr", v.get("desc", "")),
                )
                for k, v in data.get("reserved", {}).items()
            },
        )


def get_state_schema(schema: Schema) -> StateSchema:
    """gets the schema as num uints/bytes for app create transactions"""
    num_uints = len(
        [v for v in schema.declared.values() if v.type == TealType.uint64]
    ) + sum([v.max_keys for v in schema.reserved.values() if v.type == TealType.uint64])

    num_byte_slices = len(
        [v for v in schema.declared.values() if v.type != TealType.uint64]
    ) + sum([v.max_keys for v in schema.reserved.values() if v.type == TealType.bytes])

    return StateSchema(num_uints=num_uints, num_byte_slices=num_byte_slices)


@dataclasses.dataclass(kw_only=True)
class MethodHints:
    """MethodHints provides hints to the caller about how to call the method"""

    #: hint to indicate this method can be called through Dryrun
    read_only: bool = False
    #: hint to provide names for tuple argument indices
    #: method_name=>param_name=>{name:str, elements:[str,str]}
    structs: dict[str, StructArgDict] = dataclasses.field(default_factory=dict)
    #: defaults
    default_arguments: dict[str, DefaultArgumentDict] = dataclasses.field(
        default_factory=dict
    )

    def dictify(self) -> dict[str, Any]:
        d: dict[str, Any] = {}
        if self.read_only:
            d["read_only"] = True
        if self.default_arguments:
            d["default_arguments"] = self.default_arguments
        if self.structs:
            d["structs"] = self.structs
        return d

    @staticmethod
    def undictify(data: dict[str, Any]) -> "MethodHints":
        return MethodHints(
            read_only=data.get("read_only", data.get("readonly", False)),
            default_arguments=data.get("default_arguments", {}),
            structs=data.get("structs", {}),
        )


def _encode_source(teal_text: str) -> str:
    return base64.b64encode(teal_text.encode()).decode("utf8")


@dataclasses.dataclass(kw_only=True)
class ApplicationSpecification:
    """
    The artifact describing a deployable application.

    Programs are held as base64 encoded TEAL source, the same way they are
    written to ``application.json``.
    """

    approval_program: str
    clear_program: str
    contract: Contract
    hints: dict[str, MethodHints] = dataclasses.field(default_factory=dict)
    global_schema: Schema = dataclasses.field(default_factory=Schema)
    local_schema: Schema = dataclasses.field(default_factory=Schema)

    @staticmethod
    def from_teal(
        approval: str,
        clear: str,
        contract: Contract,
        **kwargs: Any,  # noqa: ANN401
    ) -> "ApplicationSpecification":
        return ApplicationSpecification(
            approval_program=_encode_source(approval),
            clear_program=_encode_source(clear),
            contract=contract,
            **kwargs,
        )

    def dictify(self) -> dict:
        return {
            "hints": {k: v.dictify() for k, v in self.hints.items()},
            "source": {
                "approval": self.approval_program,
                "clear": self.clear_program,
            },
            "schema": {
                "global": self.global_schema.dictify(),
                "local": self.local_schema.dictify(),
            },
            "contract": self.contract.dictify(),
        }

    def to_json(self) -> str:
        return json.dumps(self.dictify(), indent=4)

    @staticmethod
    def undictify(data: dict[str, Any]) -> "ApplicationSpecification":
        schema = data.get("schema", {})
        return ApplicationSpecification(
            approval_program=data["source"]["approval"],
            clear_program=data["source"]["clear"],
            contract=Contract.undictify(data["contract"]),
            hints={
                k: MethodHints.undictify(v) for k, v in data.get("hints", {}).items()
            },
            global_schema=Schema.undictify(schema.get("global", {})),
            local_schema=Schema.undictify(schema.get("local", {})),
        )

    @staticmethod
    def from_json(application_spec: str) -> "ApplicationSpecification":
        return ApplicationSpecification.undictify(json.loads(application_spec))

    @staticmethod
    def from_path(path: Path) -> "ApplicationSpecification":
        if path.is_dir():
            path = path / "application.json"
        return ApplicationSpecification.from_json(path.read_text(encoding="utf8"))

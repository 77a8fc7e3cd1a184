from . import consts
from .api_providers import AlgoNode, Localnet, Network, get_algod_client
from .application_client import ApplicationClient
from .application_specification import (
    ApplicationSpecification,
    DeclaredSchemaValueSpec,
    MethodHints,
    ReservedSchemaValueSpec,
    Schema,
    get_state_schema,
)
from .compilation import Program
from .errors import (
    ABIDecodeError,
    ApplicationClientError,
    ArgumentCountError,
    ArgumentError,
    ConfigurationError,
    MethodNotFoundError,
    MissingArgumentError,
    StateDecodeError,
    StateNotFoundError,
)
from .logic_error import LogicException, parse_logic_error, wrap_logic_error
from .method_args import MethodArg, MethodArgs, build_args, decode_named_tuple
from .results import ABIResult, InnerTransaction
from .state_decode import decode_state

LogicError = LogicException

__all__ = [
    "ABIDecodeError",
    "ABIResult",
    "AlgoNode",
    "ApplicationClient",
    "ApplicationClientError",
    "ApplicationSpecification",
    "ArgumentCountError",
    "ArgumentError",
    "ConfigurationError",
    "DeclaredSchemaValueSpec",
    "InnerTransaction",
    "Localnet",
    "LogicError",
    "LogicException",
    "MethodArg",
    "MethodArgs",
    "MethodHints",
    "MethodNotFoundError",
    "MissingArgumentError",
    "Network",
    "Program",
    "ReservedSchemaValueSpec",
    "Schema",
    "StateDecodeError",
    "StateNotFoundError",
    "build_args",
    "consts",
    "decode_named_tuple",
    "decode_state",
    "get_algod_client",
    "get_state_schema",
    "parse_logic_error",
    "wrap_logic_error",
]

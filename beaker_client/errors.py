from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from beaker_client.results import ABIResult


class ApplicationClientError(Exception):
    """Base class for all errors raised by the application client."""


class ConfigurationError(ApplicationClientError):
    """Raised before any network call when the client is missing something it needs
    (signer, sender, schema, program source or an application id)."""


class ArgumentError(ApplicationClientError, ValueError):
    """Raised when the arguments for a method call can't be built."""


class MissingArgumentError(ArgumentError):
    def __init__(self, name: str | None):
        self.name = name
        super().__init__(f"Cant find required argument: {name}")


class ArgumentCountError(ArgumentError):
    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Different key length than value length: expected {expected}, got {actual}"
        )


class MethodNotFoundError(ApplicationClientError, LookupError):
    """Raised when a method reference can't be resolved against the contract."""


class StateNotFoundError(ApplicationClientError, LookupError):
    """Raised when the node response holds no state for the application or account."""


class StateDecodeError(ApplicationClientError, ValueError):
    """Raised when a key/value state record is missing an expected field."""


class ABIDecodeError(ApplicationClientError):
    """
    Raised when a method call was confirmed but its return value could not be decoded.

    The confirmed result is kept on the exception so both facts are observable.
    """

    def __init__(self, result: "ABIResult"):
        self.result = result
        super().__init__(
            f"Failed to decode return value of {result.method.name} "
            f"in txn {result.tx_id}: {result.decode_error}"
        )

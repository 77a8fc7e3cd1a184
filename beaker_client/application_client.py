import copy
import logging
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

from algosdk import abi, transaction
from algosdk.account import address_from_private_key
from algosdk.atomic_transaction_composer import (
    AccountTransactionSigner,
    AtomicTransactionComposer,
    AtomicTransactionResponse,
    LogicSigTransactionSigner,
    MultisigTransactionSigner,
    TransactionSigner,
    TransactionWithSigner,
)
from algosdk.logic import get_application_address
from algosdk.source_map import SourceMap
from algosdk.transaction import StateSchema, SuggestedParams
from algosdk.v2client.algod import AlgodClient

from beaker_client.application_specification import (
    ApplicationSpecification,
    DefaultArgumentType,
    MethodHints,
    Schema,
    get_state_schema,
)
from beaker_client.compilation import Program
from beaker_client.consts import DEFAULT_WAIT_ROUNDS, num_extra_program_pages
from beaker_client.errors import (
    ABIDecodeError,
    ConfigurationError,
    MissingArgumentError,
    StateNotFoundError,
)
from beaker_client.logic_error import wrap_logic_error
from beaker_client.method_args import MethodArg, MethodArgs, build_args, get_method
from beaker_client.results import ABIResult
from beaker_client.state_decode import DecodedState, decode_state

__all__ = [
    "ApplicationClient",
]

log = logging.getLogger(__name__)

T = TypeVar("T")


def _signer_address(signer: TransactionSigner | None) -> str | None:
    match signer:
        case AccountTransactionSigner():
            return address_from_private_key(signer.private_key)
        case MultisigTransactionSigner():
            return signer.msig.address()
        case LogicSigTransactionSigner():
            return signer.lsig.address()
    return None


class ApplicationClient:
    def __init__(
        self,
        client: AlgodClient,
        app: ApplicationSpecification | str | Path | None = None,
        *,
        app_id: int = 0,
        signer: TransactionSigner | None = None,
        sender: str | None = None,
        suggested_params: SuggestedParams | None = None,
        wait_rounds: int = DEFAULT_WAIT_ROUNDS,
    ):
        self.client = client

        #: base64 encoded TEAL source
        self.approval_program: str | None = None
        self.clear_program: str | None = None
        self.app_schema: Schema | None = None
        self.acct_schema: Schema | None = None
        self.contract: abi.Contract | None = None
        self.hints: dict[str, MethodHints] = {}

        match app:
            case None:
                pass
            case ApplicationSpecification() as app_spec:
                self._load_app_spec(app_spec)
            case Path() as path:
                self._load_app_spec(ApplicationSpecification.from_path(path))
            case str():
                self._load_app_spec(ApplicationSpecification.from_json(app))
            case _:
                raise ConfigurationError(f"Unexpected app type: {app}")

        self.app_id: int = app_id
        self.signer = signer
        self.sender = sender if sender is not None else _signer_address(signer)
        self.suggested_params = suggested_params
        self.wait_rounds = wait_rounds

        # compiled lazily, at most once per client
        self.approval: Program | None = None
        self.clear: Program | None = None
        self._compile_lock = threading.Lock()

    def _load_app_spec(self, app_spec: ApplicationSpecification) -> None:
        self.approval_program = app_spec.approval_program
        self.clear_program = app_spec.clear_program
        self.app_schema = app_spec.global_schema
        self.acct_schema = app_spec.local_schema
        self.contract = app_spec.contract
        self.hints = app_spec.hints

    @property
    def app_addr(self) -> str | None:
        return get_application_address(self.app_id) if self.app_id else None

    def get_signer(self, signer: TransactionSigner | None = None) -> TransactionSigner:
        if signer is not None:
            return signer
        if self.signer is None:
            raise ConfigurationError("No signer provided")
        return self.signer

    def get_sender(
        self, sender: str | None = None, signer: TransactionSigner | None = None
    ) -> str:
        resolved = (
            sender
            or _signer_address(signer)
            or self.sender
            or _signer_address(self.signer)
        )
        if resolved is None:
            raise ConfigurationError("No sender provided")
        return resolved

    def get_suggested_params(
        self,
        sp: SuggestedParams | None = None,
    ) -> SuggestedParams:
        if sp is not None:
            return sp

        if self.suggested_params is not None:
            return self.suggested_params

        log.debug("Fetching suggested params")
        return self.client.suggested_params()

    def _require_app_id(self) -> None:
        if self.app_id == 0:
            raise ConfigurationError("Application not yet created, no app id set")

    def _get_schemas(self) -> tuple[StateSchema, StateSchema]:
        if self.app_schema is None:
            raise ConfigurationError("No app schema defined")
        if self.acct_schema is None:
            raise ConfigurationError("No account schema defined")
        return get_state_schema(self.app_schema), get_state_schema(self.acct_schema)

    def compile(self, teal: str) -> tuple[bytes, SourceMap]:
        program = Program(teal, self.client)
        return program.raw_binary, program.source_map

    def ensure_programs(self) -> tuple[Program, Program]:
        """compile the approval and clear programs unless they already have been"""
        if self.approval is not None and self.clear is not None:
            return self.approval, self.clear

        with self._compile_lock:
            if self.approval_program is None or self.clear_program is None:
                raise ConfigurationError("no approval or clear program defined")

            if self.approval is None:
                self.approval = Program.from_b64_source(
                    self.approval_program, self.client
                )
            if self.clear is None:
                self.clear = Program.from_b64_source(self.clear_program, self.client)

            return self.approval, self.clear

    def wrap_logic_error(self, e: Exception) -> Exception:
        if self.approval is None:
            return e
        return wrap_logic_error(e, self.approval.teal, self.approval.source_map)

    def execute_atc(
        self, atc: AtomicTransactionComposer, wait_rounds: int | None = None
    ) -> AtomicTransactionResponse:
        """submit the group and wait up to wait_rounds for it to be confirmed,
        the client's wait_rounds is used unless one is passed"""
        if wait_rounds is None:
            wait_rounds = self.wait_rounds
        try:
            result = atc.execute(self.client, wait_rounds)
        except Exception as e:
            wrapped = self.wrap_logic_error(e)
            if wrapped is e:
                raise
            log.warning("Logic error in app %d: %s", self.app_id, wrapped)
            raise wrapped from e

        log.info(
            "Confirmed %d txn(s) in round %d", len(result.tx_ids), result.confirmed_round
        )
        return result

    def _submit(
        self, txn: transaction.Transaction, signer: TransactionSigner
    ) -> AtomicTransactionResponse:
        atc = AtomicTransactionComposer()
        atc.add_transaction(TransactionWithSigner(txn=txn, signer=signer))
        return self.execute_atc(atc)

    def create(
        self,
        sender: str | None = None,
        signer: TransactionSigner | None = None,
        suggested_params: SuggestedParams | None = None,
        **kwargs: Any,  # noqa: ANN401
    ) -> tuple[int, str, str]:
        """Submits a signed ApplicationCallTransaction with application id == 0 and the schema and source
        of the application. Any kwargs are passed on to the transaction, overriding the defaults"""
        signer = self.get_signer(signer)
        sender = self.get_sender(sender, signer)
        global_schema, local_schema = self._get_schemas()
        approval, clear = self.ensure_programs()

        params: dict[str, Any] = {
            "sender": sender,
            "sp": self.get_suggested_params(suggested_params),
            "on_complete": transaction.OnComplete.NoOpOC,
            "approval_program": approval.raw_binary,
            "clear_program": clear.raw_binary,
            "global_schema": global_schema,
            "local_schema": local_schema,
            "extra_pages": num_extra_program_pages(
                approval.raw_binary, clear.raw_binary
            ),
        }
        result = self._submit(
            transaction.ApplicationCreateTxn(**(params | kwargs)), signer
        )

        tx_id = result.tx_ids[0]
        tx_info = self.client.pending_transaction_info(tx_id)
        assert isinstance(tx_info, dict)
        self.app_id = tx_info["application-index"]

        app_addr = get_application_address(self.app_id)
        log.info("Created app %d with address %s in txn %s", self.app_id, app_addr, tx_id)
        return self.app_id, app_addr, tx_id

    def update(
        self,
        sender: str | None = None,
        signer: TransactionSigner | None = None,
        suggested_params: SuggestedParams | None = None,
        **kwargs: Any,  # noqa: ANN401
    ) -> AtomicTransactionResponse:
        """Submits a signed ApplicationCallTransaction with OnComplete set to UpdateApplication and source from
        the application"""
        signer = self.get_signer(signer)
        sender = self.get_sender(sender, signer)
        self._require_app_id()
        approval, clear = self.ensure_programs()

        params: dict[str, Any] = {
            "sender": sender,
            "sp": self.get_suggested_params(suggested_params),
            "index": self.app_id,
            "approval_program": approval.raw_binary,
            "clear_program": clear.raw_binary,
        }
        return self._submit(
            transaction.ApplicationUpdateTxn(**(params | kwargs)), signer
        )

    def _call_bare(
        self,
        txn_type: type[transaction.ApplicationCallTxn],
        sender: str | None,
        signer: TransactionSigner | None,
        suggested_params: SuggestedParams | None,
        kwargs: dict[str, Any],
    ) -> AtomicTransactionResponse:
        signer = self.get_signer(signer)
        sender = self.get_sender(sender, signer)
        self._require_app_id()

        params: dict[str, Any] = {
            "sender": sender,
            "sp": self.get_suggested_params(suggested_params),
            "index": self.app_id,
        }
        return self._submit(txn_type(**(params | kwargs)), signer)

    def delete(
        self,
        sender: str | None = None,
        signer: TransactionSigner | None = None,
        suggested_params: SuggestedParams | None = None,
        **kwargs: Any,  # noqa: ANN401
    ) -> AtomicTransactionResponse:
        """Submits a signed ApplicationCallTransaction with OnComplete set to DeleteApplication"""
        return self._call_bare(
            transaction.ApplicationDeleteTxn, sender, signer, suggested_params, kwargs
        )

    def opt_in(
        self,
        sender: str | None = None,
        signer: TransactionSigner | None = None,
        suggested_params: SuggestedParams | None = None,
        **kwargs: Any,  # noqa: ANN401
    ) -> AtomicTransactionResponse:
        """Submits a signed ApplicationCallTransaction with OnComplete set to OptIn"""
        return self._call_bare(
            transaction.ApplicationOptInTxn, sender, signer, suggested_params, kwargs
        )

    def close_out(
        self,
        sender: str | None = None,
        signer: TransactionSigner | None = None,
        suggested_params: SuggestedParams | None = None,
        **kwargs: Any,  # noqa: ANN401
    ) -> AtomicTransactionResponse:
        """Submits a signed ApplicationCallTransaction with OnComplete set to CloseOut"""
        return self._call_bare(
            transaction.ApplicationCloseOutTxn, sender, signer, suggested_params, kwargs
        )

    def clear_state(
        self,
        sender: str | None = None,
        signer: TransactionSigner | None = None,
        suggested_params: SuggestedParams | None = None,
        **kwargs: Any,  # noqa: ANN401
    ) -> AtomicTransactionResponse:
        """Submits a signed ApplicationCallTransaction with OnComplete set to ClearState"""
        return self._call_bare(
            transaction.ApplicationClearStateTxn,
            sender,
            signer,
            suggested_params,
            kwargs,
        )

    def add_method_call(
        self,
        atc: AtomicTransactionComposer,
        method: abi.Method | str,
        args: MethodArgs | None = None,
        *,
        sender: str | None = None,
        signer: TransactionSigner | None = None,
        suggested_params: SuggestedParams | None = None,
        on_complete: transaction.OnComplete = transaction.OnComplete.NoOpOC,
        **kwargs: Any,  # noqa: ANN401
    ) -> AtomicTransactionComposer:
        """Adds a method call to the group passed without submitting it, so several
        calls can be confirmed atomically"""
        signer = self.get_signer(signer)
        sender = self.get_sender(sender, signer)
        self._require_app_id()

        abi_method = get_method(self.contract, method)
        method_args = build_args(
            abi_method, self._with_default_args(abi_method, args), signer
        )

        params: dict[str, Any] = {
            "app_id": self.app_id,
            "method": abi_method,
            "sender": sender,
            "sp": self.get_suggested_params(suggested_params),
            "signer": signer,
            "method_args": method_args,
            "on_complete": on_complete,
        }
        atc.add_method_call(**(params | kwargs))
        return atc

    def call(
        self,
        method: abi.Method | str,
        args: MethodArgs | None = None,
        *,
        sender: str | None = None,
        signer: TransactionSigner | None = None,
        suggested_params: SuggestedParams | None = None,
        on_complete: transaction.OnComplete = transaction.OnComplete.NoOpOC,
        atc: AtomicTransactionComposer | None = None,
        decode: Callable[[Any], T] | None = None,
        raise_decode_error: bool = True,
        wait_rounds: int | None = None,
        **kwargs: Any,  # noqa: ANN401
    ) -> ABIResult[T]:
        """
        Calls an ABI method and returns its result.

        When ``atc`` is passed the call is appended to that group and the whole
        group is submitted. ``decode`` maps the ABI return value to ``value`` on the
        result. If the return value can't be decoded an ABIDecodeError is raised,
        unless ``raise_decode_error`` is False in which case the result is returned
        with its ``decode_error`` set. ``wait_rounds`` overrides the client's
        confirmation bound for this call only.
        """
        if atc is None:
            atc = AtomicTransactionComposer()

        self.add_method_call(
            atc,
            method,
            args,
            sender=sender,
            signer=signer,
            suggested_params=suggested_params,
            on_complete=on_complete,
            **kwargs,
        )
        response = self.execute_atc(atc, wait_rounds)

        # the call added here is the last method call in the group
        result: ABIResult[T] = ABIResult(response.abi_results[-1])
        if result.decode_error is not None:
            if raise_decode_error:
                raise ABIDecodeError(result)
            return result

        if decode is not None:
            result.value = decode(result.return_value)
        return result

    def _with_default_args(
        self, method: abi.Method, args: MethodArgs | None
    ) -> MethodArgs | None:
        hints = self.hints.get(method.name)
        if hints is None or not hints.default_arguments:
            return args

        resolved = dict(args) if args is not None else {}
        for arg in method.args:
            if arg.name in resolved or arg.name not in hints.default_arguments:
                continue
            default = hints.default_arguments[arg.name]
            try:
                resolved[arg.name] = self.resolve(default["source"], default["data"])
            except (KeyError, StateNotFoundError) as e:
                raise MissingArgumentError(arg.name) from e
        return resolved

    def resolve(
        self, source: DefaultArgumentType | str, data: Any  # noqa: ANN401
    ) -> MethodArg:
        """Look up the value of a default argument from where its hint says it lives"""
        match source:
            case "global-state":
                return self.get_application_state()[data]
            case "local-state":
                return self.get_account_state()[data]
            case "abi-method":
                method = abi.Method.undictify(data) if isinstance(data, dict) else data
                return self.call(method).return_value
            case _:
                return data

    def fund(self, amt: int, addr: str | None = None) -> str:
        """convenience method to pay the address passed, defaults to paying the app address for
        this client from the current signer"""
        signer = self.get_signer()
        sender = self.get_sender(None, signer)

        if addr is None:
            self._require_app_id()
            addr = get_application_address(self.app_id)

        sp = self.get_suggested_params()
        result = self._submit(transaction.PaymentTxn(sender, sp, addr, amt), signer)
        return result.tx_ids[0]

    def get_application_state(self, raw: bool = False) -> DecodedState:
        self._require_app_id()
        app_info = self.client.application_info(self.app_id)
        assert isinstance(app_info, dict)
        if "params" not in app_info or "global-state" not in app_info["params"]:
            raise StateNotFoundError("No global state found")
        return decode_state(app_info["params"]["global-state"], raw=raw)

    def get_account_state(
        self, address: str | None = None, raw: bool = False
    ) -> DecodedState:
        self._require_app_id()
        if address is None:
            address = self.get_sender()

        acct_info = self.client.account_application_info(address, self.app_id)
        assert isinstance(acct_info, dict)
        if (
            "app-local-state" not in acct_info
            or "key-value" not in acct_info["app-local-state"]
        ):
            raise StateNotFoundError("No local state found")
        return decode_state(acct_info["app-local-state"]["key-value"], raw=raw)

    def prepare(
        self,
        signer: TransactionSigner | None = None,
        sender: str | None = None,
        app_id: int | None = None,
        wait_rounds: int | None = None,
    ) -> "ApplicationClient":
        """makes a copy of the current ApplicationClient and the fields passed"""
        prepared = copy.copy(self)
        prepared._compile_lock = threading.Lock()

        if signer is not None:
            prepared.signer = signer
        prepared.sender = sender or _signer_address(signer) or self.sender
        if app_id is not None:
            prepared.app_id = app_id
        if wait_rounds is not None:
            prepared.wait_rounds = wait_rounds
        return prepared

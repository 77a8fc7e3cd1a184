import re
from copy import copy
from typing import TypedDict

from algosdk.source_map import SourceMap

__all__ = [
    "LOGIC_ERROR",
    "LogicErrorData",
    "LogicException",
    "parse_logic_error",
    "wrap_logic_error",
]

#: algod's rejection text for a program failure, the pc is reported in the details
LOGIC_ERROR = re.compile(
    r"transaction (?P<txid>[A-Z0-9]+): logic eval error: (?P<msg>.*?)\. "
    r"Details: .*?pc=(?P<pc>[0-9]+)",
    re.DOTALL,
)


class LogicErrorData(TypedDict):
    txid: str
    msg: str
    pc: int


def parse_logic_error(
    error_str: str,
) -> LogicErrorData | None:
    match = LOGIC_ERROR.search(error_str)
    if match is None:
        return None

    return {
        "txid": match.group("txid"),
        "msg": match.group("msg"),
        "pc": int(match.group("pc")),
    }


class LogicException(Exception):
    def __init__(
        self,
        logic_error: Exception,
        program: str,
        map: SourceMap,
        txid: str,
        msg: str,
        pc: int,
    ):
        self.logic_error = logic_error
        self.logic_error_str = str(logic_error)

        self.program = program
        self.map = map
        self.lines = program.split("\n")

        self.txid, self.msg, self.pc = txid, msg, pc
        self.line_no: int | None = self.map.get_line_for_pc(self.pc)

    @property
    def source_line(self) -> str | None:
        if self.line_no is None or self.line_no >= len(self.lines):
            return None
        return self.lines[self.line_no]

    def __str__(self) -> str:
        return (
            f"Txn {self.txid} had error '{self.msg}' at PC {self.pc} "
            f"and Source Line {self.line_no}: \n\n\t{self.trace()}"
        )

    def trace(self, lines: int = 5) -> str:
        if self.source_line is None:
            return ""

        assert self.line_no is not None
        program_lines = copy(self.lines)
        program_lines[self.line_no] += "\t\t<-- Error"
        lines_before = max(0, self.line_no - lines)
        lines_after = min(len(program_lines), self.line_no + lines)
        return "\n\t".join(program_lines[lines_before:lines_after])


def wrap_logic_error(
    e: Exception, program: str | None, map: SourceMap | None
) -> Exception:
    """
    Map a failed submission back to the program source.

    Returns a LogicException when the error text is a logic eval failure and both
    the program and its source map are known, otherwise returns ``e`` unchanged.
    """
    if program is None or map is None:
        return e

    led = parse_logic_error(str(e))
    if led is None:
        return e

    return LogicException(e, program, map, **led)

import base64
import logging

from algosdk.source_map import SourceMap
from algosdk.v2client.algod import AlgodClient

__all__ = [
    "Program",
]

log = logging.getLogger(__name__)


class Program:
    """
    Program takes a TEAL program and handles its compilation, keeping the
    binary and the source map used for matching pc to line number
    """

    def __init__(self, program: str, client: AlgodClient):
        """
        Fully compile the program source to binary and generate a
        source map for matching pc to line number
        """
        self.teal = program
        log.debug("Compiling program of %d lines", len(program.splitlines()))
        self._result = client.compile(self.teal, source_map=True)
        self.raw_binary = base64.b64decode(self._result["result"])
        self.binary_hash: str = self._result["hash"]
        self.source_map = SourceMap(self._result["sourcemap"])

    @staticmethod
    def from_b64_source(b64_program: str, client: AlgodClient) -> "Program":
        return Program(base64.b64decode(b64_program).decode("utf8"), client)

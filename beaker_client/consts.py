from math import ceil
from typing import Final

from algosdk.constants import APP_PAGE_MAX_SIZE, key_len_bytes

#: number of microalgos in 1 Algo
algo: Final[int] = int(1e6)

#: Number of rounds to wait for a submitted group to be confirmed
DEFAULT_WAIT_ROUNDS: Final[int] = 4

#: Length in bytes of a public key, a byte value this long decodes to an address
ADDRESS_LENGTH: Final[int] = key_len_bytes

#: Prefix logged ahead of an ABI return value
ABI_RETURN_PREFIX: Final[bytes] = bytes.fromhex("151f7c75")


def num_extra_program_pages(approval: bytes, clear: bytes) -> int:
    return max(
        0, ceil(((len(approval) + len(clear)) - APP_PAGE_MAX_SIZE) / APP_PAGE_MAX_SIZE)
    )

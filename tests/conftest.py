from collections.abc import Iterator

import pytest


@pytest.fixture(autouse=True, scope="function")
def reset_pyteal() -> Iterator[None]:
    """Reset the PyTeal globals touched by compileTeal so compiled test programs don't depend on test order"""

    from pyteal.ast.scratch import NUM_SLOTS, ScratchSlot
    from pyteal.ast.subroutine import SubroutineDefinition

    ScratchSlot.nextSlotId = NUM_SLOTS
    SubroutineDefinition.nextSubroutineId = 0

    yield  # let the test run

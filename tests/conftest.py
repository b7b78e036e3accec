import pytest
import pytest_asyncio

from petcore.memory import SlotMemory
from petcore.state import PetType, Stats, create_pet

T0 = 1_700_000_000_000
MINUTE = 60_000
DAY = 24 * 60 * MINUTE


class FakeClock:
    def __init__(self, now=T0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


def with_stats(pet, **stats):
    return pet.model_copy(update={'stats': Stats(**{**pet.stats.model_dump(), **stats})})


@pytest.fixture
def pet():
    return create_pet('Mochi', PetType.CAT, now=T0)


@pytest.fixture
def clock():
    return FakeClock()


@pytest_asyncio.fixture
async def memory(tmp_path):
    memory = SlotMemory(str(tmp_path / 'slots.db'))
    await memory.initialize()
    return memory

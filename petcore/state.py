# state.py

import logging
import math
import time
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

STAT_NAMES = ('hunger', 'happiness', 'health', 'energy', 'cleanliness')
STAT_MIN = 0.0
STAT_MAX = 100.0
XP_CEILING = 9999
DEFAULT_STARTING_COINS = 1000


def now_ms() -> int:
    """Current wall-clock time as integer epoch milliseconds."""
    return int(time.time() * 1000)


def new_record_id(prefix: str, now: int) -> str:
    return f"{prefix}_{now}_{uuid.uuid4().hex[:9]}"


def clamp(value: float, low: float = STAT_MIN, high: float = STAT_MAX) -> float:
    return min(max(value, low), high)


def coerce_stat(value) -> float:
    """Turn a stored stat into a float, falling back to 100 when it is unusable."""
    if isinstance(value, bool):
        return STAT_MAX
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(value)
        except (TypeError, ValueError):
            return STAT_MAX
    if math.isnan(number) or math.isinf(number):
        return STAT_MAX
    return number


def coerce_count(value) -> int:
    """A stored non-negative whole number; anything unusable counts as 0."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        return max(0, int(float(value)))
    except (TypeError, ValueError, OverflowError):
        return 0


def coerce_timestamp(value) -> Optional[int]:
    """Epoch ms from a stored number, numeric string or ISO date. None when unusable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        try:
            number = float(text)
        except ValueError:
            try:
                moment = datetime.fromisoformat(text.replace('Z', '+00:00'))
            except ValueError:
                return None
            if moment.tzinfo is None:
                moment = moment.replace(tzinfo=timezone.utc)
            return int(moment.timestamp() * 1000)
    if not math.isfinite(number) or number < 0:
        return None
    return int(number)


class StoredModel(BaseModel):
    """Base for everything that round-trips through a save slot.

    Attributes are snake_case; the stored JSON keeps the camelCase keys older
    saves were written with.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class PetType(str, Enum):
    CAT = 'cat'
    DOG = 'dog'
    RABBIT = 'rabbit'


class ExpenseType(str, Enum):
    FOOD = 'food'
    TOY = 'toy'
    HEALTHCARE = 'healthcare'
    SUPPLIES = 'supplies'
    CARE = 'care'
    PURCHASE = 'purchase'
    ACTIVITY = 'activity'
    # Legacy slot journals recorded income here; never shown on a pet.
    EARNING = 'earning'


class RewardSource(str, Enum):
    QUEST = 'quest'
    TASK = 'task'
    MINIGAME = 'minigame'
    BONUS = 'bonus'


class Stats(StoredModel):
    hunger: float = STAT_MAX
    happiness: float = STAT_MAX
    health: float = STAT_MAX
    energy: float = STAT_MAX
    cleanliness: float = STAT_MAX

    @field_validator(*STAT_NAMES, mode='before')
    @classmethod
    def _coerce(cls, value):
        return coerce_stat(value)

    def adjust(self, **deltas) -> 'Stats':
        """Apply stat deltas, clamping every touched stat to [0, 100]."""
        values = self.model_dump()
        for name, delta in deltas.items():
            values[name] = clamp(values[name] + delta)
        return Stats(**values)

    def clamped(self) -> 'Stats':
        return Stats(**{name: clamp(value) for name, value in self.model_dump().items()})


class ExpenseEntry(StoredModel):
    id: str
    timestamp: int
    amount: int = Field(gt=0)
    description: str = ''
    category: ExpenseType = Field(default=ExpenseType.CARE, alias='type')
    item_name: Optional[str] = None


class IncomeRecord(StoredModel):
    id: str
    timestamp: int
    amount: int = Field(gt=0)
    description: str = ''
    source: str = RewardSource.BONUS.value
    type: str = 'income'


class EvolutionEvent(StoredModel):
    id: str
    from_stage: int
    to_stage: int
    at_xp: int


class Pet(StoredModel):
    id: str
    name: str
    pet_type: PetType = PetType.CAT
    xp: int = Field(default=0, ge=0)
    age_stage: int = Field(default=0, ge=0, le=3)
    tricks: List[str] = Field(default_factory=list)
    badges: List[str] = Field(default_factory=list)
    stats: Stats = Field(default_factory=Stats)
    coins: int = Field(default=0, ge=0)
    lifetime_earnings: int = Field(default=0, ge=0)
    expenses: List[ExpenseEntry] = Field(default_factory=list)
    inventory: Dict[int, int] = Field(default_factory=dict)
    created_at: int
    last_updated: int
    last_tick_at: Optional[int] = None
    evolved: bool = False
    last_evolution_ack_id: Optional[str] = None

    @field_validator('coins', 'lifetime_earnings', 'xp', mode='before')
    @classmethod
    def _whole_non_negative(cls, value):
        return coerce_count(value)

    @field_validator('inventory', mode='before')
    @classmethod
    def _inventory(cls, value):
        if not isinstance(value, dict):
            return {}
        inventory = {}
        for key, quantity in value.items():
            try:
                item_id = int(key)
            except (TypeError, ValueError):
                logger.warning("Dropping inventory entry with unusable item id %r", key)
                continue
            inventory[item_id] = coerce_count(quantity)
        return inventory

    @property
    def tick_marker(self) -> int:
        """Last decay time, falling back to older markers for records written before it existed."""
        return self.last_tick_at or self.last_updated or self.created_at

    def to_dict(self):
        """Convert the pet to its stored dictionary form."""
        return self.model_dump(mode='json', by_alias=True)


class ActionResult(BaseModel):
    success: bool
    pet: Pet
    message: Optional[str] = None
    evolution: Optional[EvolutionEvent] = None


def create_pet(name: str, pet_type: PetType, coins: int = DEFAULT_STARTING_COINS, now: Optional[int] = None) -> Pet:
    """Create a fresh stage-0 pet with full stats.

    No evolution event is produced here: there is no earlier stage to
    transition from.
    """
    now = now_ms() if now is None else now
    return Pet(
        id=f"{now}-{uuid.uuid4().hex[:9]}",
        name=name.strip(),
        pet_type=PetType(pet_type),
        xp=0,
        age_stage=0,
        coins=max(0, coins),
        created_at=now,
        last_updated=now,
        last_tick_at=now,
    )


def create_demo_pet(name: str = 'Demo Pet', pet_type: PetType = PetType.CAT, now: Optional[int] = None) -> Pet:
    """Pet with boosted stats and some XP, for demonstrations."""
    from petcore.progression import add_experience

    pet = create_pet(name, pet_type, coins=5000, now=now)
    pet = pet.model_copy(update={
        'stats': Stats(hunger=85, happiness=90, health=95, energy=80, cleanliness=88),
    })
    return add_experience(pet, 75)

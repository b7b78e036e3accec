# rewards.py

import logging
import random
from typing import Optional, Union

from pydantic import BaseModel, Field

from petcore.activity_constraints import is_activity_allowed, time_remaining, today_key
from petcore.ledger import earn, give, income_record
from petcore.progression import award_experience
from petcore.state import EvolutionEvent, IncomeRecord, Pet, RewardSource, StoredModel, now_ms

logger = logging.getLogger(__name__)

WEEKLY_ALLOWANCE_AMOUNT = 70

DAILY_CHECK_IN_COINS_MIN = 12
DAILY_CHECK_IN_COINS_MAX = 15
DAILY_CHECK_IN_XP = 1


class MiniGameReward(StoredModel):
    coins: int = Field(default=0, ge=0)
    happiness: int = Field(default=0, ge=0)
    clean: int = Field(default=0, ge=0)
    xp: int = Field(default=0, ge=0)


class RewardResult(BaseModel):
    success: bool
    pet: Pet
    income: Optional[IncomeRecord] = None
    evolution: Optional[EvolutionEvent] = None
    # Epoch ms for the allowance, a YYYY-MM-DD key for the check-in.
    claimed_at: Optional[Union[int, str]] = None


def apply_minigame_reward(pet: Pet, reward: MiniGameReward, now: Optional[int] = None) -> RewardResult:
    """Apply a finished mini-game's payout. Non-positive parts are skipped."""
    now = now_ms() if now is None else now
    income = None
    if reward.coins > 0:
        pet, income = give(pet, reward.coins, RewardSource.MINIGAME, now=now)

    deltas = {}
    if reward.happiness > 0:
        deltas['happiness'] = reward.happiness
    if reward.clean > 0:
        deltas['cleanliness'] = reward.clean
    pet = pet.model_copy(update={'stats': pet.stats.adjust(**deltas), 'last_updated': now})

    evolution = None
    if reward.xp > 0:
        pet, evolution = award_experience(pet, reward.xp)
    return RewardResult(success=True, pet=pet, income=income, evolution=evolution)


def can_claim_allowance(now: int, last_claim: Optional[int]) -> bool:
    return is_activity_allowed('weekly_allowance', last_claim, now)


def time_until_allowance(now: int, last_claim: Optional[int]) -> str:
    remaining = time_remaining('weekly_allowance', last_claim, now)
    if remaining <= 0:
        return 'Available now'
    days, rest = divmod(remaining, 24 * 3600)
    hours, rest = divmod(rest, 3600)
    minutes = rest // 60
    if days > 0:
        formatted = f"{days}d {hours}h"
    elif hours > 0:
        formatted = f"{hours}h {minutes}m"
    else:
        formatted = f"{minutes}m"
    return f"Next allowance in {formatted}"


def claim_allowance(pet: Pet, now: int, last_claim: Optional[int]) -> Optional[RewardResult]:
    """Pay the weekly allowance, or None while it is still on cooldown."""
    if not can_claim_allowance(now, last_claim):
        return None
    description = f"Weekly Allowance: {WEEKLY_ALLOWANCE_AMOUNT} coins"
    pet = earn(pet, WEEKLY_ALLOWANCE_AMOUNT, description, now=now)
    income = income_record(WEEKLY_ALLOWANCE_AMOUNT, description, 'Weekly Allowance', now,
                           prefix='income_allowance')
    logger.info("Weekly allowance paid to pet %s", pet.id)
    return RewardResult(success=True, pet=pet, income=income, claimed_at=now)


def is_check_in_available(now: int, last_check_in: Optional[str]) -> bool:
    return not last_check_in or last_check_in != today_key(now)


def check_in_coins(rng=None) -> int:
    rng = rng or random
    return rng.randint(DAILY_CHECK_IN_COINS_MIN, DAILY_CHECK_IN_COINS_MAX)


def claim_daily_check_in(pet: Pet, now: int, last_check_in: Optional[str], rng=None) -> Optional[RewardResult]:
    """Pay today's check-in reward once per local calendar day."""
    if not is_check_in_available(now, last_check_in):
        return None
    coins = check_in_coins(rng)
    pet = earn(pet, coins, 'Daily Check-In Reward', now=now)
    pet, evolution = award_experience(pet, DAILY_CHECK_IN_XP)
    income = income_record(coins, 'Daily Check-In Reward', 'Daily Check-In', now)
    return RewardResult(success=True, pet=pet, income=income, evolution=evolution, claimed_at=today_key(now))

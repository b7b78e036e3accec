# demo.py

import logging
import random
from typing import List, Optional

from pydantic import BaseModel

from petcore.activity_constraints import today_key
from petcore.ledger import income_record
from petcore.progression import add_experience
from petcore.rewards import DAILY_CHECK_IN_COINS_MAX, DAILY_CHECK_IN_COINS_MIN, WEEKLY_ALLOWANCE_AMOUNT
from petcore.shop import CATALOG, expense_type_for, items_in_category
from petcore.state import (
    ExpenseEntry,
    IncomeRecord,
    Pet,
    PetType,
    RewardSource,
    Stats,
    create_pet,
    new_record_id,
    now_ms,
)
from petcore.tasks import TASKS

logger = logging.getLogger(__name__)

# Bump when the seeded history changes shape so existing demo slots are re-seeded.
DEMO_SEED_VERSION = 1
DEMO_DAYS = 30
DEMO_STARTING_COINS = 1500
DEMO_XP = 35
DEMO_BADGES = ('first_purchase', 'budget_starter', 'growing_up')
DAY_MS = 24 * 3600 * 1000
HOUR_MS = 3600 * 1000


class DemoSeed(BaseModel):
    pet: Pet
    income: List[IncomeRecord]
    last_check_in: str


def _moment(now, day, rng, first_hour=9, last_hour=18):
    hour = rng.randint(first_hour, last_hour)
    minute = rng.randint(0, 59)
    return now - day * DAY_MS + hour * HOUR_MS + minute * 60000


def _purchase(item, timestamp):
    return ExpenseEntry(
        id=new_record_id('demo_expense', timestamp),
        timestamp=timestamp,
        amount=item.price,
        description=f"Purchased {item.name}",
        category=expense_type_for(item),
        item_name=item.name,
    )


def seed_expenses(now, rng, catalog=CATALOG) -> List[ExpenseEntry]:
    """A month of purchases drawn from the catalog.

    Food every day or two, supplies weekly, toys twice a week, an outing on
    weekends and one health purchase mid-month.
    """
    food = items_in_category('food', catalog)
    supplies = items_in_category('supplies', catalog)
    toys = items_in_category('toys', catalog)
    outings = items_in_category('activity', catalog)
    health = items_in_category('health', catalog)

    expenses = []
    for day in range(DEMO_DAYS, 0, -1):
        if day % 2 == 0 or rng.random() < 0.5:
            item = food[0] if rng.random() < 0.7 else food[-1]
            expenses.append(_purchase(item, _moment(now, day, rng, 7, 10)))
        if day % 7 == 3:
            expenses.append(_purchase(rng.choice(supplies), _moment(now, day, rng)))
        if day % 7 in (1, 4):
            expenses.append(_purchase(rng.choice(toys), _moment(now, day, rng)))
        if day % 7 in (5, 6) and rng.random() < 0.6:
            expenses.append(_purchase(rng.choice(outings), _moment(now, day, rng, 10, 16)))
        if day == DEMO_DAYS // 2:
            expenses.append(_purchase(health[0], _moment(now, day, rng)))
    return sorted(expenses, key=lambda e: e.timestamp)


def seed_income(now, target, rng) -> List[IncomeRecord]:
    """Check-ins, allowances, tasks and quests adding up to roughly `target` coins."""
    income = []
    for day in range(DEMO_DAYS, 0, -1):
        coins = rng.randint(DAILY_CHECK_IN_COINS_MIN, DAILY_CHECK_IN_COINS_MAX)
        income.append(income_record(coins, 'Daily Check-In Reward', 'Daily Check-In',
                                    _moment(now, day, rng, 8, 9)))
        if day % 7 == 0:
            income.append(income_record(WEEKLY_ALLOWANCE_AMOUNT, f"Weekly Allowance: {WEEKLY_ALLOWANCE_AMOUNT} coins",
                                        'Weekly Allowance', _moment(now, day, rng, 8, 9),
                                        prefix='income_allowance'))

    total = sum(record.amount for record in income)
    while total < target:
        day = rng.randint(1, DEMO_DAYS)
        if rng.random() < 0.6:
            task = rng.choice(TASKS)
            amount, source = task.coins, RewardSource.TASK
        else:
            amount, source = rng.choice((20, 30, 45)), RewardSource.QUEST
        income.append(income_record(amount, f"Earned {amount} coins from {source.value}",
                                    source.value, _moment(now, day, rng, 12, 20)))
        total += amount
    return sorted(income, key=lambda r: r.timestamp)


def create_demo_data(now: Optional[int] = None, rng=None) -> DemoSeed:
    """A mid-stage pet with a balanced month of spending and earning behind it."""
    now = now_ms() if now is None else now
    rng = rng or random.Random()

    expenses = seed_expenses(now, rng)
    spent = sum(entry.amount for entry in expenses)
    income = seed_income(now, int(spent * rng.uniform(0.9, 1.1)), rng)
    earned = sum(record.amount for record in income)

    pet = create_pet('Demo', PetType.CAT, coins=DEMO_STARTING_COINS, now=now)
    pet = add_experience(pet, DEMO_XP)
    pet = pet.model_copy(update={
        'stats': Stats(hunger=75, happiness=82, health=88, energy=70, cleanliness=78),
        'coins': max(0, DEMO_STARTING_COINS + earned - spent),
        'lifetime_earnings': earned,
        'expenses': expenses,
        'badges': list(DEMO_BADGES),
    })
    logger.info("Seeded demo history: %s expenses (%s coins), %s income records (%s coins)",
                len(expenses), spent, len(income), earned)
    # Yesterday, so today's check-in is still open.
    return DemoSeed(pet=pet, income=income, last_check_in=today_key(now - DAY_MS))

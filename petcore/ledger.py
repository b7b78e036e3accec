# ledger.py

import logging
import math
from typing import Dict, Iterable, Optional, Tuple

from pydantic import BaseModel

from petcore.state import (
    ExpenseEntry,
    ExpenseType,
    IncomeRecord,
    Pet,
    RewardSource,
    new_record_id,
    now_ms,
)

logger = logging.getLogger(__name__)

# Categories a pet's own journal may carry; EARNING only lives in legacy slot journals.
PET_EXPENSE_TYPES = tuple(t for t in ExpenseType if t is not ExpenseType.EARNING)


class SpendResult(BaseModel):
    ok: bool
    pet: Pet
    message: Optional[str] = None


def whole_amount(amount) -> Optional[int]:
    """The whole number of coins `amount` stands for, or None if that is not at least 1.

    Fractions are truncated, so the balance check, the deduction and the
    journal entry all see the same value.
    """
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        return None
    if not math.isfinite(amount):
        return None
    whole = int(amount)
    return whole if whole >= 1 else None


def earn(pet: Pet, amount: int, description: str = 'Earned coins', now: Optional[int] = None) -> Pet:
    """Add coins and count them toward lifetime earnings."""
    coins = whole_amount(amount)
    if coins is None:
        logger.warning("earn: rejected amount %r (%s)", amount, description)
        return pet
    now = now_ms() if now is None else now
    return pet.model_copy(update={
        'coins': pet.coins + coins,
        'lifetime_earnings': pet.lifetime_earnings + coins,
        'last_updated': now,
    })


def spend(pet: Pet, amount: int, reason: str = '', now: Optional[int] = None) -> SpendResult:
    cost = whole_amount(amount)
    if cost is None:
        return SpendResult(ok=False, pet=pet, message=f"Invalid cost: {amount}. Cost must be greater than 0.")
    if pet.coins < cost:
        return SpendResult(
            ok=False,
            pet=pet,
            message=f"Not enough coins! You need {cost} but only have {pet.coins}.",
        )
    now = now_ms() if now is None else now
    logger.debug("spend: %s coins for %s", cost, reason or 'unspecified')
    return SpendResult(ok=True, pet=pet.model_copy(update={
        'coins': pet.coins - cost,
        'last_updated': now,
    }))


def log_expense(
    pet: Pet,
    category: ExpenseType,
    amount: int,
    description: str,
    item_name: Optional[str] = None,
    now: Optional[int] = None,
) -> Pet:
    """Append an expense entry to the pet's journal.

    Sits on every paid action path, so bad amounts are logged and ignored
    rather than raised.
    """
    cost = whole_amount(amount)
    if cost is None:
        logger.warning("log_expense: rejected amount %r for %s", amount, description)
        return pet
    now = now_ms() if now is None else now
    entry = ExpenseEntry(
        id=new_record_id('expense', now),
        timestamp=now,
        amount=cost,
        description=description,
        category=ExpenseType(category),
        item_name=item_name,
    )
    return pet.model_copy(update={
        'expenses': [*pet.expenses, entry],
        'last_updated': now,
    })


def income_record(amount: int, description: str, source: str, now: int, prefix: str = 'income') -> IncomeRecord:
    return IncomeRecord(
        id=new_record_id(prefix, now),
        timestamp=now,
        amount=int(amount),
        description=description,
        source=source,
    )


def give(pet: Pet, amount: int, source: RewardSource, now: Optional[int] = None) -> Tuple[Pet, Optional[IncomeRecord]]:
    """Earn coins from a reward source and produce the matching income record.

    The record is None when the amount is rejected; the pet is always returned.
    """
    coins = whole_amount(amount)
    if coins is None:
        logger.warning("give: rejected amount %r from %s", amount, source)
        return pet, None
    now = now_ms() if now is None else now
    source = RewardSource(source)
    description = f"Earned {coins} coins from {source.value}"
    pet = earn(pet, coins, description, now=now)
    return pet, income_record(coins, description, source.value, now)


def total_care_cost(expenses: Iterable[ExpenseEntry]) -> int:
    return sum(entry.amount for entry in expenses if entry.category is not ExpenseType.EARNING)


def care_cost_by_category(expenses: Iterable[ExpenseEntry]) -> Dict[str, int]:
    totals = {category.value: 0 for category in PET_EXPENSE_TYPES}
    for entry in expenses:
        if entry.category.value in totals:
            totals[entry.category.value] += entry.amount
    return totals


def total_income(income: Iterable[IncomeRecord]) -> int:
    return sum(abs(record.amount) for record in income)

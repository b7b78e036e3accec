# care.py

from typing import Optional

from petcore.ledger import log_expense, spend, whole_amount
from petcore.progression import award_experience
from petcore.state import ActionResult, ExpenseType, Pet


def free_care(pet: Pet, now: int, xp: int, message: Optional[str] = None, **deltas) -> ActionResult:
    """Apply stat deltas and XP without touching coins or the journal."""
    cared = pet.model_copy(update={'stats': pet.stats.adjust(**deltas), 'last_updated': now})
    cared, evolution = award_experience(cared, xp)
    return ActionResult(success=True, pet=cared, message=message, evolution=evolution)


def paid_care(
    pet: Pet,
    now: int,
    cost: int,
    label: str,
    category: ExpenseType,
    xp: int,
    message: Optional[str] = None,
    insufficient_message: Optional[str] = None,
    **deltas,
) -> ActionResult:
    """Charge `cost`, apply deltas and XP, then journal the expense under `category`."""
    paid = spend(pet, cost, label, now=now)
    if not paid.ok:
        if insufficient_message and whole_amount(cost) is not None:
            return ActionResult(success=False, pet=pet, message=insufficient_message)
        return ActionResult(success=False, pet=pet, message=paid.message)

    result = free_care(paid.pet, now, xp, message=message, **deltas)
    cared = log_expense(result.pet, category, cost, label, now=now)
    return result.model_copy(update={'pet': cared})

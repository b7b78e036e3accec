# activities/visit_vet.py

from petcore.care import paid_care
from petcore.state import ExpenseType


def run(pet, now, cost=None, health_restore=15, happiness_bonus=0):
    """
    Activity: Visit Vet
    Description: Paid health care. The caller picks the service tier, which sets
    the cost, the health restored and an optional happiness bonus. There is no
    free vet visit; a missing or non-positive cost is rejected.
    """
    happiness = happiness_bonus if happiness_bonus > 0 else -1
    return paid_care(
        pet, now, cost, 'Health care service', ExpenseType.HEALTHCARE, xp=1,
        message=f"Vet visit complete. Health +{health_restore}",
        insufficient_message=(
            f"Not enough coins for health care. You need {cost} coins but only have {pet.coins}."
        ),
        health=health_restore, happiness=happiness,
    )
